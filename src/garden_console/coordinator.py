"""Turn UI intents into signed contract executions and reconcile the outcome."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from .errors import ChainConnectionError, GardenError, SubmissionError
from .events import EventBus, Toast
from .models import DegenMetadata, GardenSettings, ShitcoinMetadata, ShitcoinPage
from .notifications import NotificationGate
from .operations import (
    CATEGORIES,
    NO_ASSET,
    Coin,
    GasPrice,
    OperationKind,
    OperationTracker,
    fee_for,
    normalize_integer,
    normalize_text,
    to_base_units,
)
from .wallet import TxOutcome, WalletSession

logger = logging.getLogger(__name__)


class OperationCoordinator:
    """Submit the six lifecycle operations through the active wallet session.

    Each call holds a reservation for its ``(kind, denom)`` key for the whole
    round-trip, so callers can bind controls to :meth:`is_busy`. Success
    toasts go through the notification gate; error toasts always show.
    """

    def __init__(
        self,
        session: WalletSession,
        tracker: OperationTracker,
        gate: NotificationGate,
        bus: EventBus,
    ) -> None:
        self.session = session
        self.tracker = tracker
        self.gate = gate
        self.bus = bus
        self.config = session.config
        self.gas_price = GasPrice.from_string(self.config.gas_price)
        tracker.subscribe(
            lambda kind, asset, busy: bus.busy_changed.emit(kind.value, asset, busy)
        )

    @property
    def working(self) -> bool:
        return self.tracker.working

    def is_busy(self, kind: OperationKind, denom: str = NO_ASSET) -> bool:
        return self.tracker.is_busy(kind, denom)

    async def create_shitcoin(self, ticker: str, name: str, supply: str) -> Optional[TxOutcome]:
        self.session.require_connected()
        ticker = normalize_text(ticker)
        msg = {
            "create_shitcoin": {
                "ticker": ticker,
                "name": normalize_text(name),
                "supply": normalize_integer(supply, "supply"),
            }
        }
        funds = [Coin(self.config.create_fee_amount, self.config.create_fee_denom)]
        return await self.invoke(
            OperationKind.CREATE,
            NO_ASSET,
            msg,
            funds,
            success_message=(
                f"The shitcoin ${ticker} has been created, I hope you're proud of yourself."
            ),
        )

    async def enter_presale(self, denom: str, amount: str) -> Optional[TxOutcome]:
        self.session.require_connected()
        denom = normalize_text(denom)
        funds = [Coin(to_base_units(amount), self.config.presale_denom)]
        return await self.invoke(
            OperationKind.ENTER_PRESALE,
            denom,
            {"enter_presale": {"denom": denom}},
            funds,
            success_message="Presale Entered! You brave (degenerate) soul",
        )

    async def extend_presale(self, denom: str) -> Optional[TxOutcome]:
        self.session.require_connected()
        denom = normalize_text(denom)
        return await self.invoke(
            OperationKind.EXTEND_PRESALE,
            denom,
            {"extend_presale": {"denom": denom}},
            success_message="Presale extended another 24 hours, just let it die next time.",
        )

    async def launch_shitcoin(self, denom: str) -> Optional[TxOutcome]:
        self.session.require_connected()
        denom = normalize_text(denom)
        return await self.invoke(
            OperationKind.LAUNCH,
            denom,
            {"launch_shitcoin": {"denom": denom}},
            success_message="Shitcoin Launched!",
        )

    async def claim_shitcoin(self, denom: str) -> Optional[TxOutcome]:
        self.session.require_connected()
        denom = normalize_text(denom)
        return await self.invoke(
            OperationKind.CLAIM,
            denom,
            {"claim_shitcoin": {"denom": denom}},
            success_message="Shitcoins Claimed! Good luck, you'll be needing it.",
        )

    async def set_url(self, denom: str, url: str) -> Optional[TxOutcome]:
        self.session.require_connected()
        denom = normalize_text(denom)
        return await self.invoke(
            OperationKind.SET_METADATA,
            denom,
            {"set_url": {"denom": denom, "url": normalize_text(url)}},
            success_message="Url Set! Your coin is still shit.",
        )

    async def invoke(
        self,
        kind: OperationKind,
        asset_key: str,
        msg: dict[str, Any],
        funds: Sequence[Coin] = (),
        success_message: str = "",
    ) -> Optional[TxOutcome]:
        """Reserve, submit and settle one operation.

        Returns the transaction outcome, or ``None`` when the key was already
        busy or the submission failed (the failure is toasted).
        """

        client = self.session.require_connected()
        sender = self.session.address
        if not self.tracker.try_reserve(kind, asset_key):
            logger.debug("%s already in flight for %r; ignoring", kind.value, asset_key)
            return None

        fee = fee_for(kind, self.gas_price)
        logger.info("Submitting %s for %r: %s", kind.value, asset_key or "-", msg)
        try:
            outcome = await client.execute(
                sender,
                self.config.contract_address,
                msg,
                fee,
                "",
                list(funds),
            )
        except Exception as exc:  # noqa: BLE001 - every failure is surfaced to the user
            error = _submission_error(exc)
            logger.warning(
                "%s failed for %r: %r", kind.value, asset_key or "-", error, exc_info=True
            )
            self.bus.toast.emit(Toast(f"Something went wrong: {error}"))
            return None
        finally:
            self.tracker.release(kind, asset_key)

        logger.info("%s settled in %s", kind.value, outcome.transaction_hash)
        category = CATEGORIES[kind]
        if self.gate.should_notify(category):
            self.bus.toast.emit(Toast(success_message, category))
        if asset_key == NO_ASSET:
            self.bus.reload_all.emit()
        else:
            self.bus.reload.emit(asset_key)
        return outcome

    async def shitcoins(
        self, page: Optional[int] = None, limit: Optional[int] = None
    ) -> ShitcoinPage:
        params = {key: value for key, value in (("page", page), ("limit", limit)) if value is not None}
        response = await self._query({"shitcoins": params})
        return ShitcoinPage.from_json(response)

    async def shitcoin_metadata(self, denom: str) -> ShitcoinMetadata:
        response = await self._query({"shitcoin_metadata": {"denom": normalize_text(denom)}})
        return ShitcoinMetadata.from_json(response)

    async def degen_metadata(self, denom: str, degen: Optional[str] = None) -> DegenMetadata:
        self.session.require_connected()
        response = await self._query(
            {
                "degen_metadata": {
                    "denom": normalize_text(denom),
                    "degen": degen or self.session.address,
                }
            }
        )
        return DegenMetadata.from_json(response)

    async def garden_config(self) -> GardenSettings:
        return GardenSettings.from_json(await self._query({"config": {}}))

    async def balance(self, denom: str) -> int:
        """Balance of the connected account in ``denom``, in base units."""

        client = self.session.require_connected()
        coin = await client.get_balance(self.session.address, denom)
        return coin.amount

    async def _query(self, msg: dict[str, Any]) -> Any:
        client = self.session.require_connected()
        return await client.query(self.config.contract_address, msg)


def _submission_error(exc: Exception) -> GardenError:
    """Map a client failure onto the console taxonomy, keeping its message."""

    if isinstance(exc, GardenError):
        return exc
    if isinstance(exc, (ConnectionError, TimeoutError)):
        error: GardenError = ChainConnectionError(str(exc))
    else:
        error = SubmissionError(str(exc))
    error.__cause__ = exc
    return error
