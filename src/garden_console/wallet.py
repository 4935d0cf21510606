"""Wallet session management for the garden console."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Optional,
    Protocol,
    Sequence,
)

from .config import GardenConfig
from .errors import (
    AuthorizationDenied,
    ChainConnectionError,
    GardenError,
    NotConnected,
    WalletUnavailable,
)
from .events import EventBus
from .operations import Coin, Fee
from .preferences import CONNECTED_KEY, PreferenceStore

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


@dataclass(frozen=True)
class Account:
    address: str
    algo: str = "secp256k1"
    pubkey: bytes = b""


@dataclass(frozen=True)
class TxOutcome:
    transaction_hash: str
    height: int = 0
    gas_used: int = 0


class OfflineSigner(Protocol):
    async def get_accounts(self) -> Sequence[Account]:
        ...


class ChainClient(Protocol):
    """Signing client opened against the chain's RPC node."""

    async def execute(
        self,
        sender: str,
        contract: str,
        msg: dict[str, Any],
        fee: Fee,
        memo: str = "",
        funds: Sequence[Coin] = (),
    ) -> TxOutcome:
        ...

    async def query(self, contract: str, msg: dict[str, Any]) -> Any:
        ...

    async def get_balance(self, address: str, denom: str) -> Coin:
        ...

    def disconnect(self) -> None:
        ...


class WalletExtension(Protocol):
    """Browser-style wallet: authorization, signer, key-store change channel."""

    async def enable(self, chain_id: str) -> None:
        ...

    async def disable(self, chain_id: str) -> None:
        ...

    def get_offline_signer(self, chain_id: str) -> OfflineSigner:
        ...

    def subscribe_keystore_change(
        self, callback: Callable[[], Awaitable[None]]
    ) -> Callable[[], None]:
        ...


ClientFactory = Callable[[str, OfflineSigner], Awaitable[ChainClient]]
AccountListener = Callable[[str], None]

_ADDRESS_PATTERN = re.compile(r"(\w+1).*?(\w{4})$")


@dataclass
class WalletState:
    """Represents the minimal visible state for the connected wallet."""

    chain_id: str
    status: SessionStatus = SessionStatus.DISCONNECTED
    address: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.status is SessionStatus.CONNECTED

    def truncated_address(self) -> str:
        if not self.address:
            return ""
        return _ADDRESS_PATTERN.sub(r"\1...\2", self.address)

    def status_line(self) -> str:
        if not self.connected:
            return "Disconnected · Connect a wallet"
        return f"Connected to {self.chain_id} · {self.truncated_address()}"


class WalletSession:
    """Own the signing identity and chain client for the active wallet.

    Identity and client exist only while the session is connected. A
    persisted marker lets a restart reconnect without user interaction; only
    an explicit :meth:`disconnect` clears it.
    """

    def __init__(
        self,
        config: GardenConfig,
        bus: EventBus,
        store: PreferenceStore,
        client_factory: ClientFactory,
        extension: Optional[WalletExtension] = None,
    ) -> None:
        self.config = config
        self.bus = bus
        self.store = store
        self.state = WalletState(chain_id=config.chain_id)
        self._client_factory = client_factory
        self._extension = extension
        self._signer: Optional[OfflineSigner] = None
        self._client: Optional[ChainClient] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._account_listeners: list[AccountListener] = []
        self._connecting: Optional["asyncio.Future[None]"] = None

    @property
    def installed(self) -> bool:
        return self._extension is not None

    @property
    def connected(self) -> bool:
        return self.state.connected

    @property
    def address(self) -> Optional[str]:
        return self.state.address

    @property
    def client(self) -> ChainClient:
        return self.require_connected()

    def require_connected(self) -> ChainClient:
        if not self.connected or self._client is None:
            raise NotConnected()
        return self._client

    def on_account_change(self, listener: AccountListener) -> Callable[[], None]:
        """Register ``listener`` for addresses re-derived after a key-store change."""

        self._account_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._account_listeners:
                self._account_listeners.remove(listener)

        return unsubscribe

    async def connect(self, chain_id: Optional[str] = None) -> "WalletSession":
        """Authorize the wallet, derive the first account and open a signing client."""

        if self.connected:
            return self
        if self._connecting is None:
            self._connecting = asyncio.ensure_future(self._connect(chain_id))
            self._connecting.add_done_callback(self._connect_settled)
        await self._connecting
        return self

    def _connect_settled(self, task: "asyncio.Future[None]") -> None:
        if task is self._connecting:
            self._connecting = None

    async def _connect(self, chain_id: Optional[str]) -> None:
        extension = self._extension
        if extension is None:
            raise WalletUnavailable()

        chain_id = chain_id or self.config.chain_id
        try:
            await extension.enable(chain_id)
        except GardenError:
            raise
        except Exception as exc:  # noqa: BLE001 - wallet rejections arrive as plain errors
            raise AuthorizationDenied(f"Wallet rejected access to {chain_id}: {exc}") from exc

        try:
            signer = extension.get_offline_signer(chain_id)
            account = await self._first_account(signer)
        except GardenError:
            raise
        except Exception as exc:  # noqa: BLE001 - a locked wallet cannot list accounts
            raise AuthorizationDenied(f"Wallet did not share accounts for {chain_id}: {exc}") from exc
        if account is None:
            raise AuthorizationDenied(f"Wallet exposes no account for {chain_id}")

        try:
            client = await self._client_factory(self.config.rpc_endpoint, signer)
        except GardenError:
            raise
        except Exception as exc:  # noqa: BLE001 - transport errors vary by client
            raise ChainConnectionError(
                f"Could not reach {self.config.rpc_endpoint}: {exc}"
            ) from exc

        self._signer = signer
        self._client = client
        self.state.chain_id = chain_id
        self.state.address = account.address
        self.state.status = SessionStatus.CONNECTED
        self._unsubscribe = extension.subscribe_keystore_change(self.handle_keystore_change)
        self.store.set_flag(CONNECTED_KEY)
        logger.info("Wallet connected on %s as %s", chain_id, account.address)

        self.bus.address_changed.emit(account.address)
        self.bus.reload_all.emit()

    async def disconnect(self) -> None:
        """Revoke authorization and tear down the client. Safe to call twice."""

        self.store.clear_flag(CONNECTED_KEY)
        if not self.connected:
            return

        chain_id = self.state.chain_id
        if self._extension is not None:
            try:
                await self._extension.disable(chain_id)
            except Exception:  # noqa: BLE001 - teardown continues without the wallet
                logger.warning("Wallet refused to disable %s", chain_id, exc_info=True)
        self._teardown()
        logger.info("Wallet disconnected from %s", chain_id)
        self.bus.reload_all.emit()

    async def restore(self) -> bool:
        """Reconnect at startup when the previous run left the wallet connected."""

        if not self.store.flag(CONNECTED_KEY):
            self.bus.reload_all.emit()
            return False
        try:
            await self.connect()
        except GardenError as exc:
            logger.warning("Auto-reconnect skipped: %s", exc)
            return False
        return True

    async def handle_keystore_change(self) -> None:
        """Re-derive the active account after the wallet switched keys."""

        if not self.connected or self._signer is None:
            return

        try:
            account = await self._first_account(self._signer)
        except Exception:  # noqa: BLE001 - a locked wallet cannot list accounts
            logger.warning("Could not read accounts after key-store change", exc_info=True)
            account = None
        if account is None:
            logger.warning("Wallet no longer exposes an account; dropping session")
            self._teardown()
            self.bus.reload_all.emit()
            return

        self.state.address = account.address
        logger.info("Active account changed to %s", account.address)
        for listener in list(self._account_listeners):
            listener(account.address)
        self.bus.address_changed.emit(account.address)
        self.bus.reload_all.emit()

    def truncated_address(self) -> str:
        return self.state.truncated_address()

    def view_path(self, path: str) -> str:
        """Personalise a presale view path with the connected address."""

        if not self.connected or not self.state.address:
            return path
        return f"{path.rstrip('/')}/{self.state.address}"

    async def _first_account(self, signer: OfflineSigner) -> Optional[Account]:
        accounts = await signer.get_accounts()
        return accounts[0] if accounts else None

    def _teardown(self) -> None:
        unsubscribe, client = self._unsubscribe, self._client
        self._unsubscribe = None
        self._client = None
        self._signer = None
        self.state.address = None
        self.state.status = SessionStatus.DISCONNECTED
        if unsubscribe is not None:
            unsubscribe()
        if client is not None:
            try:
                client.disconnect()
            except Exception:  # noqa: BLE001 - the session is already gone
                logger.warning("Chain client did not close cleanly", exc_info=True)
