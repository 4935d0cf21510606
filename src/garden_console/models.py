"""Typed views of the garden contract's query responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from .operations import BASE_UNIT_SCALE


def _uint(value: Any) -> int:
    # Uint128 values are serialized as decimal strings.
    return int(value or 0)


@dataclass
class ShitcoinMetadata:
    denom: str
    creator: str = ""
    ticker: str = ""
    name: str = ""
    url: str = ""
    presale_end: int = 0
    presale_raise: int = 0
    supply: int = 0
    ended: bool = False
    launched: bool = False

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "ShitcoinMetadata":
        return cls(
            denom=payload["denom"],
            creator=payload.get("creator", ""),
            ticker=payload.get("ticker", ""),
            name=payload.get("name", ""),
            url=payload.get("url", ""),
            presale_end=int(payload.get("presale_end", 0)),
            presale_raise=_uint(payload.get("presale_raise")),
            supply=_uint(payload.get("supply")),
            ended=bool(payload.get("ended", False)),
            launched=bool(payload.get("launched", False)),
        )

    @property
    def expiry_ms(self) -> int:
        """Presale end as epoch milliseconds, the unit countdowns run on."""

        return self.presale_end * 1000


@dataclass
class ShitcoinPage:
    page: int
    limit: int
    total: int
    shitcoins: list[ShitcoinMetadata] = field(default_factory=list)

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "ShitcoinPage":
        return cls(
            page=int(payload.get("page", 0)),
            limit=int(payload.get("limit", 0)),
            total=int(payload.get("total", 0)),
            shitcoins=[ShitcoinMetadata.from_json(item) for item in payload.get("shitcoins", [])],
        )


@dataclass
class DegenMetadata:
    """A contributor's position in one presale."""

    presale_submission: int = 0
    shitcoins_claimed: bool = False

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "DegenMetadata":
        return cls(
            presale_submission=_uint(payload.get("presale_submission")),
            shitcoins_claimed=bool(payload.get("shitcoins_claimed", False)),
        )

    def percent_of_presale(self, shitcoin: ShitcoinMetadata) -> Decimal:
        if shitcoin.presale_raise == 0:
            return Decimal(0)
        return Decimal(self.presale_submission) / Decimal(shitcoin.presale_raise) * 100

    def percent_of_supply(self, shitcoin: ShitcoinMetadata) -> Decimal:
        # Half the supply seeds the liquidity pool.
        return self.percent_of_presale(shitcoin) / 2

    def claimable_amount(self, shitcoin: ShitcoinMetadata) -> int:
        """Claimable base units; the other half of supply goes to the pool."""

        if shitcoin.presale_raise == 0:
            return 0
        return (shitcoin.supply // 2) * self.presale_submission // shitcoin.presale_raise


@dataclass
class GardenSettings:
    """The contract's ``config{}`` response."""

    pool_factory_address: str
    fee_recipient: str
    create_fee_denom: str
    create_fee: int
    presale_denom: str
    presale_length: int
    presale_fee_rate: int

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "GardenSettings":
        return cls(
            pool_factory_address=payload["pool_factory_address"],
            fee_recipient=payload["fee_recipient"],
            create_fee_denom=payload["create_fee_denom"],
            create_fee=_uint(payload.get("create_fee")),
            presale_denom=payload["presale_denom"],
            presale_length=int(payload["presale_length"]),
            presale_fee_rate=int(payload["presale_fee_rate"]),
        )


def display_amount(base_units: int) -> Decimal:
    """Convert base units back to a display amount."""

    return Decimal(base_units) / BASE_UNIT_SCALE

