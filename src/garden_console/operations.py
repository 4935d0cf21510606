"""Operation kinds, fee budgets, input normalization and the reservation table."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Callable

from .notifications import NotificationCategory

BASE_UNIT_DECIMALS = 6
BASE_UNIT_SCALE = 10**BASE_UNIT_DECIMALS

# Creation is not tied to an existing denom.
NO_ASSET = ""


class OperationKind(str, Enum):
    CREATE = "create"
    ENTER_PRESALE = "enter-presale"
    EXTEND_PRESALE = "extend-presale"
    LAUNCH = "launch"
    CLAIM = "claim"
    SET_METADATA = "set-metadata"


GAS_BUDGETS: dict[OperationKind, int] = {
    OperationKind.CREATE: 750_000,
    OperationKind.ENTER_PRESALE: 500_000,
    OperationKind.EXTEND_PRESALE: 200_000,
    OperationKind.LAUNCH: 750_000,
    OperationKind.CLAIM: 500_000,
    OperationKind.SET_METADATA: 500_000,
}

CATEGORIES: dict[OperationKind, NotificationCategory] = {
    OperationKind.CREATE: NotificationCategory.CREATE_SHITCOIN,
    OperationKind.ENTER_PRESALE: NotificationCategory.PRESALE_ENTERED,
    OperationKind.EXTEND_PRESALE: NotificationCategory.EXTEND_PRESALE,
    OperationKind.LAUNCH: NotificationCategory.SHITCOIN_LAUNCHED,
    OperationKind.CLAIM: NotificationCategory.SHITCOINS_CLAIMED,
    OperationKind.SET_METADATA: NotificationCategory.URL_SET,
}


@dataclass(frozen=True)
class Coin:
    amount: int
    denom: str

    def to_json(self) -> dict[str, str]:
        return {"denom": self.denom, "amount": str(self.amount)}


@dataclass(frozen=True)
class Fee:
    """Fee attached to a transaction: a gas limit and the coins paying for it."""

    amount: tuple[Coin, ...]
    gas: int

    def to_json(self) -> dict:
        return {"amount": [coin.to_json() for coin in self.amount], "gas": str(self.gas)}


_GAS_PRICE_PATTERN = re.compile(r"^([0-9.]+)([a-zA-Z][a-zA-Z0-9/:._-]{2,127})$")


@dataclass(frozen=True)
class GasPrice:
    amount: Decimal
    denom: str

    @classmethod
    def from_string(cls, value: str) -> "GasPrice":
        """Parse ``"0.02untrn"`` style gas prices."""

        match = _GAS_PRICE_PATTERN.match(value.strip())
        if match is None:
            raise ValueError(f"Invalid gas price string: {value!r}")
        try:
            amount = Decimal(match.group(1))
        except InvalidOperation as exc:
            raise ValueError(f"Invalid gas price amount: {value!r}") from exc
        return cls(amount=amount, denom=match.group(2))


def calculate_fee(gas_limit: int, gas_price: GasPrice) -> Fee:
    """Price a fixed gas budget, rounding the fee amount up."""

    amount = math.ceil(gas_price.amount * gas_limit)
    return Fee(amount=(Coin(int(amount), gas_price.denom),), gas=gas_limit)


def fee_for(kind: OperationKind, gas_price: GasPrice) -> Fee:
    return calculate_fee(GAS_BUDGETS[kind], gas_price)


def normalize_text(value: str) -> str:
    return value.strip()


def _strip_number(value: str) -> str:
    return re.sub(r"[\s,]", "", value)


def normalize_integer(value: str, field: str = "value") -> str:
    """Return a positive integer string with grouping separators removed."""

    digits = _strip_number(value)
    if not digits.isdigit() or int(digits) <= 0:
        raise ValueError(f"{field} must be a positive whole number, got {value!r}")
    return str(int(digits))


def to_base_units(display_amount: str) -> int:
    """Convert a display amount such as ``"12,345"`` or ``"1.5"`` to base units."""

    cleaned = _strip_number(display_amount)
    try:
        amount = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {display_amount!r}") from exc
    if not amount.is_finite() or amount <= 0:
        raise ValueError(f"Amount must be greater than zero, got {display_amount!r}")
    scaled = amount * BASE_UNIT_SCALE
    if scaled != scaled.to_integral_value():
        raise ValueError(
            f"Amount supports at most {BASE_UNIT_DECIMALS} decimals, got {display_amount!r}"
        )
    return int(scaled)


BusyListener = Callable[[OperationKind, str, bool], None]


class OperationTracker:
    """At most one in-flight operation per ``(kind, asset_key)``.

    Keys are independent: a reservation never blocks another asset or
    another kind on the same asset.
    """

    def __init__(self) -> None:
        self._in_flight: dict[OperationKind, set[str]] = {kind: set() for kind in OperationKind}
        self._listeners: list[BusyListener] = []

    def subscribe(self, listener: BusyListener) -> None:
        self._listeners.append(listener)

    def try_reserve(self, kind: OperationKind, asset_key: str = NO_ASSET) -> bool:
        slots = self._in_flight[kind]
        if asset_key in slots:
            return False
        slots.add(asset_key)
        self._notify(kind, asset_key, True)
        return True

    def release(self, kind: OperationKind, asset_key: str = NO_ASSET) -> None:
        slots = self._in_flight[kind]
        if asset_key not in slots:
            raise RuntimeError(f"No {kind.value} reservation held for {asset_key!r}")
        slots.remove(asset_key)
        self._notify(kind, asset_key, False)

    def is_busy(self, kind: OperationKind, asset_key: str = NO_ASSET) -> bool:
        return asset_key in self._in_flight[kind]

    @property
    def working(self) -> bool:
        """True while any operation is in flight."""

        return any(self._in_flight.values())

    def in_flight(self) -> list[tuple[OperationKind, str]]:
        return [(kind, asset) for kind, assets in self._in_flight.items() for asset in sorted(assets)]

    def _notify(self, kind: OperationKind, asset_key: str, busy: bool) -> None:
        for listener in self._listeners:
            listener(kind, asset_key, busy)
