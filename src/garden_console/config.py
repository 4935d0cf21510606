"""Runtime configuration for the garden console.

Defaults mirror the deployed testnet page. Every field can be overridden with
a ``GARDEN_*`` environment variable or a ``.env`` file next to the process.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_CHAIN_ID = "pion-1"
DEFAULT_RPC_ENDPOINT = "https://rpc-falcron.pion-1.ntrn.tech"
DEFAULT_CONTRACT = "neutron17z062lwex5tvftjsv3ety5ervmnnzqygclgwflt6jlxwnluxqdmsemw4fz"
DEFAULT_PRESALE_DENOM = (
    "ibc/9DF365E2C0EF4EA02FA771F638BB9C0C830EFCD354629BDC017F79B348B4E989"
)
DEFAULT_GAS_PRICE = "0.02untrn"
DEFAULT_CREATE_FEE_AMOUNT = 10_000
DEFAULT_CREATE_FEE_DENOM = "untrn"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _get_int(env_var: str, default: int) -> int:
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    return int(value)


@dataclass
class GardenConfig:
    """Chain, contract and timer settings used by every component."""

    chain_id: str = DEFAULT_CHAIN_ID
    rpc_endpoint: str = DEFAULT_RPC_ENDPOINT
    contract_address: str = DEFAULT_CONTRACT
    presale_denom: str = DEFAULT_PRESALE_DENOM
    gas_price: str = DEFAULT_GAS_PRICE
    create_fee_amount: int = DEFAULT_CREATE_FEE_AMOUNT
    create_fee_denom: str = DEFAULT_CREATE_FEE_DENOM
    tick_interval_ms: int = 1000
    settle_delay_ms: int = 2000
    settings_path: Optional[Path] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv_path: Optional[Path] = None) -> "GardenConfig":
        """Build a config from ``GARDEN_*`` variables, loading ``.env`` first."""

        load_dotenv(dotenv_path)
        settings_path = os.getenv("GARDEN_SETTINGS_PATH")
        return cls(
            chain_id=os.getenv("GARDEN_CHAIN_ID", DEFAULT_CHAIN_ID),
            rpc_endpoint=os.getenv("GARDEN_RPC_ENDPOINT", DEFAULT_RPC_ENDPOINT),
            contract_address=os.getenv("GARDEN_CONTRACT", DEFAULT_CONTRACT),
            presale_denom=os.getenv("GARDEN_PRESALE_DENOM", DEFAULT_PRESALE_DENOM),
            gas_price=os.getenv("GARDEN_GAS_PRICE", DEFAULT_GAS_PRICE),
            create_fee_amount=_get_int(
                "GARDEN_CREATE_FEE_AMOUNT", DEFAULT_CREATE_FEE_AMOUNT
            ),
            create_fee_denom=os.getenv(
                "GARDEN_CREATE_FEE_DENOM", DEFAULT_CREATE_FEE_DENOM
            ),
            tick_interval_ms=_get_int("GARDEN_TICK_INTERVAL_MS", 1000),
            settle_delay_ms=_get_int("GARDEN_SETTLE_DELAY_MS", 2000),
            settings_path=Path(settings_path) if settings_path else None,
            log_level=os.getenv("GARDEN_LOG_LEVEL", "INFO"),
        )


def configure_logging(level: str = "INFO") -> None:
    """Install the console log format on the root logger."""

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
