"""Client-side lifecycle coordinator for the shitcoin garden presale contract."""

from .app import GardenConsole
from .config import GardenConfig, configure_logging
from .coordinator import OperationCoordinator
from .countdown import CountdownState, CountdownTimer, PresaleTimers, PresaleWindow
from .errors import (
    AuthorizationDenied,
    ChainConnectionError,
    GardenError,
    NotConnected,
    SubmissionError,
    WalletUnavailable,
)
from .events import EventBus, Toast
from .notifications import NotificationCategory, NotificationGate
from .operations import NO_ASSET, OperationKind, OperationTracker
from .wallet import WalletSession, WalletState

__all__ = [
    "AuthorizationDenied",
    "ChainConnectionError",
    "CountdownState",
    "CountdownTimer",
    "EventBus",
    "GardenConfig",
    "GardenConsole",
    "GardenError",
    "NO_ASSET",
    "NotConnected",
    "NotificationCategory",
    "NotificationGate",
    "OperationCoordinator",
    "OperationKind",
    "OperationTracker",
    "PresaleTimers",
    "PresaleWindow",
    "SubmissionError",
    "Toast",
    "WalletSession",
    "WalletState",
    "configure_logging",
]
