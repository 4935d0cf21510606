"""Outcome categories and the per-category toast suppression gate."""

from __future__ import annotations

import logging
from enum import Enum

from .preferences import PreferenceStore

logger = logging.getLogger(__name__)

SUPPRESS_PREFIX = "suppress"


class NotificationCategory(str, Enum):
    """One tag per successful operation outcome."""

    CREATE_SHITCOIN = "CreateShitcoin"
    PRESALE_ENTERED = "PresaleEntered"
    EXTEND_PRESALE = "ExtendPresale"
    SHITCOIN_LAUNCHED = "ShitcoinLaunched"
    SHITCOINS_CLAIMED = "ShitcoinsClaimed"
    URL_SET = "UrlSet"

    @property
    def preference_key(self) -> str:
        return f"{SUPPRESS_PREFIX}{self.value}"


class NotificationGate:
    """Decide whether a successful outcome should surface a toast.

    Suppression is sticky: it only goes away through :meth:`reset`. Errors
    never pass through the gate.
    """

    def __init__(self, store: PreferenceStore) -> None:
        self._store = store

    def should_notify(self, category: NotificationCategory) -> bool:
        return not self._store.flag(category.preference_key)

    def is_suppressed(self, category: NotificationCategory) -> bool:
        return not self.should_notify(category)

    def suppress(self, category: NotificationCategory) -> None:
        logger.info("Suppressing %s notifications", category.value)
        self._store.set_flag(category.preference_key)

    def reset(self) -> None:
        """Clear every suppression preference."""

        for category in NotificationCategory:
            self._store.clear_flag(category.preference_key)
