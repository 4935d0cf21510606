"""Qt signal hub used to ask views for refreshes and to surface toasts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QObject, Signal

from .notifications import NotificationCategory


@dataclass(frozen=True)
class Toast:
    """User-facing message; ``category`` is ``None`` for errors."""

    message: str
    category: Optional[NotificationCategory] = None

    @property
    def is_error(self) -> bool:
        return self.category is None


class EventBus(QObject):
    """Named refresh and notification triggers.

    Views connect to these signals; reloads are full re-queries so receiving
    the same trigger several times in quick succession is harmless.
    """

    reload_all = Signal()
    reload = Signal(str)
    address_changed = Signal(str)
    toast = Signal(object)
    busy_changed = Signal(str, str, bool)
