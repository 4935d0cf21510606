"""Persisted client flags backed by ``QSettings``."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from PySide6.QtCore import QSettings

ORGANIZATION = "ShitcoinGarden"
APPLICATION = "GardenConsole"

CONNECTED_KEY = "wallet-connected"


class PreferenceStore:
    """Flat boolean flags that survive restarts.

    When ``path`` is given the flags live in that INI file, otherwise in the
    platform's native settings location.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._settings = QSettings(str(path), QSettings.Format.IniFormat)
        else:
            self._settings = QSettings(ORGANIZATION, APPLICATION)

    def flag(self, key: str) -> bool:
        return bool(self._settings.value(key, False, type=bool))

    def set_flag(self, key: str) -> None:
        self._settings.setValue(key, True)
        self._settings.sync()

    def clear_flag(self, key: str) -> None:
        self._settings.remove(key)
        self._settings.sync()
