import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QCoreApplication

from garden_console.config import GardenConfig
from garden_console.events import EventBus
from garden_console.preferences import PreferenceStore


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def config(tmp_path) -> GardenConfig:
    return GardenConfig(settings_path=tmp_path / "settings.ini", settle_delay_ms=50)


@pytest.fixture
def store(config) -> PreferenceStore:
    return PreferenceStore(config.settings_path)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()
