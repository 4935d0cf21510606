"""Wiring for the garden console: one session, tracker, gate and timer set."""

from __future__ import annotations

import logging
from typing import Optional

from .config import GardenConfig, configure_logging
from .coordinator import OperationCoordinator
from .countdown import Clock, PresaleTimers, now_ms
from .events import EventBus
from .notifications import NotificationGate
from .operations import OperationTracker
from .preferences import PreferenceStore
from .wallet import ClientFactory, WalletExtension, WalletSession

logger = logging.getLogger(__name__)


class GardenConsole:
    """Process-wide console state created once at startup."""

    def __init__(
        self,
        config: GardenConfig,
        client_factory: ClientFactory,
        extension: Optional[WalletExtension] = None,
        store: Optional[PreferenceStore] = None,
        clock: Clock = now_ms,
    ) -> None:
        self.config = config
        configure_logging(config.log_level)
        self.bus = EventBus()
        self.store = store or PreferenceStore(config.settings_path)
        self.gate = NotificationGate(self.store)
        self.tracker = OperationTracker()
        self.session = WalletSession(
            config, self.bus, self.store, client_factory, extension=extension
        )
        self.ops = OperationCoordinator(self.session, self.tracker, self.gate, self.bus)
        self.timers = PresaleTimers(
            self.bus,
            clock=clock,
            tick_interval_ms=config.tick_interval_ms,
            settle_delay_ms=config.settle_delay_ms,
        )

    async def startup(self) -> bool:
        """Auto-reconnect a previously connected wallet before anything else runs."""

        if not self.session.installed:
            logger.info("No wallet extension detected")
        return await self.session.restore()

    def shutdown(self) -> None:
        """Stop every presale countdown."""

        self.timers.clear()
