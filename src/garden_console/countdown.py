"""Per-presale countdowns that request a card refresh when the window closes."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from .events import EventBus

logger = logging.getLogger(__name__)

HOURS_SECS = 60 * 60
MINUTES_SECS = 60

Clock = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)


def split_seconds(seconds: int) -> tuple[int, int, int]:
    """Split a second count into hours, minutes and seconds."""

    hours, rest = divmod(max(seconds, 0), HOURS_SECS)
    minutes, secs = divmod(rest, MINUTES_SECS)
    return hours, minutes, secs


@dataclass(frozen=True)
class PresaleWindow:
    """Chain-reported presale expiry, in epoch milliseconds."""

    expiry_ms: int

    def remaining_seconds(self, at_ms: int) -> int:
        return max(self.expiry_ms - at_ms, 0) // 1000


class CountdownState(str, Enum):
    ACTIVE = "active"
    EXPIRING = "expiring"
    DONE = "done"


class CountdownTimer(QObject):
    """Tick once a second until the presale window closes, then refresh once.

    The timer never restarts itself; a card re-rendered with a new expiry
    gets a fresh instance (see :class:`PresaleTimers`).
    """

    ticked = Signal(int)
    finished = Signal(str)

    def __init__(
        self,
        denom: str,
        expiry_ms: int,
        bus: EventBus,
        clock: Clock = now_ms,
        tick_interval_ms: int = 1000,
        settle_delay_ms: int = 2000,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.denom = denom
        self.window = PresaleWindow(expiry_ms)
        self.bus = bus
        self._clock = clock
        self.remaining = self.window.remaining_seconds(clock())
        self.state = CountdownState.ACTIVE if self.remaining > 0 else CountdownState.DONE

        self._ticker = QTimer(self)
        self._ticker.setInterval(tick_interval_ms)
        self._ticker.timeout.connect(self.tick)  # type: ignore[arg-type]

        self._settle = QTimer(self)
        self._settle.setSingleShot(True)
        self._settle.setInterval(settle_delay_ms)
        self._settle.timeout.connect(self._request_refresh)  # type: ignore[arg-type]

    @property
    def expiry_ms(self) -> int:
        return self.window.expiry_ms

    @property
    def running(self) -> bool:
        return self._ticker.isActive()

    def start(self) -> None:
        """Begin ticking; an already-expired window never starts."""

        if self.state is not CountdownState.ACTIVE:
            return
        self._ticker.start()

    def stop(self) -> None:
        """Cancel ticking and any pending refresh, e.g. when the card goes away."""

        self._ticker.stop()
        self._settle.stop()

    def tick(self) -> None:
        if self.state is not CountdownState.ACTIVE:
            return

        self.remaining = self.window.remaining_seconds(self._clock())
        self.ticked.emit(self.remaining)
        if self.remaining > 0:
            return

        self.state = CountdownState.EXPIRING
        self._ticker.stop()
        self._settle.start()
        logger.debug("Presale %s closed; refreshing after settle delay", self.denom)

    def _request_refresh(self) -> None:
        if self.state is not CountdownState.EXPIRING:
            return
        self.state = CountdownState.DONE
        self.bus.reload.emit(self.denom)
        self.finished.emit(self.denom)

    def hours(self) -> int:
        return split_seconds(self.remaining)[0]

    def minutes(self) -> int:
        return split_seconds(self.remaining)[1]

    def seconds(self) -> int:
        return split_seconds(self.remaining)[2]

    def format_remaining(self) -> dict[str, str]:
        hours, minutes, seconds = split_seconds(self.remaining)
        return {
            "hours": f"{hours:02d}",
            "minutes": f"{minutes:02d}",
            "seconds": f"{seconds:02d}",
        }


class PresaleTimers(QObject):
    """One countdown per rendered presale card.

    Rendering with the same expiry keeps the running timer. Any other expiry,
    later or earlier, replaces it with a fresh timer.
    """

    def __init__(
        self,
        bus: EventBus,
        clock: Clock = now_ms,
        tick_interval_ms: int = 1000,
        settle_delay_ms: int = 2000,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.bus = bus
        self._clock = clock
        self._tick_interval_ms = tick_interval_ms
        self._settle_delay_ms = settle_delay_ms
        self._timers: dict[str, CountdownTimer] = {}

    def get(self, denom: str) -> Optional[CountdownTimer]:
        return self._timers.get(denom)

    def render(self, denom: str, expiry_ms: int) -> CountdownTimer:
        current = self._timers.get(denom)
        if current is not None and current.expiry_ms == expiry_ms:
            return current
        if current is not None:
            logger.debug(
                "Presale %s expiry moved %s -> %s; restarting countdown",
                denom,
                current.expiry_ms,
                expiry_ms,
            )
            self._dispose(current)

        timer = CountdownTimer(
            denom,
            expiry_ms,
            self.bus,
            clock=self._clock,
            tick_interval_ms=self._tick_interval_ms,
            settle_delay_ms=self._settle_delay_ms,
            parent=self,
        )
        timer.finished.connect(lambda _denom, timer=timer: self._forget(timer))
        self._timers[denom] = timer
        timer.start()
        return timer

    def discard(self, denom: str) -> None:
        timer = self._timers.pop(denom, None)
        if timer is not None:
            self._dispose(timer)

    def _forget(self, timer: CountdownTimer) -> None:
        # Finished countdowns have nothing left to show; the refresh re-renders.
        if self._timers.get(timer.denom) is timer:
            self.discard(timer.denom)

    def clear(self) -> None:
        for denom in list(self._timers):
            self.discard(denom)

    def _dispose(self, timer: CountdownTimer) -> None:
        timer.stop()
        timer.deleteLater()
