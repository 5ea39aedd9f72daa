"""Passive pointer/keyboard telemetry, independent of trial state."""
from __future__ import annotations

import logging
import math
from typing import Any, Optional

from .clock import Clock
from .config import PresentationArea
from .events import ClickEvent, EventLog, KeyUpEvent, PositionSample
from .scheduler import Handle, Scheduler

logger = logging.getLogger(__name__)


def _coordinate(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def _is_character(code: int) -> bool:
    # surrogates have no UTF-8 encoding
    return 0 <= code <= 0x10FFFF and not 0xD800 <= code <= 0xDFFF


class TelemetryLogger:
    """Samples the last-known pointer position on a fixed interval and logs raw input.

    The logger is the only writer of its EventLog. It is started once and
    stopped once; after `stop()` nothing more is appended.
    """

    def __init__(
        self,
        clock: Clock,
        scheduler: Scheduler,
        area: PresentationArea,
        events: Optional[EventLog] = None,
        *,
        interval_ms: float = 50,
    ):
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        self.clock = clock
        self.scheduler = scheduler
        self.area = area
        self.events = events if events is not None else EventLog()
        self.interval_ms = interval_ms
        self.x = 0.0
        self.y = 0.0
        self._timer: Optional[Handle] = None
        self._started = False
        self._stopped = False

    @property
    def active(self) -> bool:
        return self._started and not self._stopped

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._timer = self.scheduler.call_every(self.interval_ms, self._sample)
        logger.debug("Telemetry sampling every %s ms", self.interval_ms)

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        logger.debug("Telemetry stopped after %d events", len(self.events))

    def pointer_moved(self, page_x: Any, page_y: Any) -> None:
        """Track the pointer; coordinates are stored normalized to the presentation area."""

        px, py = _coordinate(page_x), _coordinate(page_y)
        if px is None or py is None:
            logger.debug("Ignoring malformed pointer move (%r, %r)", page_x, page_y)
            return
        self.x, self.y = self.area.normalize(px, py)

    def clicked(self, page_x: Any = None, page_y: Any = None) -> None:
        """Log a click at the given page position, or at the last-known one."""

        if not self.active:
            return
        if page_x is not None or page_y is not None:
            self.pointer_moved(page_x, page_y)
        self.events.append(ClickEvent(x=self.x, y=self.y, time=self.clock.elapsed()))

    def key_released(self, key_code: Any) -> None:
        if not self.active:
            return
        if isinstance(key_code, bool) or not isinstance(key_code, int) or not _is_character(key_code):
            logger.debug("Ignoring malformed key code %r", key_code)
            return
        self.events.append(KeyUpEvent(key_code=key_code, key=chr(key_code), time=self.clock.elapsed()))

    def _sample(self) -> None:
        if not self.active:
            return
        self.events.append(PositionSample(x=self.x, y=self.y, time=self.clock.elapsed()))
