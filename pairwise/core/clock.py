"""Session-relative clock."""
from __future__ import annotations

import time
from typing import Callable, Optional

TimeSource = Callable[[], float]


class Clock:
    """Millisecond clock measured from the moment the session started.

    `time_source` must be monotonic and return seconds; it defaults to
    `time.monotonic` but a virtual scheduler can supply its own. The wall
    clock is only read once, to stamp `start_time` (epoch milliseconds) for
    the submission payload.
    """

    def __init__(self, time_source: Optional[TimeSource] = None, wall_time: Optional[TimeSource] = None):
        self._time_source = time_source or time.monotonic
        self._origin = self._time_source()
        self.start_time = int(round((wall_time or time.time)() * 1000))

    def elapsed(self) -> int:
        """Return whole milliseconds since the session started."""

        return int(round((self._time_source() - self._origin) * 1000))
