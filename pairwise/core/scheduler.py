"""Deferred-action schedulers driving the sequencer and telemetry timers."""
from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

Callback = Callable[[], None]


class Handle(Protocol):
    """Cancellable reference to a scheduled callback."""

    def cancel(self) -> None:  # pragma: no cover - interface
        ...

    @property
    def cancelled(self) -> bool:  # pragma: no cover - interface
        ...


class Scheduler(Protocol):
    """Single-threaded source of one-shot and periodic deferred callbacks."""

    def now(self) -> float:  # pragma: no cover - interface
        """Return the scheduler's monotonic time in seconds."""
        ...

    def call_later(self, delay_ms: float, callback: Callback) -> Handle:  # pragma: no cover - interface
        ...

    def call_every(self, interval_ms: float, callback: Callback) -> Handle:  # pragma: no cover - interface
        ...


@dataclass(eq=False)
class TimerHandle:
    """Handle shared by both scheduler implementations."""

    callback: Callback
    interval_ms: Optional[float] = None
    _cancelled: bool = field(default=False, init=False)
    _on_cancel: Optional[Callback] = field(default=None, init=False, repr=False)

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Virtual-time scheduler; time only moves when `advance` is called.

    Due callbacks fire in time order, ties in the order they were scheduled.
    Callbacks may schedule further callbacks, which fire within the same
    `advance` call if they fall inside the window.
    """

    def __init__(self, start: float = 0.0):
        self._now_ms = float(start) * 1000
        self._queue: List[tuple] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now_ms / 1000

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle(callback=callback)
        self._push(self._now_ms + max(delay_ms, 0), handle)
        return handle

    def call_every(self, interval_ms: float, callback: Callback) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        handle = TimerHandle(callback=callback, interval_ms=interval_ms)
        self._push(self._now_ms + interval_ms, handle)
        return handle

    def advance(self, ms: float) -> int:
        """Move time forward by `ms`, firing due callbacks; return how many fired."""

        if ms < 0:
            raise ValueError("Cannot move virtual time backwards.")
        target = self._now_ms + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now_ms = due
            if handle.interval_ms is not None:
                self._push(due + handle.interval_ms, handle)
            handle.callback()
            fired += 1
        self._now_ms = target
        return fired

    def run_until(self, predicate: Callable[[], bool], *, step_ms: float = 10, limit_ms: float = 3_600_000) -> None:
        """Advance in steps until `predicate()` holds; raise if `limit_ms` passes first."""

        spent = 0.0
        while not predicate():
            if spent >= limit_ms:
                raise TimeoutError(f"Condition not met within {limit_ms} ms of virtual time.")
            self.advance(step_ms)
            spent += step_ms

    def pending(self) -> int:
        """Return the number of live (uncancelled) timers."""

        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def _push(self, due_ms: float, handle: TimerHandle) -> None:
        heapq.heappush(self._queue, (due_ms, next(self._counter), handle))


class AsyncioScheduler:
    """Real-time scheduler backed by an asyncio event loop.

    The first exception escaping a callback is held and `run_until_complete`
    re-raises it so a fatal presentation error halts the session.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.new_event_loop()
        self.failure: Optional[BaseException] = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def now(self) -> float:
        return self._loop.time()

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle(callback=callback)
        timer = self._loop.call_later(max(delay_ms, 0) / 1000, self._invoke, handle)
        handle._on_cancel = timer.cancel
        return handle

    def call_every(self, interval_ms: float, callback: Callback) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        handle = TimerHandle(callback=callback, interval_ms=interval_ms)
        self._arm(handle)
        return handle

    def _arm(self, handle: TimerHandle) -> None:
        assert handle.interval_ms is not None
        timer = self._loop.call_later(handle.interval_ms / 1000, self._tick, handle)
        handle._on_cancel = timer.cancel

    def _tick(self, handle: TimerHandle) -> None:
        if handle.cancelled:
            return
        self._arm(handle)
        self._invoke(handle)

    def _invoke(self, handle: TimerHandle) -> None:
        if handle.cancelled:
            return
        try:
            handle.callback()
        except Exception as exc:
            if self.failure is None:
                self.failure = exc

    def run_until_complete(self, done: Callable[[], bool], *, poll_ms: float = 10, timeout_s: Optional[float] = None) -> None:
        """Run the loop until `done()` holds, re-raising any callback failure."""

        self._loop.run_until_complete(asyncio.wait_for(self._poll(done, poll_ms), timeout_s))

    async def _poll(self, done: Callable[[], bool], poll_ms: float) -> None:
        while True:
            if self.failure is not None:
                raise self.failure
            if done():
                return
            await asyncio.sleep(poll_ms / 1000)

    def close(self) -> None:
        self._loop.close()
