"""Timer scheduling for practice sessions.

Sessions only need ``call_later(delay, callback, *args)`` returning a handle
with ``cancel()``, plus ``time()``. An asyncio event loop provides exactly
that. ``VirtualScheduler`` provides the same in virtual time, for offline
analysis and tests.
"""

import heapq
import itertools
from typing import Any, Callable, List, Optional, Protocol, Tuple


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...

    def time(self) -> float: ...


class VirtualTimerHandle:
    """Handle for a callback scheduled on a VirtualScheduler."""

    def __init__(self, when: float, callback: Callable[..., Any], args: Tuple[Any, ...]):
        self.when = when
        self._callback = callback
        self._args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def _run(self) -> None:
        if not self._cancelled:
            self._callback(*self._args)


class VirtualScheduler:
    """Deterministic scheduler whose clock only moves when advanced."""

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, VirtualTimerHandle]] = []
        self._counter = itertools.count()

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> VirtualTimerHandle:
        handle = VirtualTimerHandle(self._now + max(0.0, delay), callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        return handle

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> VirtualTimerHandle:
        return self.call_later(0.0, callback, *args)

    @property
    def pending(self) -> int:
        """Number of scheduled, non-cancelled callbacks."""
        return sum(1 for _, _, h in self._queue if not h.cancelled())

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running every callback that falls due."""
        target = self._now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            self._now = when
            handle._run()
        self._now = target

    def run_until(self, when: float, step: Optional[float] = None) -> None:
        """Advance to an absolute time, optionally in fixed steps."""
        if step is None:
            self.advance(max(0.0, when - self._now))
            return
        while self._now + step <= when:
            self.advance(step)
        self.advance(max(0.0, when - self._now))
