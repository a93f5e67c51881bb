"""Timer schedulers: asyncio-backed and a fake clock for tests and dry runs."""

import asyncio
import heapq
import itertools
from typing import List, Optional, Set, Tuple

from interfaces import IScheduler, ITimer


class AsyncioTimer(ITimer):
    def __init__(self, scheduler: "AsyncioScheduler", callback, args):
        self.scheduler = scheduler
        self.callback = callback
        self.args = args
        self.handle: Optional[asyncio.TimerHandle] = None

    def _fire(self) -> None:
        self.scheduler._pending.discard(self)
        try:
            self.callback(*self.args)
        finally:
            self.scheduler._update_idle()

    def cancel(self) -> None:
        if self.handle:
            self.handle.cancel()
        self.scheduler._pending.discard(self)
        self.scheduler._update_idle()


class AsyncioScheduler(IScheduler):
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()
        self._pending: Set[AsyncioTimer] = set()
        self._idle = asyncio.Event()
        self._idle.set()

    def _update_idle(self) -> None:
        if self._pending:
            self._idle.clear()
        else:
            self._idle.set()

    def call_later(self, delay_ms: float, callback, *args) -> AsyncioTimer:
        timer = AsyncioTimer(self, callback, args)
        timer.handle = self.loop.call_later(max(delay_ms, 0) / 1000, timer._fire)
        self._pending.add(timer)
        self._idle.clear()
        return timer

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        while self._pending:
            await self._idle.wait()

    def close(self) -> None:
        for timer in list(self._pending):
            timer.cancel()


class ManualTimer(ITimer):
    __slots__ = ("when", "callback", "args", "cancelled")

    def __init__(self, when: float, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(IScheduler):
    """Single-threaded timer queue driven by a fake millisecond clock."""

    def __init__(self, now: float = 0):
        self.now = now
        self._queue: List[Tuple[float, int, ManualTimer]] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: float, callback, *args) -> ManualTimer:
        timer = ManualTimer(self.now + max(delay_ms, 0), callback, args)
        heapq.heappush(self._queue, (timer.when, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def advance(self, ms: float) -> int:
        """Move the clock forward, firing due timers in order. Returns how many fired."""
        target = self.now + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = when
            timer.callback(*timer.args)
            fired += 1
        self.now = target
        return fired

    def run_all(self) -> int:
        fired = 0
        while self._queue:
            fired += self.advance(max(self._queue[0][0] - self.now, 0))
        return fired
