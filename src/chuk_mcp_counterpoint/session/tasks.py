"""
Deferred tasks - cancellable timers keyed by owner.

A session schedules transient UI changes (fade an incorrect note, then
remove it; hide a hint) through a TaskRegistry. The registry is flushed
whenever the session resets, so no timer outlives the attempt it
belongs to.

Schedulers:
- AsyncioScheduler: real timers on the running event loop
- ManualScheduler: virtual clock advanced explicitly (tests, replays)
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class TaskHandle(Protocol):
    """A scheduled callback that can be cancelled."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TaskHandle: ...


class AsyncioScheduler:
    """
    Schedules callbacks on an asyncio event loop.

    The loop is resolved at call time when not given, so the scheduler can
    be created before the loop starts.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TaskHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class _ManualHandle:
    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    A virtual clock.

    Nothing fires until ``advance`` moves time forward; callbacks then run
    in due-time order (ties in scheduling order). Callbacks scheduled by a
    firing callback run in the same ``advance`` if they fall due.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, _ManualHandle]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TaskHandle:
        handle = _ManualHandle(self.now + delay, callback)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        return handle

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and run everything that falls due.

        Returns:
            Number of callbacks run
        """
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            self.now = when
            if handle.cancelled:
                continue
            handle.callback()
            fired += 1
        self.now = target
        return fired

    @property
    def pending(self) -> int:
        """Number of scheduled, uncancelled callbacks."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)


class TaskRegistry:
    """
    Lifetime-scoped registry of deferred tasks.

    Tasks are keyed by owner (a placed note id, or 'hint'). A key may hold
    a chain of tasks; ``cancel(key)`` drops all of them and
    ``cancel_all()`` empties the registry.
    """

    def __init__(self, scheduler: Scheduler):
        self.scheduler = scheduler
        self._tasks: dict[str, list[TaskHandle]] = {}

    def schedule(self, key: str, delay: float, callback: Callable[[], None]) -> TaskHandle:
        """
        Run ``callback`` after ``delay`` seconds unless cancelled first.

        The handle is forgotten once the callback runs.
        """
        handle: TaskHandle | None = None

        def run() -> None:
            self._forget(key, handle)
            callback()

        handle = self.scheduler.call_later(delay, run)
        self._tasks.setdefault(key, []).append(handle)
        return handle

    def cancel(self, key: str) -> int:
        """Cancel every task under a key. Returns the number cancelled."""
        handles = self._tasks.pop(key, [])
        for handle in handles:
            handle.cancel()
        return len(handles)

    def cancel_all(self) -> int:
        """Cancel everything. Returns the number cancelled."""
        count = 0
        for key in list(self._tasks):
            count += self.cancel(key)
        if count:
            logger.debug(f"Cancelled {count} pending tasks")
        return count

    def pending(self, key: str | None = None) -> int:
        """Number of live tasks, for one key or overall."""
        if key is not None:
            return len(self._tasks.get(key, []))
        return sum(len(handles) for handles in self._tasks.values())

    def _forget(self, key: str, handle: TaskHandle | None) -> None:
        handles = self._tasks.get(key)
        if not handles or handle not in handles:
            return
        handles.remove(handle)
        if not handles:
            del self._tasks[key]
