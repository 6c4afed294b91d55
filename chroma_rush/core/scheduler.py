"""
Frame Scheduler
===============

Cancellable delayed callbacks, drained once per frame by the loop.

Nothing here runs on another thread: due tasks are executed by
`run_due()`, which the SimulationLoop calls between ticks.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle for a pending callback."""

    def __init__(self, due: float, callback: Callable[..., Any], args: Tuple[Any, ...]):
        self.due = due
        self._callback = callback
        self._args = args
        self._cancelled = False
        self._done = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._done)

    def cancel(self) -> bool:
        """
        Cancel the task if it has not run yet.

        Returns:
            True if the task was pending and is now cancelled.
        """
        if not self.pending:
            return False
        self._cancelled = True
        return True

    def run(self) -> None:
        if not self.pending:
            return
        self._done = True
        self._callback(*self._args)


class FrameScheduler:
    """
    Min-heap of ScheduledTasks keyed by due time.

    Args:
        now_fn: Monotonic clock in seconds. Injectable for tests.
    """

    def __init__(self, now_fn: Callable[[], float] = time.monotonic):
        self.now = now_fn
        self._heap: List[Tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ScheduledTask:
        """Schedule callback(*args) to run `delay` seconds from now."""
        task = ScheduledTask(self.now() + max(0.0, delay), callback, args)
        heapq.heappush(self._heap, (task.due, next(self._counter), task))
        return task

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> ScheduledTask:
        """Schedule callback(*args) for the next drain."""
        return self.call_later(0.0, callback, *args)

    def run_due(self) -> int:
        """
        Run every task whose due time has passed.

        Tasks scheduled by a running callback wait for the next drain,
        even if they are already due.

        Returns:
            Number of callbacks executed.
        """
        now = self.now()
        ready = []
        while self._heap and self._heap[0][0] <= now:
            ready.append(heapq.heappop(self._heap)[2])

        ran = 0
        for task in ready:
            if task.pending:
                task.run()
                ran += 1
        return ran

    def cancel_all(self) -> int:
        """Cancel every pending task. Returns how many were cancelled."""
        cancelled = sum(1 for _, _, task in self._heap if task.cancel())
        self._heap.clear()
        return cancelled

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, task in self._heap if task.pending)


class Debouncer:
    """
    Replace-on-reschedule wrapper around a callback.

    Every trigger() cancels the pending call and schedules a fresh one, so a
    burst of triggers produces a single call with the latest arguments.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        delay: float,
        callback: Callable[..., Any]
    ):
        self._scheduler = scheduler
        self._delay = delay
        self._callback = callback
        self._task: Optional[ScheduledTask] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and self._task.pending

    def trigger(self, *args: Any) -> ScheduledTask:
        if self._task is not None:
            self._task.cancel()
        self._task = self._scheduler.call_later(self._delay, self._callback, *args)
        return self._task

    def cancel(self) -> bool:
        if self._task is None:
            return False
        return self._task.cancel()
