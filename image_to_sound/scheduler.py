"""Cancellable delayed tasks keyed by voice.

The instrument is single-threaded and event driven. Work that has to happen
later (staggered chord onsets, automatic release of play-once notes) is
queued here and executed when the host event loop calls ``run_pending``.
Each task carries a key, and cancelling a key drops its pending task, which
is how stop and mode-switch paths prevent stale onsets from firing.
"""

import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Hashable

logger = logging.getLogger(__name__)


@dataclass(order=True)
class ScheduledTask:
    """A callback due at a point in time.

    Tasks order by due time, then by the order they were scheduled in.
    """

    due: float
    sequence: int
    key: Hashable = field(compare=False)
    callback: Callable[[], None] = field(compare=False, repr=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """Queue of delayed callbacks, at most one pending task per key.

    Args:
        clock: Function returning the current time in seconds. Defaults to
            ``time.monotonic``; tests pass a manually advanced clock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._queue: list[ScheduledTask] = []
        self._by_key: dict[Hashable, ScheduledTask] = {}
        self._sequence = itertools.count()

    def now(self) -> float:
        return self._clock()

    def call_later(
        self, delay: float, key: Hashable, callback: Callable[[], None]
    ) -> ScheduledTask:
        """Schedule ``callback`` to run ``delay`` seconds from now.

        A task already pending for ``key`` is cancelled and replaced.

        Args:
            delay: Seconds to wait; negative values run at the next poll.
            key: Identifier used to cancel the task.
            callback: Function called with no arguments.

        Returns:
            The scheduled task.
        """
        self.cancel(key)
        task = ScheduledTask(
            due=self.now() + max(0.0, delay),
            sequence=next(self._sequence),
            key=key,
            callback=callback,
        )
        heapq.heappush(self._queue, task)
        self._by_key[key] = task
        return task

    def cancel(self, key: Hashable) -> bool:
        """Cancel the pending task for ``key``.

        Returns:
            True if a task was pending, False otherwise.
        """
        task = self._by_key.pop(key, None)
        if task is None:
            return False
        task.cancel()
        return True

    def cancel_all(self) -> int:
        """Cancel every pending task and return how many were dropped."""
        count = len(self._by_key)
        for task in self._by_key.values():
            task.cancel()
        self._by_key.clear()
        self._queue.clear()
        return count

    def is_pending(self, key: Hashable) -> bool:
        return key in self._by_key

    def pending_keys(self) -> list[Hashable]:
        return list(self._by_key)

    def next_due(self) -> float | None:
        """Due time of the earliest live task, or None when idle."""
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)
        return self._queue[0].due if self._queue else None

    def run_pending(self) -> int:
        """Run every task whose due time has passed, in due order.

        Tasks scheduled by a running callback are picked up in the same call
        if they are already due.

        Returns:
            Number of callbacks executed.
        """
        executed = 0
        now = self.now()
        while self._queue and self._queue[0].due <= now:
            task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            if self._by_key.get(task.key) is task:
                del self._by_key[task.key]
            try:
                task.callback()
            except Exception as e:
                logger.error(f"Scheduled task for {task.key!r} failed: {e}")
            executed += 1
        return executed

    def __len__(self) -> int:
        return len(self._by_key)
