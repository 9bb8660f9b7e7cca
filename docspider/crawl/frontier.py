"""Shared crawl frontier: FIFO queue of pending pages plus the visited set.

The frontier is the only mutable state shared between crawl workers. All
access goes through three operations guarded by one asyncio.Condition:

- claim(): atomically dequeue the next unvisited task and mark it visited
- offer(): enqueue a path unless it is already visited or queued
- task_done(): report that a claimed task has finished (success or failure)

claim() only reports exhaustion when the queue is empty AND no claimed task
is still in flight, since an in-flight fetch may yet offer new paths.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Iterable

from docspider.crawl.models import PageTask


class Frontier:
    """Deduplicating work queue for the crawler.

    Args:
        seeds: Initial tasks, in priority order

    Example:
        >>> frontier = Frontier([PageTask("/docs/a", "Intro")])
        >>> task = await frontier.claim()
        >>> await frontier.offer("/docs/b", "Discovered")
        True
        >>> await frontier.task_done()
    """

    def __init__(self, seeds: Iterable[PageTask] = ()) -> None:
        self._queue: deque[PageTask] = deque(seeds)
        self._queued: set[str] = {task.path for task in self._queue}
        self._visited: set[str] = set()
        self._in_flight = 0
        self._condition = asyncio.Condition()

    async def claim(self) -> PageTask | None:
        """Take the next unvisited task, marking its path visited.

        Waits while the queue is empty but other tasks are in flight.

        Returns:
            The claimed task, or None once the crawl is exhausted
        """
        async with self._condition:
            while True:
                while self._queue:
                    task = self._queue.popleft()
                    self._queued.discard(task.path)
                    if task.path in self._visited:
                        continue
                    self._visited.add(task.path)
                    self._in_flight += 1
                    return task
                if self._in_flight == 0:
                    # Wake any other waiters so they observe exhaustion too
                    self._condition.notify_all()
                    return None
                await self._condition.wait()

    async def offer(self, path: str, section: str) -> bool:
        """Enqueue a discovered path.

        Returns:
            True if the path was queued, False if already visited or queued
        """
        async with self._condition:
            if path in self._visited or path in self._queued:
                return False
            self._queue.append(PageTask(path=path, section=section))
            self._queued.add(path)
            self._condition.notify()
            return True

    async def task_done(self) -> None:
        """Mark one claimed task as settled."""
        async with self._condition:
            if self._in_flight <= 0:
                raise ValueError("task_done() called more times than claim()")
            self._in_flight -= 1
            self._condition.notify_all()

    @property
    def visited(self) -> frozenset[str]:
        """Snapshot of every path claimed so far."""
        return frozenset(self._visited)

    @property
    def pending(self) -> int:
        """Number of queued (not yet claimed) tasks, duplicates included."""
        return len(self._queue)

    @property
    def in_flight(self) -> int:
        """Number of claimed tasks not yet reported done."""
        return self._in_flight
