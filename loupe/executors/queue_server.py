"""Shared queue and result accumulator for worker processes."""

from multiprocessing.managers import BaseManager

from loupe.reporters import Reporter
from loupe.work_queue import WorkItem


class QueueServer:
    """The one object worker processes coordinate through.

    It lives in a manager process and is reached through a proxy, so every
    call is a request over a local socket. Workers pop work items from the
    queue and push back their partial reporters. Partial reporters are only
    appended here and merged when the controller asks for the result.

    The item each worker is running is remembered until its reporter comes
    back, so the controller can account for items of workers that died.
    """

    def __init__(self, queue: list[WorkItem], reporter: Reporter) -> None:
        self._queue = queue
        self._reporter = reporter
        self._partials: list[Reporter] = []
        self._running: dict[int, WorkItem] = {}

    def pop(self, worker: int) -> WorkItem | None:
        """Return the next work item for `worker`, or None once drained."""
        try:
            item = self._queue.pop()
        except IndexError:
            return None
        self._running[worker] = item
        return item

    def is_empty(self) -> bool:
        return not self._queue

    def length(self) -> int:
        return len(self._queue)

    def add_reporter(self, worker: int, other: Reporter) -> None:
        self._partials.append(other)
        self._running.pop(worker, None)

    def abandoned(self) -> dict[int, WorkItem]:
        """Return and forget the items whose worker never reported back."""
        running, self._running = self._running, {}
        return running

    def drain(self) -> list[WorkItem]:
        """Remove and return every item still queued."""
        queue, self._queue = self._queue, []
        return queue

    def reporter(self) -> Reporter:
        """Return the accumulated reporter with every partial merged in."""
        while self._partials:
            self._reporter.merge(self._partials.pop())
        return self._reporter


class QueueManager(BaseManager):
    """Manager serving `QueueServer` instances to worker processes."""


QueueManager.register("QueueServer", QueueServer)
