"""Tests for the shared queue server."""

from loupe.executors.queue_server import QueueServer
from loupe.options import Options
from loupe.registry import TestRegistry
from loupe.reporters import PlainReporter
from loupe.test import Test
from loupe.work_queue import WorkItem


class QueuedTest(Test, registry=TestRegistry()):
    def test_queued(self) -> None:
        pass


def queued(count: int) -> list[WorkItem]:
    return [
        WorkItem(test_class=QueuedTest, method_name="test_queued")
        for _ in range(count)
    ]


def test_pops_until_empty(options: Options) -> None:
    """Pops every item once and then returns None."""
    server = QueueServer(queued(2), PlainReporter(options))

    assert server.length() == 2
    assert not server.is_empty()
    assert server.pop(1) is not None
    assert server.pop(1) is not None
    assert server.is_empty()
    assert server.pop(1) is None


def test_merges_partial_reporters(options: Options) -> None:
    """Returns the accumulated reporter with every partial merged in once."""
    server = QueueServer(queued(3), PlainReporter(options))
    for worker in range(3):
        server.pop(worker)
        partial = PlainReporter(options)
        partial.test_count = partial.success_count = 1
        server.add_reporter(worker, partial)

    reporter = server.reporter()

    assert reporter.test_count == 3
    assert reporter.success_count == 3
    assert server.reporter().test_count == 3
    assert server.abandoned() == {}


def test_tracks_items_of_silent_workers(options: Options) -> None:
    """Items whose worker never reported back are returned once."""
    items = queued(2)
    server = QueueServer(list(items), PlainReporter(options))
    server.pop(10)
    server.pop(20)
    server.add_reporter(10, PlainReporter(options))

    assert server.abandoned() == {20: items[0]}
    assert server.abandoned() == {}


def test_drain_empties_queue(options: Options) -> None:
    """Draining hands back every queued item and leaves the queue empty."""
    server = QueueServer(queued(3), PlainReporter(options))
    server.pop(1)

    assert len(server.drain()) == 2
    assert server.is_empty()
    assert server.drain() == []
