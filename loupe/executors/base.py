"""Abstract base class for test executors."""

import logging
import os
from abc import ABC, abstractmethod

from loupe.options import Options
from loupe.registry import TestRegistry, registry
from loupe.reporters import Reporter, build_reporter
from loupe.work_queue import WorkItem, build_work_queue

log = logging.getLogger(__name__)


class WorkerDiedError(Exception):
    """Raised for a test whose worker process exited before reporting back."""


class Executor(ABC):
    """Runs every queued test and aggregates the results into one reporter.

    Concrete executors decide how work items reach workers and how the
    workers' partial reporters come back.
    """

    def __init__(
        self, options: Options, test_registry: TestRegistry = registry
    ) -> None:
        self.options = options
        self.queue = build_work_queue(test_registry, options.seed)
        self.reporter = build_reporter(options)

    @property
    def worker_count(self) -> int:
        """Number of workers: bounded by the CPUs and by the queued tests."""
        limit = self.options.workers or os.cpu_count() or 1
        return min(limit, len(self.queue))

    @abstractmethod
    async def run(self) -> int:
        """Run all queued tests, render the summary and return the exit status."""

    def finish(self) -> int:
        """Render the merged results and return the exit status."""
        log.info(
            "Test run completed: tests=%d failures=%d",
            self.reporter.test_count,
            self.reporter.failure_count,
        )
        self.reporter.print_summary()
        return self.reporter.exit_status()

    def _record_crash(self, item: WorkItem, error: BaseException) -> None:
        log.error("Worker failed running %s: %s", item, error, exc_info=error)
        self.reporter.merge(errored_reporter(item, error, self.options))


def run_work_item(item: WorkItem, options: Options) -> Reporter:
    """Execute one work item, turning a crashing test into a failure."""
    try:
        return item.test_class.execute(item.method_name, options)
    except Exception as error:
        log.error("Test %s raised: %s", item, error, exc_info=error)
        return errored_reporter(item, error, options)


def errored_reporter(
    item: WorkItem, error: BaseException, options: Options
) -> Reporter:
    reporter = build_reporter(options)
    reporter.record_error(item.test_class, item.method_name, error)
    return reporter
