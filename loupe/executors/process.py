"""Executor running tests in forked processes around a shared queue server."""

import asyncio
import logging
import multiprocessing
import os
from collections.abc import Mapping
from multiprocessing.process import BaseProcess

from loupe.executors.base import Executor, WorkerDiedError, run_work_item
from loupe.executors.queue_server import QueueManager, QueueServer
from loupe.options import Options
from loupe.reporters import build_reporter

log = logging.getLogger(__name__)


class ProcessExecutor(Executor):
    """Forks workers that pull tests from a `QueueServer` until it is empty.

    The queue and the accumulated results live in a manager process; the
    controller only starts the workers, waits for them and renders the result.
    A worker that dies takes its current test with it: that test is recorded
    as a crash and fresh workers are started for whatever is still queued.
    When a whole round of workers exits without taking a test, the remaining
    tests are recorded as crashes instead.
    """

    async def run(self) -> int:
        if not self.queue:
            log.info("No tests to run")
            return self.finish()

        worker_count = self.worker_count
        queue, self.queue = self.queue, []
        context = multiprocessing.get_context("fork")

        with QueueManager(ctx=context) as manager:
            server: QueueServer = manager.QueueServer(  # type: ignore[attr-defined]
                queue, build_reporter(self.options)
            )
            while not server.is_empty():
                remaining = server.length()
                count = min(worker_count, remaining)
                log.info(
                    "Starting %d worker process(es) for %d test(s)...",
                    count,
                    server.length(),
                )
                workers = [
                    context.Process(target=work, args=(server, self.options))
                    for _ in range(count)
                ]
                for worker in workers:
                    worker.start()

                exit_codes = await asyncio.to_thread(shutdown, workers)
                for pid, item in server.abandoned().items():
                    error = WorkerDiedError(
                        f"Worker {pid} exited with code {exit_codes.get(pid)}"
                    )
                    self._record_crash(item, error)

                if server.length() == remaining:
                    log.error("Workers exited without taking any test, giving up")
                    error = WorkerDiedError("Worker exited before running the test")
                    for item in server.drain():
                        self._record_crash(item, error)

            self.reporter.merge(server.reporter())

        return self.finish()


def work(server: QueueServer, options: Options) -> None:
    """Worker loop: run tests from the server until none are left."""
    pid = os.getpid()
    while not server.is_empty():
        item = server.pop(pid)
        if item is not None:
            server.add_reporter(pid, run_work_item(item, options))


def shutdown(workers: list[BaseProcess]) -> Mapping[int, int]:
    """Wait for every worker process to exit and return their exit codes."""
    exit_codes: dict[int, int] = {}
    for worker in workers:
        worker.join()
        if worker.pid is None or worker.exitcode is None:
            continue
        exit_codes[worker.pid] = worker.exitcode
        if worker.exitcode:
            log.error("Worker %s exited with code %s", worker.pid, worker.exitcode)
    return exit_codes
