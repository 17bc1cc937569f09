"""Executor dispatching tests to a pool of worker processes."""

import asyncio
import logging
import multiprocessing
from concurrent.futures import ProcessPoolExecutor
from concurrent.futures.process import BrokenProcessPool

from loupe.executors.base import Executor, run_work_item
from loupe.reporters import Reporter
from loupe.work_queue import WorkItem

log = logging.getLogger(__name__)


class PoolExecutor(Executor):
    """Keeps one test in flight per worker and refills the first idle worker.

    Workers are forked processes, so they inherit the loaded test classes and
    share no memory with the controller. Work items go out and reporters come
    back as pickled messages.

    A worker dying breaks the whole pool: every test in flight at that moment
    is recorded as a crash and a new pool takes over the rest of the queue.
    """

    async def run(self) -> int:
        if not self.queue:
            log.info("No tests to run")
            return self.finish()

        worker_count = self.worker_count
        log.info(
            "Dispatching %d test(s) to %d worker(s)...", len(self.queue), worker_count
        )
        loop = asyncio.get_running_loop()
        in_flight: dict[asyncio.Future[Reporter], WorkItem] = {}
        pool = self._start_pool(worker_count)

        def dispatch() -> None:
            """Hand the next queued item to the pool."""
            nonlocal pool
            if not self.queue:
                return

            item = self.queue.pop()
            try:
                future = loop.run_in_executor(pool, run_work_item, item, self.options)
            except BrokenProcessPool:
                log.warning("Process pool is broken, starting a new one")
                pool.shutdown(wait=False)
                pool = self._start_pool(worker_count)
                future = loop.run_in_executor(pool, run_work_item, item, self.options)
            in_flight[future] = item

        try:
            for _ in range(worker_count):
                dispatch()

            while in_flight:
                done, _ = await asyncio.wait(
                    in_flight, return_when=asyncio.FIRST_COMPLETED
                )
                for future in done:
                    item = in_flight.pop(future)
                    try:
                        self.reporter.merge(future.result())
                    except Exception as error:
                        self._record_crash(item, error)
                    dispatch()
        finally:
            pool.shutdown()

        return self.finish()

    def _start_pool(self, worker_count: int) -> ProcessPoolExecutor:
        context = multiprocessing.get_context("fork")
        return ProcessPoolExecutor(worker_count, mp_context=context)
