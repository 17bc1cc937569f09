"""Executors running the queued tests on parallel workers."""

from loupe.executors.base import Executor, WorkerDiedError, run_work_item
from loupe.executors.loading import ExecutorNotFoundError, load_executor
from loupe.executors.pool import PoolExecutor
from loupe.executors.process import ProcessExecutor
from loupe.executors.queue_server import QueueServer

__all__ = [
    "Executor",
    "ExecutorNotFoundError",
    "PoolExecutor",
    "ProcessExecutor",
    "QueueServer",
    "WorkerDiedError",
    "load_executor",
    "run_work_item",
]
