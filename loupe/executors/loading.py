"""Loading of executors from entry points."""

from importlib.metadata import entry_points

from loupe.executors.base import Executor

ENTRY_POINT_GROUP = "loupe.executors"


class ExecutorNotFoundError(Exception):
    """Raised when an executor is not found."""


def available_executors() -> list[str]:
    return sorted(entry.name for entry in entry_points(group=ENTRY_POINT_GROUP))


def load_executor(key: str) -> type[Executor]:
    """Load an executor class by key.

    Args:
        key: The executor key as registered in pyproject.toml
             (e.g., "pool", "process")

    Returns:
        The executor class

    Raises:
        ExecutorNotFoundError: If no executor with the given key is found

    """
    entries = entry_points(group=ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            executor_cls: type[Executor] = entry.load()
            return executor_cls

    available = [e.name for e in entries]
    raise ExecutorNotFoundError(
        f"Executor '{key}' not found. Available executors: {available}"
    )
