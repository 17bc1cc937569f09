"""Building the queue of tests to execute."""

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loupe.registry import TestRegistry

if TYPE_CHECKING:
    from loupe.test import Test


@dataclass(frozen=True, kw_only=True)
class WorkItem:
    """A single test method of a test class, executed exactly once."""

    test_class: type["Test"]
    method_name: str

    def __str__(self) -> str:
        return f"{self.test_class.__qualname__}#{self.method_name}"


def build_work_queue(
    test_registry: TestRegistry, seed: int | None = None
) -> list[WorkItem]:
    """Return one work item per selected test method, in random order.

    Classes with line filters only contribute the methods defined on one of
    the selected lines. The order is shuffled to surface tests that depend on
    each other; `seed` makes it reproducible.
    """
    queue: list[WorkItem] = []
    for test_class, line_numbers in test_registry.classes.items():
        for method_name, function in test_class.test_methods.items():
            if line_numbers and function.__code__.co_firstlineno not in line_numbers:
                continue
            queue.append(WorkItem(test_class=test_class, method_name=method_name))

    random.Random(seed).shuffle(queue)
    return queue
