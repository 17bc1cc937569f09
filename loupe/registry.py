"""Process-wide registry of test classes and their line filters."""

import logging
import threading
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loupe.test import Test

log = logging.getLogger(__name__)


class TestRegistry:
    """Maps each test class to the source lines selected for it.

    An empty line list means every test method of the class is selected.
    """

    __test__ = False

    def __init__(self) -> None:
        self._classes: dict[type["Test"], list[int]] = {}
        self._lock = threading.Lock()

    @property
    def classes(self) -> Mapping[type["Test"], Sequence[int]]:
        return self._classes

    def register(self, test_class: type["Test"]) -> None:
        """Add a test class, replacing an earlier definition of the same name.

        Loading a test file again defines new class objects; the stale ones
        are dropped so they are not queued twice.
        """
        with self._lock:
            for existing in list(self._classes):
                if (existing.__module__, existing.__qualname__) == (
                    test_class.__module__,
                    test_class.__qualname__,
                ):
                    del self._classes[existing]
            self._classes[test_class] = []
        log.debug("Registered test class %s", test_class.__qualname__)

    def add_line_number(self, test_class: type["Test"], number: int) -> None:
        with self._lock:
            self._classes[test_class].append(number)

    def classes_in(self, module_name: str) -> Sequence[type["Test"]]:
        """Return the registered classes defined in `module_name`."""
        return [
            test_class
            for test_class in self._classes
            if test_class.__module__ == module_name
        ]

    def clear(self) -> None:
        with self._lock:
            self._classes.clear()


registry = TestRegistry()
