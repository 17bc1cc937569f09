"""Accumulator of test run statistics and failures."""

import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Self

from loupe.color import Color
from loupe.failure import Failure
from loupe.options import Options

if TYPE_CHECKING:
    from loupe.test import Test


class Reporter(ABC):
    """Counts tests, expectations, successes and failures.

    Every test runs against its own reporter. Workers hand their reporters back
    to the executor, which merges them into one. Merging sums the counters and
    concatenates the failures, so the final report does not depend on the order
    in which workers finish.
    """

    def __init__(self, options: Options | None = None) -> None:
        self.options = options or Options()
        self.color = Color(self.options.color)
        self.test_count = 0
        self.expectation_count = 0
        self.success_count = 0
        self.failure_count = 0
        self.failures: list[Failure] = []
        self.start_time = time.monotonic()

    def increment_test_count(self) -> int:
        self.test_count += 1
        return self.test_count

    def increment_expectation_count(self) -> int:
        self.expectation_count += 1
        return self.expectation_count

    def increment_success_count(self) -> int:
        self._progress(self.color.format(".", "green"))
        self.success_count += 1
        return self.success_count

    def increment_failure_count(self, test: "Test", message: str) -> int:
        self._progress(self.color.format("F", "red"))
        self.failures.append(Failure.from_test(test, message))
        self.failure_count += 1
        return self.failure_count

    def record_error(
        self, test_class: type["Test"], method_name: str, error: BaseException
    ) -> int:
        """Record a test that crashed instead of completing.

        The test is counted as run and as failed, with the error as message.
        """
        function = test_class.test_methods.get(method_name)
        self._progress(self.color.format("E", "red"))
        self.test_count += 1
        self.failures.append(
            Failure(
                file_name=function.__code__.co_filename if function else "<unknown>",
                test_name=method_name,
                line_number=function.__code__.co_firstlineno if function else 0,
                message=f"{type(error).__name__}: {error}",
                klass=test_class,
                color=self.color,
            )
        )
        self.failure_count += 1
        return self.failure_count

    def merge(self, other: "Reporter") -> Self:
        """Add the counters and failures of `other` into this reporter."""
        self.test_count += other.test_count
        self.expectation_count += other.expectation_count
        self.success_count += other.success_count
        self.failure_count += other.failure_count
        self.failures.extend(other.failures)
        return self

    def exit_status(self) -> int:
        return 0 if self.failure_count == 0 else 1

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.start_time

    def summary(self) -> str:
        """Return the counters block shared by every renderer."""
        return (
            f"Tests: {self.test_count} Expectations: {self.expectation_count}\n"
            f"Passed: {self.success_count} Failures: {self.failure_count}"
        )

    def finished_in(self) -> str:
        return f"Finished in {self.elapsed:.5f} seconds"

    @abstractmethod
    def print_summary(self) -> None:
        """Render the final state of the run."""

    def _progress(self, glyph: str) -> None:
        print(glyph, end="", flush=True)
