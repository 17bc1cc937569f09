"""Chainable expectations evaluated against a captured target.

Expectations read as plain English::

    expect(collection).to_not_be_empty().to_include(item)

Every check counts one expectation on the owning test's reporter. A passing
check returns the expectation so further checks can be chained against the same
target. A failing check records a failure and raises `ExpectationFailedError`,
which aborts the rest of the test method.
"""

import operator
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

from loupe.color import ColorName

if TYPE_CHECKING:
    from loupe.test import Test

OPERATORS: Mapping[str, Callable[[Any, Any], Any]] = {
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
    ">=": operator.ge,
    ">": operator.gt,
    "in": lambda a, b: a in b,
    "is": operator.is_,
    "is not": operator.is_not,
}

_MISSING = object()


class ExpectationFailedError(Exception):
    """Raised when a check fails to abort the current test method."""


class Expectation:
    """Wraps a target so that checks can be performed on it."""

    def __init__(self, target: Any, test: "Test") -> None:
        self.target = target
        self._test = test
        self._color = test.color

    def to_be_truthy(self, *, message: str | None = None) -> Self:
        return self._assert(
            bool(self.target),
            f"Expected {self._red(self.target)} to be {self._paint('truthy')}.",
            message,
        )

    def to_be_falsey(self, *, message: str | None = None) -> Self:
        return self._assert(
            not self.target,
            f"Expected {self._red(self.target)} to be {self._paint('falsey')}.",
            message,
        )

    def to_be_equal_to(self, value: Any, *, message: str | None = None) -> Self:
        """Compare values. For identity use `to_be_the_same_as`."""
        return self._assert(
            self.target == value,
            f"Expected {self._red(self.target)} to be equal to {self._green(value)}.",
            message,
        )

    def to_not_be_equal_to(self, value: Any, *, message: str | None = None) -> Self:
        return self._assert(
            self.target != value,
            f"Expected {self._red(self.target)} to not be equal to "
            f"{self._green(value)}.",
            message,
        )

    def to_be_empty(self, *, message: str | None = None) -> Self:
        return self._assert(
            len(self.target) == 0,
            f"Expected {self._red(self.target)} to be empty.",
            message,
        )

    def to_not_be_empty(self, *, message: str | None = None) -> Self:
        return self._assert(
            len(self.target) != 0,
            f"Expected {self._red(self.target)} to not be empty.",
            message,
        )

    def to_respond_to(self, name: str, *, message: str | None = None) -> Self:
        return self._assert(
            callable(getattr(self.target, name, None)),
            f"Expected {self._red(self.target)} to respond to "
            f"{self._paint(name, 'green')}.",
            message,
        )

    def to_not_respond_to(self, name: str, *, message: str | None = None) -> Self:
        return self._assert(
            not callable(getattr(self.target, name, None)),
            f"Expected {self._red(self.target)} to not respond to "
            f"{self._paint(name, 'green')}.",
            message,
        )

    def to_include(self, item: Any, *, message: str | None = None) -> Self:
        return self._assert(
            item in self.target,
            f"Expected {self._red(self.target)} to include {self._green(item)}.",
            message,
        )

    def to_not_include(self, item: Any, *, message: str | None = None) -> Self:
        return self._assert(
            item not in self.target,
            f"Expected {self._red(self.target)} to not include {self._green(item)}.",
            message,
        )

    def to_be_none(self, *, message: str | None = None) -> Self:
        return self._assert(
            self.target is None,
            f"Expected {self._red(self.target)} to be None.",
            message,
        )

    def to_not_be_none(self, *, message: str | None = None) -> Self:
        return self._assert(
            self.target is not None,
            f"Expected {self._red(self.target)} to not be None.",
            message,
        )

    def to_be_an_instance_of(self, klass: type, *, message: str | None = None) -> Self:
        """Expect the exact type of the target to be `klass`."""
        return self._assert(
            type(self.target) is klass,
            f"Expected {self._red(self.target)} to be an instance of "
            f"{self._type_name(klass, 'green')}, "
            f"not {self._type_name(type(self.target), 'red')}.",
            message,
        )

    def to_not_be_an_instance_of(
        self, klass: type, *, message: str | None = None
    ) -> Self:
        return self._assert(
            type(self.target) is not klass,
            f"Expected {self._red(self.target)} to not be an instance of "
            f"{self._type_name(klass, 'green')}.",
            message,
        )

    def to_be_a_kind_of(
        self, klass: type | tuple[type, ...], *, message: str | None = None
    ) -> Self:
        """Expect `isinstance(target, klass)`, subclasses included."""
        return self._assert(
            isinstance(self.target, klass),
            f"Expected {self._red(self.target)} to be a kind of "
            f"{self._type_name(klass, 'green')}, "
            f"not {self._type_name(type(self.target), 'red')}.",
            message,
        )

    def to_not_be_a_kind_of(
        self, klass: type | tuple[type, ...], *, message: str | None = None
    ) -> Self:
        return self._assert(
            not isinstance(self.target, klass),
            f"Expected {self._red(self.target)} to not be a kind of "
            f"{self._type_name(klass, 'green')}.",
            message,
        )

    def to_be(self, predicate: str, *, message: str | None = None) -> Self:
        """Expect the zero-argument method `predicate` of the target to be truthy.

        Example::

            expect("loupe").to_be("islower")
        """
        return self._assert(
            bool(getattr(self.target, predicate)()),
            f"Expected {self._red(self.target)} to be "
            f"{self._paint(predicate, 'green')}.",
            message,
        )

    def to_not_be(self, predicate: str, *, message: str | None = None) -> Self:
        return self._assert(
            not getattr(self.target, predicate)(),
            f"Expected {self._red(self.target)} to not be "
            f"{self._paint(predicate, 'green')}.",
            message,
        )

    def to_match(self, text: str, *, message: str | None = None) -> Self:
        """Expect the target, a pattern or a plain string, to be found in `text`.

        A string target is replaced by a compiled pattern matching it literally,
        so chained checks see the pattern.

        Example::

            expect(re.compile(r"loupe \\d+")).to_match("loupe 1")
            expect("loupe").to_match("loupe 1")
        """
        search = self._compile_target()
        return self._assert(
            search is not None and search(text) is not None,
            f"Expected {self._red(self.target)} to match {self._green(text)}.",
            message,
        )

    def to_not_match(self, text: str, *, message: str | None = None) -> Self:
        search = self._compile_target()
        return self._assert(
            search is not None and search(text) is None,
            f"Expected {self._red(self.target)} to not match {self._green(text)}.",
            message,
        )

    def to_be_the_same_as(self, other: Any, *, message: str | None = None) -> Self:
        """Expect the target and `other` to be the very same object."""
        return self._assert(
            self.target is other,
            f"Expected {self._red(self.target)} ({self._paint(id(self.target), 'red')})"
            f" to be the same as {self._green(other)} ({self._paint(id(other))}).",
            message,
        )

    def to_not_be_the_same_as(self, other: Any, *, message: str | None = None) -> Self:
        """Expect different objects. Equal values held by two objects pass."""
        return self._assert(
            self.target is not other,
            f"Expected {self._red(self.target)} ({self._paint(id(self.target), 'red')})"
            f" to not be the same as {self._green(other)} "
            f"({self._paint(id(other))}).",
            message,
        )

    def to_be_an_existing_path(self, *, message: str | None = None) -> Self:
        return self._assert(
            Path(self.target).exists(),
            f"Expected path '{self._red(self.target)}' to exist.",
            message,
        )

    def to_not_be_an_existing_path(self, *, message: str | None = None) -> Self:
        return self._assert(
            not Path(self.target).exists(),
            f"Expected path '{self._red(self.target)}' to not exist.",
            message,
        )

    def to_be_in_delta_of(
        self, value: float, delta: float = 0.001, *, message: str | None = None
    ) -> Self:
        """Expect `abs(target - value) <= delta`.

        Example::

            expect(5.0).to_be_in_delta_of(5.1, 0.2)
        """
        difference = abs(self.target - value)
        return self._assert(
            difference <= delta,
            f"Expected |{self.target} - {value}| ({self._paint(difference, 'red')}) "
            f"to be <= {self._paint(delta, 'green')}.",
            message,
        )

    def to_not_be_in_delta_of(
        self, value: float, delta: float = 0.001, *, message: str | None = None
    ) -> Self:
        difference = abs(self.target - value)
        return self._assert(
            difference > delta,
            f"Expected |{self.target} - {value}| ({self._paint(difference, 'red')}) "
            f"to not be <= {self._paint(delta, 'green')}.",
            message,
        )

    def to_be_in_epsilon_of(
        self, value: float, epsilon: float = 0.001, *, message: str | None = None
    ) -> Self:
        """Expect the target within `epsilon` relative to the smaller magnitude.

        Delegates to `to_be_in_delta_of` with
        `delta = epsilon * min(abs(target), abs(value))`. For 5.0 and 5.1 with
        an epsilon of 0.1 the delta is 0.5, and the difference of 0.1 passes.
        """
        delta = min(abs(self.target), abs(value)) * epsilon
        return self.to_be_in_delta_of(value, delta, message=message)

    def to_not_be_in_epsilon_of(
        self, value: float, epsilon: float = 0.001, *, message: str | None = None
    ) -> Self:
        delta = min(abs(self.target), abs(value)) * epsilon
        return self.to_not_be_in_delta_of(value, delta, message=message)

    def to_satisfy_operator(
        self, symbol: str, other: Any = _MISSING, *, message: str | None = None
    ) -> Self:
        """Expect `target <symbol> other` to hold, e.g. `(">", 4.9)`.

        Without `other`, `symbol` is treated as a predicate name, see `to_be`.
        """
        if other is _MISSING:
            return self.to_be(symbol, message=message)

        return self._assert(
            bool(OPERATORS[symbol](self.target, other)),
            f"Expected {self._red(self.target)} to be {symbol} {self._green(other)}.",
            message,
        )

    def to_not_satisfy_operator(
        self, symbol: str, other: Any = _MISSING, *, message: str | None = None
    ) -> Self:
        if other is _MISSING:
            return self.to_not_be(symbol, message=message)

        return self._assert(
            not OPERATORS[symbol](self.target, other),
            f"Expected {self._red(self.target)} to not be {symbol} "
            f"{self._green(other)}.",
            message,
        )

    def _assert(self, value: bool, failure_message: str, override: str | None) -> Self:
        """Count the check and abort the test when it did not pass."""
        reporter = self._test.reporter
        reporter.increment_expectation_count()
        if value:
            return self

        failure_message = override if override is not None else failure_message
        reporter.increment_failure_count(self._test, failure_message)
        raise ExpectationFailedError(failure_message)

    def _compile_target(self) -> Callable[[str], Any] | None:
        """Coerce a string target into a literal pattern and return its search."""
        if isinstance(self.target, str):
            self.target = re.compile(re.escape(self.target))
        search = getattr(self.target, "search", None)
        return search if callable(search) else None

    def _red(self, value: Any) -> str:
        return self._paint(repr(value), "red")

    def _green(self, value: Any) -> str:
        return self._paint(repr(value), "green")

    def _type_name(self, klass: type | tuple[type, ...], color: ColorName) -> str:
        if isinstance(klass, tuple):
            name = ", ".join(k.__name__ for k in klass)
        else:
            name = klass.__name__
        return self._paint(name, color)

    def _paint(self, text: object, color: ColorName = "green") -> str:
        return self._color.format(text, color)
