"""Base class for tests run by loupe."""

import contextlib
import io
import re
import types
from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from loupe.color import Color
from loupe.expectation import Expectation, ExpectationFailedError
from loupe.options import Options
from loupe.registry import TestRegistry
from loupe.registry import registry as default_registry
from loupe.reporters import Reporter, build_reporter

TEST_METHOD_PREFIX = "test"


class Test:
    """Parent class of every test. Subclasses are registered when defined.

    Each public method whose name starts with ``test`` and that is declared
    directly on the class is one test. Pass ``registry=`` in the class
    statement to register into a registry other than the process-wide one.

    Example::

        class CalculatorTest(Test):
            def before(self):
                self.calculator = Calculator()

            def test_addition(self):
                self.expect(self.calculator.add(1, 2)).to_be_equal_to(3)
    """

    __test__ = False

    test_methods: ClassVar[Mapping[str, Callable[..., Any]]] = {}

    def __init_subclass__(
        cls, *, registry: TestRegistry | None = None, **kwargs: Any
    ) -> None:
        super().__init_subclass__(**kwargs)
        cls.test_methods = {
            name: function
            for name, function in vars(cls).items()
            if name.startswith(TEST_METHOD_PREFIX)
            and isinstance(function, types.FunctionType)
        }
        (registry or default_registry).register(cls)

    @classmethod
    def test_list(cls) -> list[str]:
        return list(cls.test_methods)

    @classmethod
    def execute(cls, method_name: str, options: Options | None = None) -> Reporter:
        """Run the test `method_name` and return the reporter holding its results.

        A failed expectation stops the test and never propagates past this
        method. Any other exception does.
        """
        options = options or Options()
        reporter = build_reporter(options)
        with contextlib.suppress(ExpectationFailedError):
            cls(reporter, method_name, options).run()
        return reporter

    def __init__(
        self, reporter: Reporter, method_name: str, options: Options | None = None
    ) -> None:
        options = options or Options()
        function = type(self).test_methods[method_name]
        self.reporter = reporter
        self.color = Color(options.color)
        self.name = method_name
        self.file = function.__code__.co_filename
        self.line_number = function.__code__.co_firstlineno
        self._method = types.MethodType(function, self)

    def run(self) -> None:
        """Run the bound test method between the `before` and `after` hooks."""
        self.reporter.increment_test_count()
        self.before()
        self._method()
        self.after()
        self.reporter.increment_success_count()

    def before(self) -> None:
        """Hook run before the test method."""

    def after(self) -> None:
        """Hook run after a test method that passed."""

    def expect(self, target: Any) -> Expectation:
        """Start an expectation on `target`.

        Checks can be chained as long as the target is the same::

            self.expect(collection).to_not_be_empty().to_include(item)
        """
        return Expectation(target, self)

    def expect_output_to_match(
        self,
        block: Callable[[], object] | None,
        stdout: str | re.Pattern[str] | None = None,
        stderr: str | re.Pattern[str] | None = None,
    ) -> None:
        """Expect what `block` prints to match `stdout` and `stderr`.

        A pattern must be found in the captured output, a string must equal it.
        Pass None for a stream that is not of interest::

            self.expect_output_to_match(lambda: print("foo"), "foo\\n")
            self.expect_output_to_match(fail, stderr=re.compile("error: .*"))
        """
        if block is None:
            raise ValueError(
                "expect_output_to_match requires a block to capture output."
            )

        out, err = self._capture_output(block)

        if stdout is not None:
            self._match_or_equal(stdout, out)
        if stderr is not None:
            self._match_or_equal(stderr, err)

    def expect_output_to_not_match(
        self,
        block: Callable[[], object] | None,
        stdout: str | re.Pattern[str] | None = None,
        stderr: str | re.Pattern[str] | None = None,
    ) -> None:
        """Expect what `block` prints not to match `stdout` and `stderr`."""
        if block is None:
            raise ValueError(
                "expect_output_to_not_match requires a block to capture output."
            )

        out, err = self._capture_output(block)

        if stdout is not None:
            self._refute_match_or_equal(stdout, out)
        if stderr is not None:
            self._refute_match_or_equal(stderr, err)

    def expect_output_to_be_empty(self, block: Callable[[], object] | None) -> None:
        """Expect `block` to print nothing to either stream."""
        self.expect_output_to_match(block, "", "")

    def expect_output_to_not_be_empty(
        self, block: Callable[[], object] | None
    ) -> None:
        """Expect `block` to print something to each stream."""
        self.expect_output_to_not_match(block, "", "")

    def _match_or_equal(self, matcher: str | re.Pattern[str], output: str) -> None:
        if isinstance(matcher, re.Pattern):
            self.expect(matcher).to_match(output)
        else:
            self.expect(matcher).to_be_equal_to(output)

    def _refute_match_or_equal(
        self, matcher: str | re.Pattern[str], output: str
    ) -> None:
        if isinstance(matcher, re.Pattern):
            self.expect(matcher).to_not_match(output)
        else:
            self.expect(matcher).to_not_be_equal_to(output)

    @staticmethod
    def _capture_output(block: Callable[[], object]) -> tuple[str, str]:
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            block()
        return out.getvalue(), err.getvalue()
