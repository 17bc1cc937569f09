"""Tests for the Test base class."""

import re
import sys

import pytest

from loupe.expectation import ExpectationFailedError
from loupe.options import Options
from loupe.registry import TestRegistry, registry
from loupe.reporters import PagedReporter, PlainReporter
from loupe.test import Test

SAMPLE_REGISTRY = TestRegistry()


class LifecycleTest(Test, registry=SAMPLE_REGISTRY):
    def before(self) -> None:
        self.events = ["before"]

    def after(self) -> None:
        self.events.append("after")

    def test_passes(self) -> None:
        self.events.append("body")
        self.expect(1).to_be_equal_to(1)

    def test_fails(self) -> None:
        self.events.append("body")
        self.expect(1).to_be_equal_to(2)
        self.events.append("unreachable")

    def test_raises(self) -> None:
        raise RuntimeError("boom")

    def helper(self) -> None:
        """Not a test."""

    testing_attribute = "not a method"


class ChildTest(LifecycleTest, registry=SAMPLE_REGISTRY):
    def test_child(self) -> None:
        pass


class OutputTest(Test, registry=SAMPLE_REGISTRY):
    def test_output(self) -> None:
        pass


@pytest.fixture
def output_test(reporter: PlainReporter, options: Options) -> OutputTest:
    """Create an output test instance reporting to a fresh reporter."""
    return OutputTest(reporter, "test_output", options)


def noisy() -> None:
    print("out")
    print("err", file=sys.stderr)


def test_subclasses_are_registered() -> None:
    """Defining a subclass registers it in the given registry only."""
    assert LifecycleTest in SAMPLE_REGISTRY.classes
    assert ChildTest in SAMPLE_REGISTRY.classes
    assert LifecycleTest not in registry.classes


def test_test_list_contains_own_test_methods() -> None:
    """Only methods declared on the class with the test prefix are tests."""
    assert LifecycleTest.test_list() == ["test_passes", "test_fails", "test_raises"]
    assert ChildTest.test_list() == ["test_child"]


def test_run_calls_hooks_around_method(
    reporter: PlainReporter, options: Options
) -> None:
    """A passing test runs before, the method and after, then counts a success."""
    test = LifecycleTest(reporter, "test_passes", options)

    test.run()

    assert test.events == ["before", "body", "after"]
    assert reporter.test_count == 1
    assert reporter.expectation_count == 1
    assert reporter.success_count == 1
    assert reporter.failure_count == 0


def test_failed_expectation_aborts_method(
    reporter: PlainReporter, options: Options
) -> None:
    """A failed check stops the method and skips the after hook."""
    test = LifecycleTest(reporter, "test_fails", options)

    with pytest.raises(ExpectationFailedError):
        test.run()

    assert test.events == ["before", "body"]
    assert reporter.test_count == 1
    assert reporter.success_count == 0
    assert reporter.failure_count == 1


def test_records_location_of_method(reporter: PlainReporter) -> None:
    """A test instance knows the file and line of its method."""
    test = LifecycleTest(reporter, "test_fails")
    code = LifecycleTest.test_fails.__code__

    assert test.name == "test_fails"
    assert test.file == code.co_filename
    assert test.line_number == code.co_firstlineno


def test_execute_returns_reporter(options: Options) -> None:
    """Execute runs one method and returns the reporter with its results."""
    reporter = LifecycleTest.execute("test_fails", options)

    assert isinstance(reporter, PlainReporter)
    assert reporter.test_count == 1
    assert reporter.failure_count == 1
    assert reporter.failures[0].test_name == "test_fails"


def test_execute_builds_paged_reporter_when_interactive(options: Options) -> None:
    """Interactive options produce a paged reporter."""
    reporter = LifecycleTest.execute(
        "test_passes", options.model_copy(update={"interactive": True})
    )

    assert isinstance(reporter, PagedReporter)
    assert reporter.success_count == 1


def test_execute_propagates_unexpected_errors(options: Options) -> None:
    """Exceptions other than failed expectations escape execute."""
    with pytest.raises(RuntimeError, match="boom"):
        LifecycleTest.execute("test_raises", options)


def test_output_matches_strings_and_patterns(
    output_test: OutputTest, reporter: PlainReporter
) -> None:
    """Strings are compared for equality and patterns are searched."""
    output_test.expect_output_to_match(noisy, "out\n", "err\n")
    output_test.expect_output_to_match(noisy, re.compile("ou"), re.compile("rr"))
    output_test.expect_output_to_match(noisy, stderr="err\n")

    assert reporter.failure_count == 0
    assert reporter.expectation_count >= 5


def test_output_mismatch_fails(
    output_test: OutputTest, reporter: PlainReporter
) -> None:
    """Output that does not match the expected string is a failure."""
    with pytest.raises(ExpectationFailedError):
        output_test.expect_output_to_match(noisy, "nothing\n")

    assert reporter.failure_count == 1


def test_output_not_matching(output_test: OutputTest, reporter: PlainReporter) -> None:
    """Refutes output equal to a string or matching a pattern."""
    output_test.expect_output_to_not_match(noisy, "other\n", re.compile("^x"))

    with pytest.raises(ExpectationFailedError):
        output_test.expect_output_to_not_match(noisy, re.compile("out"))

    assert reporter.failure_count == 1


def test_output_emptiness(output_test: OutputTest, reporter: PlainReporter) -> None:
    """Checks that a block prints nothing, or something to each stream."""
    output_test.expect_output_to_be_empty(lambda: None)
    output_test.expect_output_to_not_be_empty(noisy)

    with pytest.raises(ExpectationFailedError):
        output_test.expect_output_to_be_empty(lambda: print("out"))

    assert reporter.failure_count == 1


def test_output_not_empty_requires_both_streams(output_test: OutputTest) -> None:
    """Printing to stdout alone does not satisfy a non-empty stderr."""
    with pytest.raises(ExpectationFailedError):
        output_test.expect_output_to_not_be_empty(lambda: print("out"))


def test_output_capture_restores_streams(output_test: OutputTest) -> None:
    """The real streams are restored even when the block raises."""
    stdout, stderr = sys.stdout, sys.stderr

    def explode() -> None:
        print("partial")
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        output_test.expect_output_to_match(explode, "partial\n")

    assert sys.stdout is stdout
    assert sys.stderr is stderr


@pytest.mark.parametrize(
    "method", ["expect_output_to_match", "expect_output_to_not_match"]
)
def test_output_requires_block(
    output_test: OutputTest, reporter: PlainReporter, method: str
) -> None:
    """Omitting the block is a usage error, not a failed expectation."""
    with pytest.raises(ValueError, match="requires a block"):
        getattr(output_test, method)(None, "out")

    assert reporter.expectation_count == 0
    assert reporter.failure_count == 0
