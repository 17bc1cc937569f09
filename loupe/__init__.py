"""Loupe: a parallel test runner with an interactive failure pager."""

from loupe.color import Color
from loupe.expectation import Expectation, ExpectationFailedError
from loupe.failure import Failure
from loupe.options import Options
from loupe.registry import TestRegistry, registry
from loupe.test import Test

__all__ = [
    "Color",
    "Expectation",
    "ExpectationFailedError",
    "Failure",
    "Options",
    "Test",
    "TestRegistry",
    "registry",
]
