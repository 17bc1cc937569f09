"""Shared fixtures."""

from collections.abc import Generator

import pytest

from loupe.options import Options
from loupe.registry import TestRegistry, registry
from loupe.reporters import PlainReporter
from loupe.testing.factories import OptionsFactory


@pytest.fixture
def options() -> Options:
    """Plain, uncolored options."""
    return OptionsFactory.build()


@pytest.fixture
def reporter(options: Options) -> PlainReporter:
    """Create an empty plain reporter."""
    return PlainReporter(options)


@pytest.fixture
def isolated_registry() -> Generator[TestRegistry]:
    """Empty the process-wide registry for the test and restore it afterwards."""
    saved = {test_class: list(lines) for test_class, lines in registry.classes.items()}
    registry.clear()

    yield registry

    registry.clear()
    for test_class, lines in saved.items():
        registry.register(test_class)
        for line in lines:
            registry.add_line_number(test_class, line)
