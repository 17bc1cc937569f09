"""Reporters collecting test results and rendering them."""

from loupe.options import Options
from loupe.reporters.base import Reporter
from loupe.reporters.paged import PagedReporter
from loupe.reporters.plain import PlainReporter


def build_reporter(options: Options) -> Reporter:
    """Return the reporter matching the interactive setting of `options`."""
    return PagedReporter(options) if options.interactive else PlainReporter(options)


__all__ = ["PagedReporter", "PlainReporter", "Reporter", "build_reporter"]
