"""CLI entry point for running loupe test suites."""

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Sequence
from importlib.metadata import version
from pathlib import Path

from pydantic import ValidationError

from loupe.discovery import load_tests
from loupe.executors.loading import (
    ExecutorNotFoundError,
    available_executors,
    load_executor,
)
from loupe.options import Options

USAGE = "loupe [test_file[:line] ...] [options]"


async def run(specifiers: Sequence[str], options: Options) -> int:
    """Load the tests, run them and return the exit code."""
    log = logging.getLogger("loupe")

    executor_cls = load_executor(options.executor)

    log.info("Loading tests...")
    load_tests(specifiers, options)

    executor = executor_cls(options)
    log.info(
        "Running %d test(s) with the %s executor", len(executor.queue), options.executor
    )
    return await executor.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loupe", usage=USAGE, description="Run tests in parallel"
    )
    parser.add_argument(
        "specifiers",
        nargs="*",
        metavar="test_file[:line]",
        help="Test files to run, optionally narrowed to the test on a line",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {version('loupe')}"
    )
    parser.add_argument(
        "--color",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Enable or disable color in the output",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--interactive",
        dest="interactive",
        action="store_true",
        default=None,
        help="Use interactive output (default when attached to a terminal)",
    )
    mode.add_argument(
        "--plain",
        dest="interactive",
        action="store_false",
        help="Use plain non-interactive output",
    )
    parser.add_argument(
        "--editor",
        help="The editor to open test files with in interactive mode",
    )
    parser.add_argument(
        "--executor",
        default="pool",
        help=f"Executor strategy ({', '.join(available_executors()) or 'pool'})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Maximum number of worker processes (default: CPU count)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for the random test order",
    )
    parser.add_argument(
        "--test-dir",
        type=Path,
        default=Path("test"),
        help="Directory searched for test files when none are given",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )
    return parser


def build_options(args: argparse.Namespace) -> Options:
    interactive = sys.stdout.isatty() if args.interactive is None else args.interactive
    return Options(
        color=args.color,
        interactive=interactive,
        editor=args.editor,
        executor=args.executor,
        workers=args.workers,
        seed=args.seed,
        test_dir=args.test_dir,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        options = build_options(args)
    except ValidationError as error:
        parser.error(str(error))

    sys.path.insert(0, os.getcwd())

    try:
        exit_code = asyncio.run(run(args.specifiers, options))
    except ExecutorNotFoundError as error:
        parser.error(str(error))

    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
