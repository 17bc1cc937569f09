"""Tests for CLI argument handling."""

import sys
from pathlib import Path

import pytest

from loupe.cli import build_options, build_parser, main


def test_defaults() -> None:
    """Parses an empty command line into the default options."""
    args = build_parser().parse_args([])

    assert args.specifiers == []
    assert args.color is True
    assert args.interactive is None
    assert args.executor == "pool"
    assert args.workers is None
    assert args.test_dir == Path("test")


def test_builds_options_from_flags() -> None:
    """Maps every flag onto the options."""
    args = build_parser().parse_args(
        [
            "a_test.py:3",
            "--no-color",
            "--plain",
            "--editor",
            "vim",
            "--executor",
            "process",
            "--workers",
            "3",
            "--seed",
            "7",
            "--test-dir",
            "checks",
        ]
    )

    options = build_options(args)

    assert args.specifiers == ["a_test.py:3"]
    assert options.color is False
    assert options.interactive is False
    assert options.editor == "vim"
    assert options.executor == "process"
    assert options.workers == 3
    assert options.seed == 7
    assert options.test_dir == Path("checks")


@pytest.mark.parametrize("tty", [True, False])
def test_interactive_follows_terminal(
    tty: bool, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Without --interactive or --plain the mode follows stdout being a terminal."""
    monkeypatch.setattr(sys.stdout, "isatty", lambda: tty)

    options = build_options(build_parser().parse_args([]))

    assert options.interactive is tty


def test_interactive_and_plain_are_exclusive() -> None:
    """Rejects --interactive together with --plain."""
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["--interactive", "--plain"])

    assert exc_info.value.code == 2


def test_rejects_invalid_worker_count() -> None:
    """A worker count below one is a usage error."""
    with pytest.raises(SystemExit) as exc_info:
        main(["--plain", "--workers", "0"])

    assert exc_info.value.code == 2


def test_rejects_unknown_executor(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """An unknown executor key is a usage error."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "path", list(sys.path))

    with pytest.raises(SystemExit) as exc_info:
        main(["--plain", "--executor", "threads"])

    assert exc_info.value.code == 2


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    """Prints the installed version."""
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])

    assert exc_info.value.code == 0
    assert capsys.readouterr().out.startswith("loupe ")
