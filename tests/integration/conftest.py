"""Fixtures for integration tests."""

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from loupe.registry import TestRegistry


@pytest.fixture
def project(
    tmp_path: Path,
    isolated_registry: TestRegistry,
    monkeypatch: pytest.MonkeyPatch,
) -> Path:
    """Change into an empty project directory with an isolated registry."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "path", list(sys.path))
    monkeypatch.setattr(sys, "dont_write_bytecode", True)
    (tmp_path / "test").mkdir()
    return tmp_path


@pytest.fixture
def write_test_file(project: Path) -> Callable[[str, str], Path]:
    """Factory writing test files under the project's test directory."""

    def _write(name: str, source: str) -> Path:
        path = project / "test" / name
        path.write_text(source)
        return path

    return _write
