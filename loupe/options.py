"""Run configuration shared by executors, reporters and tests."""

from pathlib import Path

from pydantic import Field, PositiveInt

from loupe.models.base import Model


class Options(Model):
    """Options for a single test run."""

    color: bool = Field(default=True, description="Colorize terminal output")
    interactive: bool = Field(
        default=True, description="Page through failures instead of printing them"
    )
    editor: str | None = Field(
        default=None, description="Editor used to open failures (falls back to $EDITOR)"
    )
    executor: str = Field(default="pool", description="Executor strategy key")
    workers: PositiveInt | None = Field(
        default=None, description="Maximum number of workers (defaults to CPU count)"
    )
    seed: int | None = Field(
        default=None, description="Seed for shuffling the work queue"
    )
    test_dir: Path = Field(
        default=Path("test"), description="Directory searched for test files"
    )
    pattern: str = Field(default="*_test.py", description="Test file glob pattern")
