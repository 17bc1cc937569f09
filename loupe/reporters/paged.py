"""Interactive renderer paging through failures in the terminal."""

import logging
import operator
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

import click
from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text

from loupe.discovery import load_file
from loupe.editor import EditorNotFoundError, open_editor
from loupe.failure import Failure
from loupe.reporters.base import Reporter

log = logging.getLogger(__name__)

KEY_HELP = (
    "j (next) / k (previous) / o (open in editor) / f (mark as fixed) / "
    "r (rerun test) / q (quit)"
)
PREVIEW_CONTEXT = 5
ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


@dataclass(frozen=True, kw_only=True)
class Preview:
    """Source window around a failing line."""

    start: int
    before: str
    annotation: str
    after: str


class PagedReporter(Reporter):
    """Shows one failure at a time and lets the user act on it.

    The pager is a loop over the failure list driven by single keystrokes:
    move between failures, open the failing test in an editor, mark a failure
    as fixed, or rerun the test after editing it.
    """

    current_page: int = 0
    status: str | None = None

    @property
    def current_failure(self) -> Failure:
        return self.failures[self.current_page]

    def print_summary(self) -> None:
        self.page(Console(), click.getchar)

    def page(self, console: Console, read_key: Callable[[], str]) -> None:
        """Run the pager until the user quits or no failures are left."""
        finished_in = self.finished_in()
        actions: Mapping[str, Callable[[], None]] = {
            "j": self.next_page,
            "k": self.previous_page,
            "o": self.open_in_editor,
            "f": self.mark_as_fixed,
            "r": self.rerun_failure,
        }
        self.current_page = 0

        while True:
            self._header(console, finished_in)

            if not self.failures:
                console.print("All tests passed", style="bold green")
                return

            self._file_preview(console)
            self._footer(console)

            key = read_key()
            if key == "q":
                return
            if (action := actions.get(key)) is not None:
                action()

    def next_page(self) -> None:
        if self.current_page < len(self.failures) - 1:
            self.current_page += 1

    def previous_page(self) -> None:
        if self.current_page > 0:
            self.current_page -= 1

    def mark_as_fixed(self) -> None:
        """Drop the current failure and count its test as passed."""
        self.failures.pop(self.current_page)
        self.failure_count -= 1
        self.success_count += 1
        self.current_page = max(0, min(self.current_page, len(self.failures) - 1))

    def open_in_editor(self) -> None:
        failure = self.current_failure
        try:
            open_editor(self.options.editor, failure.file_name, failure.line_number)
        except (EditorNotFoundError, OSError) as error:
            log.warning("Could not open editor: %s", error)
            self.status = self.color.format(str(error), "red")

    def rerun_failure(self) -> None:
        """Reload the failing test's file from disk and run that test again."""
        failure = self.current_failure
        try:
            module = load_file(Path(failure.file_name))
            test_class = operator.attrgetter(failure.klass.__qualname__)(module)
            reporter = test_class.execute(failure.test_name, self.options)
        except Exception as error:
            log.warning("Rerun of %s failed", failure.test_name, exc_info=error)
            self.status = self.color.format(f"Rerun failed: {error}", "red")
            return

        if reporter.failures:
            self.failures[self.current_page] = reporter.failures[0]
            self.status = self.color.format("Still failing", "red")
        else:
            self.status = (
                f"{self.color.format('Fixed', 'green')}. Press f to remove from list"
            )

    def preview(self, failure: Failure) -> Preview:
        """Return the source around `failure`, split at the failing line.

        The annotation carrying the failure message goes between the two
        halves, indented like the test body, and is not numbered.
        """
        lines = Path(failure.file_name).read_text().splitlines()
        line = min(failure.line_number, len(lines))
        if line < len(lines):
            body = lines[line]
        else:
            body = lines[-1] if lines else ""
        indentation = body[: len(body) - len(body.lstrip())]
        message = ANSI_ESCAPE.sub("", failure.message)

        start = max(line - PREVIEW_CONTEXT, 1)
        return Preview(
            start=start,
            before="\n".join(lines[start - 1 : line]),
            annotation=f"{indentation}^^^ {message}",
            after="\n".join(lines[line : line + PREVIEW_CONTEXT]),
        )

    def _header(self, console: Console, finished_in: str) -> None:
        console.clear()
        console.rule()
        console.print(f"{self.summary()}\n\n{finished_in}", highlight=False)
        console.rule()

    def _file_preview(self, console: Console) -> None:
        failure = self.current_failure
        try:
            preview = self.preview(failure)
        except OSError as error:
            log.warning("Could not read %s: %s", failure.file_name, error)
            message = f"Could not read {failure.file_name}: {error}"
            console.print(message, style="red", markup=False)
            return

        gutter = " " * (len(str(failure.line_number + PREVIEW_CONTEXT)) + 3)
        console.print(
            Syntax(
                preview.before,
                "python",
                line_numbers=True,
                start_line=preview.start,
                highlight_lines={failure.line_number},
            )
        )
        console.print(
            Text(gutter + preview.annotation, style="bold red", no_wrap=True)
        )
        if preview.after:
            console.print(
                Syntax(
                    preview.after,
                    "python",
                    line_numbers=True,
                    start_line=failure.line_number + 1,
                )
            )

    def _footer(self, console: Console) -> None:
        console.print()
        if self.status:
            console.print(Text.from_ansi(self.status))
        console.print(f"Failure {self.current_page + 1} of {len(self.failures)}")
        location, message = self.current_failure.location_and_message()
        console.print(Text.from_ansi(location))
        console.print(Text.from_ansi(message))
        console.print()
        console.print(KEY_HELP, style="dim", highlight=False)
        self.status = None
