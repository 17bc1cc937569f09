"""Opening failing tests in the user's editor."""

import logging
import os
import shutil
import subprocess
from collections.abc import Sequence

log = logging.getLogger(__name__)

LINE_FLAG_EDITORS = frozenset({"vim", "nvim", "vi", "emacs", "nano"})
GOTO_EDITORS = frozenset({"code", "code-insiders", "codium"})


class EditorNotFoundError(Exception):
    """Raised when no editor is configured or its executable is not on PATH."""


def resolve_editor(editor: str | None) -> str:
    """Return the configured editor, falling back to $EDITOR."""
    resolved = editor or os.environ.get("EDITOR")
    if not resolved:
        raise EditorNotFoundError("No editor configured. Use --editor or set $EDITOR.")
    return resolved


def find_executable(editor: str) -> str:
    """Locate `editor` on PATH."""
    if (executable := shutil.which(editor)) is None:
        raise EditorNotFoundError(f"Editor '{editor}' not found on PATH")
    return executable


def editor_command(
    editor: str, executable: str, file_name: str, line_number: int
) -> Sequence[str]:
    """Build the command line opening `file_name` at `line_number`.

    Editors taking a `+LINE` flag and editors with a go-to flag are positioned
    on the line, anything else only gets the file.
    """
    name = os.path.basename(editor)
    if name in LINE_FLAG_EDITORS:
        return [executable, f"+{line_number}", file_name]
    if name in GOTO_EDITORS:
        return [executable, "-g", f"{file_name}:{line_number}"]
    return [executable, file_name]


def open_editor(
    editor: str | None, file_name: str, line_number: int
) -> subprocess.Popen[bytes]:
    """Spawn the editor on the given location without waiting for it."""
    name = resolve_editor(editor)
    command = editor_command(name, find_executable(name), file_name, line_number)
    log.info("Opening editor: %s", " ".join(command))
    return subprocess.Popen(command)
