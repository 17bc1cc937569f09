"""Loading test files from disk and selecting tests by line."""

import importlib.util
import logging
import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType

from loupe.options import Options
from loupe.registry import TestRegistry, registry

log = logging.getLogger(__name__)

HELPER_FILE = "test_helper.py"


@dataclass(frozen=True, kw_only=True)
class Specifier:
    """A test file, optionally narrowed to the test defined on one line."""

    path: Path
    line_number: int | None = None


def parse_specifier(value: str) -> Specifier:
    """Parse `path` or `path:line`."""
    path, separator, line = value.rpartition(":")
    if separator and line.isdigit():
        return Specifier(path=Path(path), line_number=int(line))
    return Specifier(path=Path(value))


def module_name_for(path: Path) -> str:
    """Derive a stable, flat module name for a test file.

    The name has no dots: pickle imports the top-level package of a dotted
    module name, and test directories are not packages.
    """
    resolved = path.resolve()
    try:
        relative = resolved.relative_to(Path.cwd())
    except ValueError:
        relative = Path(*resolved.parts[1:])
    parts = [re.sub(r"\W", "_", part) for part in relative.with_suffix("").parts]
    return "__".join(["loupe_tests", *parts])


def load_file(path: Path) -> ModuleType:
    """Execute the test file at `path` as a fresh module.

    Loading the same file again re-reads it from disk, so edits take effect.
    The module is placed in `sys.modules` so that its test classes can be
    pickled by reference into worker processes.
    """
    name = module_name_for(path)
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load test file {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        del sys.modules[name]
        raise

    log.debug("Loaded test file %s as %s", path, name)
    return module


def load_tests(
    specifiers: Sequence[str],
    options: Options,
    test_registry: TestRegistry = registry,
) -> Sequence[ModuleType]:
    """Load the requested test files, or every test file under the test dir.

    A line number in a specifier restricts the classes of that file to the
    test methods defined on the requested lines. Each file is loaded once,
    however many specifiers name it; a specifier without a line selects the
    whole file.
    """
    helper = options.test_dir / HELPER_FILE
    if helper.is_file():
        load_file(helper)

    if not specifiers:
        paths = sorted(options.test_dir.rglob(options.pattern))
        log.info("Discovered %d test file(s) in %s", len(paths), options.test_dir)
        return [load_file(path) for path in paths]

    requested: dict[Path, tuple[Path, list[int] | None]] = {}
    for specifier in map(parse_specifier, specifiers):
        path, lines = requested.setdefault(
            specifier.path.resolve(), (specifier.path, [])
        )
        if lines is None:
            continue
        if specifier.line_number is None:
            requested[specifier.path.resolve()] = (path, None)
        else:
            lines.append(specifier.line_number)

    modules: list[ModuleType] = []
    for path, lines in requested.values():
        module = load_file(path)
        for test_class in test_registry.classes_in(module.__name__):
            for line in lines or []:
                test_registry.add_line_number(test_class, line)
        modules.append(module)
    return modules
