"""ANSI coloring of terminal output."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, TypeAlias

ColorName: TypeAlias = Literal["red", "green", "yellow"]

COLOR_CODES: Mapping[ColorName, str] = {
    "red": "31",
    "green": "32",
    "yellow": "33",
}


@dataclass(frozen=True)
class Color:
    """Wraps text in ANSI color sequences when enabled."""

    enabled: bool = True

    def format(self, text: object, color: ColorName) -> str:
        """Return `text` colored with `color`, or unchanged when disabled."""
        if not self.enabled:
            return str(text)

        return f"\033[1;{COLOR_CODES[color]}m{text}\033[0m"
