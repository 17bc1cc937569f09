"""Record of a single failed expectation."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loupe.color import Color

if TYPE_CHECKING:
    from loupe.test import Test


@dataclass(frozen=True, kw_only=True)
class Failure:
    """One failed expectation, located at the test method that raised it."""

    file_name: str
    test_name: str
    line_number: int
    message: str
    klass: type
    color: Color

    @classmethod
    def from_test(cls, test: "Test", message: str) -> "Failure":
        """Build a failure from the running test instance."""
        return cls(
            file_name=test.file,
            test_name=test.name,
            line_number=test.line_number,
            message=message,
            klass=type(test),
            color=test.color,
        )

    @property
    def location(self) -> str:
        """Return `file:line at test_name`."""
        name = self.color.format(self.test_name, "yellow")
        return f"{self.file_name}:{self.line_number} at {name}"

    def location_and_message(self) -> tuple[str, str]:
        return self.location, self.message

    def __str__(self) -> str:
        return f"{self.location}. {self.message}"
