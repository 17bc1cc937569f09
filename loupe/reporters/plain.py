"""Non-interactive renderer printing a flat failure list."""

from loupe.reporters.base import Reporter


class PlainReporter(Reporter):
    """Prints dots and Fs while running and the failures at the end."""

    def print_summary(self) -> None:
        report = ""
        if self.failures:
            report = "\n\n" + "\n".join(str(failure) for failure in self.failures)

        print("\n")
        print(f"{self.summary()}{report}\n\n{self.finished_in()}")
