"""Errors raised at the codec boundary."""


class StatementError(Exception):
    """Base class for every error raised by this package."""


class ParseError(StatementError):
    """Input could not be read into a Statement.

    Args:
        message: Human readable description, including the offending fragment.
        line: 1-based line (MT940, XML) or row (CSV) number, when known.
    """

    def __init__(self, message: str, line: int | None = None):
        self.message = message
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"line {self.line}: {self.message}"


class WriteError(StatementError):
    """A Statement could not be written to the output sink."""


class UnknownFormatError(StatementError):
    """No codec is registered for the requested format tag."""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"unknown format: {tag!r}")
