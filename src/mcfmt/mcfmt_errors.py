"""
Exception types raised by the formatting pipeline.

Every error here is fatal for the file being formatted. Callers that process
many files (see `mcfmt_cli`) catch them per file and move on.

Classes:
    SourceLocation: line/column/offset triple attached to syntax errors.
    MonkeyCSyntaxError: Structured parse failure.
    PrinterNotInitializedError: The delegate printer was used before it was resolved.
    UnsupportedNodeError: A node kind that no printer knows how to print.
    SpanInvariantError: A tree whose spans are not nested, ordered and disjoint.
    PayloadError: A malformed JSON tree payload.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


class MonkeyCSyntaxError(SyntaxError):
    """Raised by the lexer and parser on malformed input.

    Attributes:
        message (str): Human readable description.
        location (SourceLocation): Where the problem was detected.
        origin (str | None): Source path, if known.
    """

    def __init__(
        self, message: str, location: SourceLocation, origin: str | None = None
    ) -> None:
        super().__init__(f"{message} at line {location.line}, col {location.column}")
        self.message = message
        self.location = location
        self.origin = origin

    def to_dict(self) -> dict[str, object]:
        return {
            "message": self.message,
            "location": {
                "line": self.location.line,
                "column": self.location.column,
                "offset": self.location.offset,
            },
        }


class PrinterNotInitializedError(RuntimeError):
    pass


class UnsupportedNodeError(NotImplementedError):
    pass


class SpanInvariantError(AssertionError):
    pass


class PayloadError(ValueError):
    pass


__all__ = [
    "MonkeyCSyntaxError",
    "PayloadError",
    "PrinterNotInitializedError",
    "SourceLocation",
    "SpanInvariantError",
    "UnsupportedNodeError",
]
