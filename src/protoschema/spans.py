from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """A concrete source position.

    Offsets are 0-based; line/column are 1-based for user-facing messages.
    """

    offset: int
    line: int
    column: int


START = Position(offset=0, line=1, column=1)


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open span [start, end) in a single file."""

    file: str
    start: Position
    end: Position

    def format(self) -> str:
        file = self.file or "<memory>"
        return f"{file}:{self.start.line}:{self.start.column}"

    def to(self, other: Span) -> Span:
        """Span from the start of this one to the end of `other`."""
        return Span(file=self.file, start=self.start, end=other.end)
