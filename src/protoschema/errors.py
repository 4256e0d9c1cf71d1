from __future__ import annotations

from dataclasses import dataclass

from .spans import Span


@dataclass(slots=True)
class ParseError(Exception):
    span: Span
    message: str
    hint: str | None = None

    def __str__(self) -> str:
        base = f"{self.span.format()}: {self.message}"
        if self.hint:
            return f"{base}\nhint: {self.hint}"
        return base


class LexError(ParseError):
    """Malformed token: unterminated string or comment, stray character, bad escape."""


class SchemaSyntaxError(ParseError):
    """Grammar violation in a schema file."""


class OptionSyntaxError(SchemaSyntaxError):
    """Malformed option value body."""


@dataclass(slots=True)
class ModelValidationError(ValueError):
    """A structural invariant failed while building an AST node.

    `scope` is the fully-qualified name of the node being built, when it has
    one, and `value` the offending tag or name.
    """

    message: str
    scope: str | None = None
    value: object = None

    def __str__(self) -> str:
        return self.message
