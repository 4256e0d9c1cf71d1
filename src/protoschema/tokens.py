from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .spans import Span


class TokenKind(str, Enum):
    # Identifiers and literals
    IDENT = "IDENT"
    INT = "INT"
    FLOAT = "FLOAT"
    STRING = "STRING"

    # Punctuation
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    LPAREN = "("
    RPAREN = ")"
    SEMI = ";"
    COMMA = ","
    DOT = "."
    EQ = "="
    COLON = ":"

    EOF = "EOF"


SYMBOLS: dict[str, TokenKind] = {
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ";": TokenKind.SEMI,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "=": TokenKind.EQ,
    ":": TokenKind.COLON,
}


@dataclass(frozen=True, slots=True)
class Comment:
    """A `// line` or `/* block */` comment, text including its delimiters."""

    block: bool
    text: str
    span: Span


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    lexeme: str
    span: Span
    # Comments directly above this token, with no blank line in between.
    comments: tuple[Comment, ...] = ()

    def is_word(self, word: str) -> bool:
        return self.kind is TokenKind.IDENT and self.lexeme == word

    def describe(self) -> str:
        if self.kind is TokenKind.EOF:
            return "end of input"
        if self.kind is TokenKind.STRING:
            return "string literal"
        if self.kind in (TokenKind.IDENT, TokenKind.INT, TokenKind.FLOAT):
            return repr(self.lexeme)
        return repr(self.kind.value)

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.lexeme!r}, {self.span.format()})"
