from __future__ import annotations

from .errors import ParseError, SchemaSyntaxError
from .lexer import TokenStream
from .tokens import Token, TokenKind


class Reader:
    """Token-level helpers shared by the schema and option parsers."""

    error_class: type[ParseError] = SchemaSyntaxError

    def __init__(self, stream: TokenStream) -> None:
        self.stream = stream

    def peek(self, n: int = 0) -> Token:
        return self.stream.peek(n)

    def next(self) -> Token:
        return self.stream.next()

    def at(self, kind: TokenKind) -> bool:
        return self.peek().kind is kind

    def at_word(self, word: str) -> bool:
        return self.peek().is_word(word)

    def accept(self, kind: TokenKind) -> Token | None:
        if self.at(kind):
            return self.next()
        return None

    def accept_word(self, word: str) -> Token | None:
        if self.at_word(word):
            return self.next()
        return None

    def expect(self, kind: TokenKind, what: str | None = None) -> Token:
        tok = self.peek()
        if tok.kind is not kind:
            expected = what or repr(kind.value)
            raise self.error(tok, f"expected {expected}, found {tok.describe()}")
        return self.next()

    def expect_word(self, word: str) -> Token:
        tok = self.peek()
        if not tok.is_word(word):
            raise self.error(tok, f"expected '{word}', found {tok.describe()}")
        return self.next()

    def ident(self, what: str = "an identifier") -> str:
        return self.expect(TokenKind.IDENT, what).lexeme

    def qualified_name(self, what: str = "a name") -> str:
        """`.`? IDENT (`.` IDENT)*, returned as written."""
        parts: list[str] = []
        if self.accept(TokenKind.DOT):
            parts.append("")
        parts.append(self.ident(what))
        while self.at(TokenKind.DOT) and self.peek(1).kind is TokenKind.IDENT:
            self.next()
            parts.append(self.next().lexeme)
        return ".".join(parts)

    def error(self, tok: Token, message: str, hint: str | None = None) -> ParseError:
        if tok.kind is TokenKind.EOF and hint is None:
            hint = "the input ended early; check for a missing '}' or ';'"
        return self.error_class(span=tok.span, message=message, hint=hint)
