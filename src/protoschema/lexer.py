from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from .errors import LexError
from .spans import Position, Span
from .tokens import SYMBOLS, Comment, Token, TokenKind


_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_HEX_RE = re.compile(r"[+-]?0[xX][0-9A-Fa-f]+")
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:"
    r"(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|[0-9]+[eE][+-]?[0-9]+"
    r")"
)


@dataclass(slots=True)
class _Cursor:
    file: str
    src: str
    i: int = 0
    line: int = 1
    col: int = 1

    def eof(self) -> bool:
        return self.i >= len(self.src)

    def peek(self, n: int = 0) -> str:
        j = self.i + n
        if j >= len(self.src):
            return ""
        return self.src[j]

    def advance(self, n: int = 1) -> None:
        for _ in range(n):
            if self.eof():
                return
            ch = self.src[self.i]
            self.i += 1
            if ch == "\n":
                self.line += 1
                self.col = 1
            else:
                self.col += 1

    def pos(self) -> Position:
        return Position(offset=self.i, line=self.line, column=self.col)


class Lexer:
    """Lazily turns schema source text into tokens.

    Comments never become tokens. They are collected and handed to the next
    token as `Token.comments`, unless a blank line separates them from it or
    they trail the previous token on its own line.
    """

    def __init__(self, src: str, *, file: str = "<memory>") -> None:
        self.file = file
        self.src = src

    def __iter__(self) -> Iterator[Token]:
        cur = _Cursor(file=self.file, src=self.src)
        pending: list[Comment] = []
        newlines = 0
        last_line = 0  # line of the previous token's end

        def make_span(start: Position) -> Span:
            return Span(file=self.file, start=start, end=cur.pos())

        def error_at(start: Position, msg: str, hint: str | None = None) -> LexError:
            return LexError(span=make_span(start), message=msg, hint=hint)

        while not cur.eof():
            ch = cur.peek()

            # whitespace
            if ch in " \t\r\n\f\v":
                if ch == "\n":
                    newlines += 1
                    if newlines >= 2:
                        pending.clear()
                cur.advance()
                continue

            start = cur.pos()

            # line comment //
            if ch == "/" and cur.peek(1) == "/":
                while not cur.eof() and cur.peek() != "\n":
                    cur.advance()
                comment = Comment(block=False, text=self.src[start.offset : cur.i], span=make_span(start))
                if start.line != last_line:
                    pending.append(comment)
                newlines = 0
                continue

            # block comment /* ... */
            if ch == "/" and cur.peek(1) == "*":
                cur.advance(2)
                while not cur.eof():
                    if cur.peek() == "*" and cur.peek(1) == "/":
                        cur.advance(2)
                        break
                    cur.advance()
                else:
                    raise error_at(start, "unterminated block comment", hint="add closing */")
                comment = Comment(block=True, text=self.src[start.offset : cur.i], span=make_span(start))
                if start.line != last_line:
                    pending.append(comment)
                newlines = 0
                continue

            tok = self._scan_token(cur, start, error_at)
            if pending:
                tok = Token(tok.kind, tok.lexeme, tok.span, comments=tuple(pending))
                pending.clear()
            newlines = 0
            last_line = tok.span.end.line
            yield tok

        eof_pos = cur.pos()
        yield Token(TokenKind.EOF, "", Span(file=self.file, start=eof_pos, end=eof_pos), comments=tuple(pending))

    def _scan_token(self, cur: _Cursor, start: Position, error_at) -> Token:
        src = self.src
        ch = cur.peek()

        # strings: "..." or '...'
        if ch in "\"'":
            quote = ch
            cur.advance()
            buf: list[str] = []
            while not cur.eof():
                c = cur.peek()
                if c == quote:
                    cur.advance()
                    return Token(TokenKind.STRING, "".join(buf), Span(self.file, start, cur.pos()))
                if c == "\n":
                    break
                if c == "\\":
                    cur.advance()
                    esc = cur.peek()
                    if esc in ("", "\n"):
                        break
                    # Escapes stay raw; literals.decode_string interprets them.
                    buf.append("\\" + esc)
                    cur.advance()
                    continue
                buf.append(c)
                cur.advance()
            raise error_at(start, "unterminated string literal", hint="close the quote")

        # numbers (hex and float before int)
        for kind, rx in ((TokenKind.INT, _HEX_RE), (TokenKind.FLOAT, _FLOAT_RE), (TokenKind.INT, _INT_RE)):
            m = rx.match(src, cur.i)
            if m:
                lex = m.group(0)
                cur.advance(len(lex))
                return Token(kind, lex, Span(self.file, start, cur.pos()))

        # identifiers
        m = _IDENT_RE.match(src, cur.i)
        if m:
            lex = m.group(0)
            cur.advance(len(lex))
            return Token(TokenKind.IDENT, lex, Span(self.file, start, cur.pos()))

        # punctuation
        k = SYMBOLS.get(ch)
        if k is not None:
            cur.advance()
            return Token(k, ch, Span(self.file, start, cur.pos()))

        cur.advance()
        raise error_at(start, f"unexpected character {ch!r}", hint="remove the character")


def tokenize(src: str, *, file: str = "<memory>") -> list[Token]:
    return list(Lexer(src, file=file))


@dataclass(slots=True)
class TokenStream:
    """Lookahead buffer over a lazy token source."""

    tokens: Iterator[Token]
    _buf: list[Token] = field(default_factory=list)
    _last: Token | None = None

    @classmethod
    def of(cls, src: str, *, file: str = "<memory>") -> TokenStream:
        return cls(tokens=iter(Lexer(src, file=file)))

    def peek(self, n: int = 0) -> Token:
        while len(self._buf) <= n:
            tok = next(self.tokens, None)
            if tok is None:
                # EOF repeats once the lexer is exhausted.
                return self._buf[-1]
            self._buf.append(tok)
        return self._buf[n]

    def next(self) -> Token:
        tok = self.peek()
        if tok.kind is not TokenKind.EOF:
            self._buf.pop(0)
        self._last = tok
        return tok

    @property
    def last(self) -> Token | None:
        """The most recently consumed token."""
        return self._last
