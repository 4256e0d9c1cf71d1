from __future__ import annotations

from .errors import LexError
from .spans import Span
from .tokens import Token


_SIMPLE_ESCAPES: dict[str, str] = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
}

_OCTAL = "01234567"
_HEX = "0123456789abcdefABCDEF"


def parse_int(lexeme: str) -> int:
    """Decimal or 0x/0X hexadecimal integer, with an optional sign."""
    body = lexeme.lstrip("+-")
    sign = -1 if lexeme.startswith("-") else 1
    if body[:2] in ("0x", "0X"):
        return sign * int(body[2:], 16)
    return sign * int(body, 10)


def decode_string(raw: str, span: Span) -> str:
    """Interpret the escapes of a raw quoted-string token body.

    Octal escapes take one to three digits and hex escapes one or two, so
    `\\1f` is U+0001 followed by `f`.
    """
    out: list[str] = []
    i = 0
    n = len(raw)
    while i < n:
        c = raw[i]
        if c != "\\":
            out.append(c)
            i += 1
            continue
        i += 1
        if i >= n:
            raise LexError(span=span, message="unterminated escape sequence")
        c = raw[i]
        if c in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[c])
            i += 1
        elif c in _OCTAL:
            j = i
            while j < n and j - i < 3 and raw[j] in _OCTAL:
                j += 1
            out.append(chr(int(raw[i:j], 8)))
            i = j
        elif c in "xX":
            j = i + 1
            while j < n and j - (i + 1) < 2 and raw[j] in _HEX:
                j += 1
            if j == i + 1:
                raise LexError(span=span, message="expected a digit after \\x or \\X")
            out.append(chr(int(raw[i + 1 : j], 16)))
            i = j
        else:
            raise LexError(
                span=span,
                message=f"invalid escape sequence \\{c}",
                hint="use one of \\a \\b \\f \\n \\r \\t \\v \\\\ \\' \\\" \\NNN \\xHH",
            )
    return "".join(out)


def decode_string_token(tok: Token) -> str:
    return decode_string(tok.lexeme, tok.span)


def escape(text: str) -> str:
    """Escape a string value for printing between double quotes."""
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\t", "\\t")
        .replace("\r", "\\r")
        .replace("\n", "\\n")
    )
