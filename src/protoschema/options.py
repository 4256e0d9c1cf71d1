"""
Option-value grammar, used by `option NAME = VALUE;` statements and by the
bracketed option lists of fields and enum values:

    option      := name-part ('.' name-part)* '=' value
    name-part   := IDENT | '(' qualified-name ')'
    value       := STRING+ | 'true' | 'false' | INT | FLOAT | qualified-name
                 | list | aggregate
    list        := '[' (item (','? item)* ','?)? ']'       item := option | STRING | value
    aggregate   := '{' (entry ((','|';')? entry)* (','|';')?)? '}'
    entry       := key (':' value | aggregate | list)
    key         := IDENT | '[' qualified-name ']'
"""

from __future__ import annotations

from .ast import EnumConstant, Option, OptionValue
from .errors import OptionSyntaxError
from .literals import decode_string_token, parse_int
from .reader import Reader
from .tokens import Token, TokenKind


class OptionParser(Reader):
    error_class = OptionSyntaxError

    def option(self) -> Option:
        parts = self._option_name()
        self.expect(TokenKind.EQ, "'=' after option name")
        name, custom = parts[-1]
        option = Option(name, self.value(), custom)
        for name, custom in reversed(parts[:-1]):
            option = Option(name, option, custom)
        return option

    def field_options(self) -> list[Option]:
        """`[a = 1, (b).c = 2]`; the commas between options are optional."""
        open_tok = self.expect(TokenKind.LBRACKET)
        options: list[Option] = []
        while not self.accept(TokenKind.RBRACKET):
            self._check_open(open_tok)
            options.append(self.option())
            self.accept(TokenKind.COMMA)
        return options

    def value(self) -> OptionValue:
        tok = self.peek()
        if tok.kind is TokenKind.STRING:
            parts = [decode_string_token(self.next())]
            while self.at(TokenKind.STRING):
                parts.append(decode_string_token(self.next()))
            return "".join(parts)
        if tok.kind is TokenKind.INT:
            return parse_int(self.next().lexeme)
        if tok.kind is TokenKind.FLOAT:
            return float(self.next().lexeme)
        if tok.is_word("true") or tok.is_word("false"):
            return self.next().lexeme == "true"
        if tok.kind in (TokenKind.IDENT, TokenKind.DOT):
            return EnumConstant(self.qualified_name())
        if tok.kind is TokenKind.LBRACKET:
            return self._list()
        if tok.kind is TokenKind.LBRACE:
            return self._aggregate()
        raise self.error(
            tok,
            f"expected an option value, found {tok.describe()}",
            hint="values are strings, numbers, true/false, identifiers, [lists] or {aggregates}",
        )

    def _option_name(self) -> list[tuple[str, bool]]:
        parts = [self._name_part()]
        while self.accept(TokenKind.DOT):
            parts.append(self._name_part())
        return parts

    def _name_part(self) -> tuple[str, bool]:
        if self.accept(TokenKind.LPAREN):
            name = self.qualified_name("an option name")
            self.expect(TokenKind.RPAREN, "')' after extension name")
            return name, True
        return self.ident("an option name"), False

    def _list(self) -> list[OptionValue]:
        open_tok = self.next()
        items: list[OptionValue] = []
        while not self.accept(TokenKind.RBRACKET):
            self._check_open(open_tok)
            if self._at_option():
                items.append(self.option())
            elif self.at(TokenKind.STRING):
                # Adjacent strings in a list are separate items.
                items.append(decode_string_token(self.next()))
            else:
                items.append(self.value())
            self.accept(TokenKind.COMMA)
        return items

    def _aggregate(self) -> dict[str, OptionValue]:
        open_tok = self.next()
        entries: dict[str, OptionValue] = {}
        while not self.accept(TokenKind.RBRACE):
            self._check_open(open_tok)
            key = self._key()
            if self.accept(TokenKind.COLON) is None and not (
                self.at(TokenKind.LBRACE) or self.at(TokenKind.LBRACKET)
            ):
                tok = self.peek()
                raise self.error(tok, f"expected ':' after {key!r}, found {tok.describe()}")
            value = self.value()
            if key in entries:
                # A repeated key collects its values into a list.
                prev = entries[key]
                if not isinstance(prev, list):
                    prev = [prev]
                if isinstance(value, list):
                    prev.extend(value)
                else:
                    prev.append(value)
                value = prev
            entries[key] = value
            if self.accept(TokenKind.COMMA) is None:
                self.accept(TokenKind.SEMI)
        return entries

    def _key(self) -> str:
        if self.accept(TokenKind.LBRACKET):
            name = self.qualified_name("an extension name")
            self.expect(TokenKind.RBRACKET, "']' after extension name")
            return f"[{name}]"
        return self.ident("a field name")

    def _at_option(self) -> bool:
        # `(ext) = v` or `a.b = v`, as opposed to an enum constant `a.B`.
        if self.at(TokenKind.LPAREN):
            return True
        i = 0
        while self.peek(i).kind is TokenKind.IDENT:
            nxt = self.peek(i + 1).kind
            if nxt is TokenKind.EQ:
                return True
            if nxt is not TokenKind.DOT:
                return False
            if self.peek(i + 2).kind is TokenKind.LPAREN:
                return True
            i += 2
        return False

    def _check_open(self, open_tok: Token) -> None:
        tok = self.peek()
        if tok.kind is TokenKind.EOF:
            raise self.error(
                tok,
                f"unbalanced {open_tok.lexeme!r}",
                hint=f"opened at {open_tok.span.format()}",
            )
