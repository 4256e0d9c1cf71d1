from __future__ import annotations

from dataclasses import dataclass

from . import ast as A
from .docs import extract_documentation
from .lexer import TokenStream
from .literals import decode_string_token, parse_int
from .options import OptionParser
from .reader import Reader
from .tokens import Token, TokenKind


_LABELS = frozenset(label.value for label in A.Label)


@dataclass(frozen=True, slots=True)
class Scope:
    """Naming context for declarations: the package plus enclosing messages."""

    package: str = ""
    path: tuple[str, ...] = ()

    def qualify(self, name: str) -> str:
        return ".".join(part for part in (self.package, *self.path, name) if part)

    def nested(self, name: str) -> Scope:
        return Scope(self.package, (*self.path, name))


class SchemaParser(Reader):
    """Single-pass recursive descent over a token stream.

    Option bodies are handed to an `OptionParser` sharing the same stream.
    """

    def __init__(self, stream: TokenStream, file_name: str = "") -> None:
        super().__init__(stream)
        self.file_name = file_name
        self.options = OptionParser(stream)
        self._extends: list[A.ExtendDeclaration] = []

    @classmethod
    def of(cls, src: str, file_name: str = "") -> SchemaParser:
        return cls(TokenStream.of(src, file=file_name), file_name)

    def parse_file(self) -> A.ProtoFile:
        package: str | None = None
        dependencies: list[str] = []
        public_dependencies: list[str] = []
        types: list[A.Type] = []
        services: list[A.Service] = []
        options: list[A.Option] = []
        self._extends = []

        while True:
            tok = self.peek()
            scope = Scope(package or "")
            if tok.kind is TokenKind.EOF:
                break
            if self.accept(TokenKind.SEMI):
                continue
            if tok.is_word("syntax"):
                self._syntax()
            elif tok.is_word("package"):
                if package is not None:
                    raise self.error(tok, "duplicate package declaration", hint=f"package is already {package!r}")
                self.next()
                package = self.qualified_name("a package name")
                self._semi()
            elif tok.is_word("import"):
                self.next()
                public = self.accept_word("public") is not None
                path = decode_string_token(self.expect(TokenKind.STRING, "an import path"))
                self._semi()
                (public_dependencies if public else dependencies).append(path)
            elif tok.is_word("option"):
                options.append(self._option_statement())
            elif tok.is_word("message"):
                types.append(self._message(scope))
            elif tok.is_word("enum"):
                types.append(self._enum(scope))
            elif tok.is_word("service"):
                services.append(self._service(scope))
            elif tok.is_word("extend"):
                self._extends.append(self._extend(scope))
            else:
                raise self.error(
                    tok,
                    f"unexpected {tok.describe()} at top level",
                    hint="expected one of: package, import, option, message, enum, service, extend",
                )

        return A.ProtoFile(
            file_name=self.file_name,
            package_name=package,
            dependencies=dependencies,
            public_dependencies=public_dependencies,
            types=types,
            services=services,
            options=options,
            extend_declarations=self._extends,
        )

    # -- declarations -----------------------------------------------------

    def _message(self, scope: Scope) -> A.Message:
        doc = self._doc()
        self.expect_word("message")
        name = self.ident("a message name")
        inner = scope.nested(name)
        fields: list[A.Field] = []
        nested: list[A.Type] = []
        extensions: list[A.Extensions] = []
        options: list[A.Option] = []

        open_tok = self.expect(TokenKind.LBRACE, "'{' after message name")
        while not self.accept(TokenKind.RBRACE):
            tok = self._body_token(open_tok)
            if tok.kind is TokenKind.SEMI:
                self.next()
            elif tok.kind is TokenKind.IDENT and tok.lexeme in _LABELS:
                fields.append(self._field())
            elif tok.is_word("message"):
                nested.append(self._message(inner))
            elif tok.is_word("enum"):
                nested.append(self._enum(inner))
            elif tok.is_word("extensions"):
                extensions.extend(self._extensions())
            elif tok.is_word("option"):
                options.append(self._option_statement())
            elif tok.is_word("extend"):
                self._extends.append(self._extend(inner))
            else:
                raise self.error(
                    tok,
                    f"unexpected {tok.describe()} in message {name}",
                    hint="fields start with required, optional or repeated",
                )

        return A.Message(
            name=name,
            fqname=scope.qualify(name),
            documentation=doc,
            fields=fields,
            nested_types=nested,
            extensions=extensions,
            options=options,
        )

    def _field(self) -> A.Field:
        doc = self._doc()
        label = A.Label(self.next().lexeme)
        type_name = self.qualified_name("a field type")
        name = self.ident("a field name")
        self.expect(TokenKind.EQ, "'=' after field name")
        tag = self._tag()
        options = self.options.field_options() if self.at(TokenKind.LBRACKET) else []
        self._semi()
        return A.Field(label=label, type=type_name, name=name, tag=tag, documentation=doc, options=options)

    def _extensions(self) -> list[A.Extensions]:
        doc = self._doc()
        self.expect_word("extensions")
        ranges: list[A.Extensions] = []
        while True:
            start = self._tag()
            end = start
            if self.accept_word("to"):
                end = A.MAX_TAG_VALUE if self.accept_word("max") else self._tag()
            ranges.append(A.Extensions(documentation=doc, start=start, end=end))
            if not self.accept(TokenKind.COMMA):
                break
        self._semi()
        return ranges

    def _enum(self, scope: Scope) -> A.Enum:
        doc = self._doc()
        self.expect_word("enum")
        name = self.ident("an enum name")
        options: list[A.Option] = []
        values: list[A.EnumValue] = []

        open_tok = self.expect(TokenKind.LBRACE, "'{' after enum name")
        while not self.accept(TokenKind.RBRACE):
            tok = self._body_token(open_tok)
            if tok.kind is TokenKind.SEMI:
                self.next()
            elif tok.is_word("option") and self.peek(1).kind is not TokenKind.EQ:
                options.append(self._option_statement())
            elif tok.kind is TokenKind.IDENT:
                values.append(self._enum_value())
            else:
                raise self.error(tok, f"unexpected {tok.describe()} in enum {name}", hint="expected NAME = TAG;")

        return A.Enum(name=name, fqname=scope.qualify(name), documentation=doc, options=options, values=values)

    def _enum_value(self) -> A.EnumValue:
        doc = self._doc()
        name = self.ident("an enum value name")
        self.expect(TokenKind.EQ, "'=' after enum value name")
        tag = self._tag()
        options = self.options.field_options() if self.at(TokenKind.LBRACKET) else []
        self._semi()
        return A.EnumValue(name=name, tag=tag, documentation=doc, options=options)

    def _service(self, scope: Scope) -> A.Service:
        doc = self._doc()
        self.expect_word("service")
        name = self.ident("a service name")
        options: list[A.Option] = []
        rpcs: list[A.Rpc] = []

        open_tok = self.expect(TokenKind.LBRACE, "'{' after service name")
        while not self.accept(TokenKind.RBRACE):
            tok = self._body_token(open_tok)
            if tok.kind is TokenKind.SEMI:
                self.next()
            elif tok.is_word("option"):
                options.append(self._option_statement())
            elif tok.is_word("rpc"):
                rpcs.append(self._rpc())
            else:
                raise self.error(tok, f"unexpected {tok.describe()} in service {name}", hint="expected rpc or option")

        return A.Service(name=name, fqname=scope.qualify(name), documentation=doc, options=options, rpcs=rpcs)

    def _rpc(self) -> A.Rpc:
        doc = self._doc()
        self.expect_word("rpc")
        name = self.ident("an rpc name")
        request_type = self._rpc_type()
        self.expect_word("returns")
        response_type = self._rpc_type()
        options: list[A.Option] = []

        open_tok = self.accept(TokenKind.LBRACE)
        if open_tok is None:
            self._semi()
        else:
            while not self.accept(TokenKind.RBRACE):
                tok = self._body_token(open_tok)
                if tok.kind is TokenKind.SEMI:
                    self.next()
                elif tok.is_word("option"):
                    options.append(self._option_statement())
                else:
                    raise self.error(tok, f"unexpected {tok.describe()} in rpc {name}", hint="only options may appear here")
            self.accept(TokenKind.SEMI)

        return A.Rpc(
            name=name,
            request_type=request_type,
            response_type=response_type,
            documentation=doc,
            options=options,
        )

    def _rpc_type(self) -> str:
        self.expect(TokenKind.LPAREN, "'('")
        name = self.qualified_name("a message type")
        self.expect(TokenKind.RPAREN, "')'")
        return name

    def _extend(self, scope: Scope) -> A.ExtendDeclaration:
        doc = self._doc()
        self.expect_word("extend")
        name = self.qualified_name("a message name")
        # Relative names resolve against the package only, not enclosing messages.
        fqname = name if "." in name else Scope(scope.package).qualify(name)
        fields: list[A.Field] = []

        open_tok = self.expect(TokenKind.LBRACE, "'{' after extended type")
        while not self.accept(TokenKind.RBRACE):
            tok = self._body_token(open_tok)
            if tok.kind is TokenKind.SEMI:
                self.next()
            elif tok.kind is TokenKind.IDENT and tok.lexeme in _LABELS:
                fields.append(self._field())
            else:
                raise self.error(tok, f"unexpected {tok.describe()} in extend {name}", hint="only fields may be declared here")

        return A.ExtendDeclaration(name=name, fqname=fqname, documentation=doc, fields=fields)

    # -- pieces -----------------------------------------------------------

    def _syntax(self) -> None:
        self.expect_word("syntax")
        self.expect(TokenKind.EQ, "'=' after syntax")
        self.expect(TokenKind.STRING, "a syntax string")
        self._semi()

    def _option_statement(self) -> A.Option:
        self.expect_word("option")
        option = self.options.option()
        self._semi()
        return option

    def _tag(self) -> int:
        return parse_int(self.expect(TokenKind.INT, "a tag number").lexeme)

    def _semi(self) -> None:
        self.expect(TokenKind.SEMI, "';'")

    def _doc(self) -> str:
        return extract_documentation(self.peek().comments)

    def _body_token(self, open_tok: Token) -> Token:
        tok = self.peek()
        if tok.kind is TokenKind.EOF:
            raise self.error(tok, "unexpected end of input", hint=f"missing '}}' for '{{' at {open_tok.span.format()}")
        return tok
