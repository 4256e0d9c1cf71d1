from __future__ import annotations

from .api import parse, parse_file, parse_source
from .ast import (
    MAX_TAG_VALUE,
    MIN_TAG_VALUE,
    Enum,
    EnumConstant,
    EnumValue,
    ExtendDeclaration,
    Extensions,
    Field,
    Label,
    Message,
    Option,
    ProtoFile,
    Rpc,
    Service,
    find_option,
    is_valid_tag,
    options_as_map,
)
from .errors import (
    LexError,
    ModelValidationError,
    OptionSyntaxError,
    ParseError,
    SchemaSyntaxError,
)
from .format import format_node, format_proto_file

__all__ = [
    "MAX_TAG_VALUE",
    "MIN_TAG_VALUE",
    "Enum",
    "EnumConstant",
    "EnumValue",
    "ExtendDeclaration",
    "Extensions",
    "Field",
    "Label",
    "LexError",
    "Message",
    "ModelValidationError",
    "Option",
    "OptionSyntaxError",
    "ParseError",
    "ProtoFile",
    "Rpc",
    "SchemaSyntaxError",
    "Service",
    "find_option",
    "format_node",
    "format_proto_file",
    "is_valid_tag",
    "options_as_map",
    "parse",
    "parse_file",
    "parse_source",
]
