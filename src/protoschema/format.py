from __future__ import annotations

from . import ast as A
from .literals import escape

__all__ = ["escape", "format_node", "format_option", "format_proto_file", "format_value"]


def format_node(node: A.Node) -> str:
    """Canonical schema text for any AST node, ending with a newline."""
    if isinstance(node, A.ProtoFile):
        return format_proto_file(node)
    if isinstance(node, A.Message):
        return _format_message(node)
    if isinstance(node, A.Enum):
        return _format_enum(node)
    if isinstance(node, A.EnumValue):
        return _format_enum_value(node)
    if isinstance(node, A.Field):
        return _format_field(node)
    if isinstance(node, A.Extensions):
        return _format_extensions(node)
    if isinstance(node, A.ExtendDeclaration):
        return _format_extend(node)
    if isinstance(node, A.Service):
        return _format_service(node)
    if isinstance(node, A.Rpc):
        return _format_rpc(node)
    if isinstance(node, A.Option):
        return format_option(node)
    raise TypeError(f"not a schema node: {type(node)!r}")


def format_proto_file(pf: A.ProtoFile) -> str:
    out = ""
    if pf.file_name:
        # A line comment ends at the first newline.
        header = pf.file_name.split("\n", 1)[0]
        out += f"// {header}\n"
    if pf.package_name is not None:
        out += f"package {pf.package_name};\n"

    sections: list[str] = []
    if pf.dependencies or pf.public_dependencies:
        imports = [f'import "{escape(d)}";\n' for d in pf.dependencies]
        imports += [f'import public "{escape(d)}";\n' for d in pf.public_dependencies]
        sections.append("".join(imports))
    if pf.options:
        sections.append(_option_statements(pf.options))
    if pf.types:
        sections.append("".join(format_node(t) for t in pf.types))
    if pf.extend_declarations:
        sections.append("".join(_format_extend(e) for e in pf.extend_declarations))
    if pf.services:
        sections.append("".join(_format_service(s) for s in pf.services))

    for section in sections:
        out += "\n" + section
    return out


def format_option(option: A.Option) -> str:
    name = f"({option.name})" if option.custom else option.name
    if isinstance(option.value, A.Option):
        return f"{name}.{format_option(option.value)}"
    return f"{name} = {format_value(option.value)}"


def format_value(value: A.OptionValue) -> str:
    # bool before int: True is an int.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{escape(value)}"'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, A.EnumConstant):
        return value.name
    if isinstance(value, A.Option):
        return format_option(value)
    if isinstance(value, list):
        if not value:
            return "[]"
        return "[\n" + _indent(",\n".join(format_value(v) for v in value) + "\n") + "]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        entries = ",\n".join(f"{k}: {format_value(v)}" for k, v in value.items())
        return "{\n" + _indent(entries + "\n") + "}"
    raise TypeError(f"not an option value: {type(value)!r}")


def _format_message(msg: A.Message) -> str:
    sections: list[str] = []
    if msg.options:
        sections.append(_option_statements(msg.options))
    if msg.fields:
        sections.append("".join(_format_field(f) for f in msg.fields))
    if msg.extensions:
        sections.append("".join(_format_extensions(e) for e in msg.extensions))
    if msg.nested_types:
        sections.append("".join(format_node(t) for t in msg.nested_types))
    return _doc(msg.documentation) + f"message {msg.name} {{" + _body(sections) + "}\n"


def _format_field(f: A.Field) -> str:
    head = f"{f.label.value} {f.type} {f.name} = {f.tag}"
    return _doc(f.documentation) + head + _bracketed(f.options) + ";\n"


def _format_extensions(ext: A.Extensions) -> str:
    if ext.start == ext.end:
        text = f"extensions {ext.start};\n"
    elif ext.end == A.MAX_TAG_VALUE:
        text = f"extensions {ext.start} to max;\n"
    else:
        text = f"extensions {ext.start} to {ext.end};\n"
    return _doc(ext.documentation) + text


def _format_enum(enum: A.Enum) -> str:
    sections: list[str] = []
    if enum.options:
        sections.append(_option_statements(enum.options))
    if enum.values:
        sections.append("".join(_format_enum_value(v) for v in enum.values))
    return _doc(enum.documentation) + f"enum {enum.name} {{" + _body(sections) + "}\n"


def _format_enum_value(v: A.EnumValue) -> str:
    return _doc(v.documentation) + f"{v.name} = {v.tag}" + _bracketed(v.options) + ";\n"


def _format_extend(ext: A.ExtendDeclaration) -> str:
    sections = ["".join(_format_field(f) for f in ext.fields)] if ext.fields else []
    return _doc(ext.documentation) + f"extend {ext.name} {{" + _body(sections) + "}\n"


def _format_service(svc: A.Service) -> str:
    sections: list[str] = []
    if svc.options:
        sections.append(_option_statements(svc.options))
    if svc.rpcs:
        sections.append("".join(_format_rpc(r) for r in svc.rpcs))
    return _doc(svc.documentation) + f"service {svc.name} {{" + _body(sections) + "}\n"


def _format_rpc(rpc: A.Rpc) -> str:
    head = f"rpc {rpc.name} ({rpc.request_type}) returns ({rpc.response_type})"
    if not rpc.options:
        return _doc(rpc.documentation) + head + ";\n"
    return _doc(rpc.documentation) + head + " {\n" + _indent(_option_statements(rpc.options)) + "};\n"


def _option_statements(options: tuple[A.Option, ...]) -> str:
    return "".join(f"option {format_option(o)};\n" for o in options)


def _bracketed(options: tuple[A.Option, ...]) -> str:
    if not options:
        return ""
    return " [\n" + _indent(",\n".join(format_option(o) for o in options) + "\n") + "]"


def _body(sections: list[str]) -> str:
    # Sections are separated by one blank line; an empty body stays `{}`.
    if not sections:
        return ""
    return "\n" + _indent("\n".join(sections))


def _doc(text: str) -> str:
    if not text:
        return ""
    return "".join(f"// {line}\n" if line else "//\n" for line in text.split("\n"))


def _indent(text: str) -> str:
    return "\n".join(f"  {line}" if line else line for line in text.split("\n"))
