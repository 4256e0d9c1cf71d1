from __future__ import annotations

import random
import string


_KEYWORDS = {
    "syntax",
    "import",
    "package",
    "option",
    "message",
    "enum",
    "service",
    "rpc",
    "returns",
    "extend",
    "extensions",
    "required",
    "optional",
    "repeated",
    "to",
    "max",
    "public",
    "true",
    "false",
}

_SCALARS = ["int32", "int64", "uint32", "uint64", "sint32", "fixed64", "bool", "string", "bytes", "double"]
_LABELS = ["required", "optional", "repeated"]


def _ident(r: random.Random) -> str:
    head = r.choice(string.ascii_letters + "_")
    tail = "".join(r.choice(string.ascii_letters + string.digits + "_") for _ in range(r.randint(0, 10)))
    s = head + tail
    if s in _KEYWORDS:
        return s + "_"
    return s


class _Tags:
    """Hands out increasing legal tag numbers, skipping the reserved band."""

    def __init__(self, r: random.Random) -> None:
        self.r = r
        self.next = 1

    def take(self) -> int:
        tag = self.next + self.r.randint(0, 3)
        if 19000 <= tag <= 19999:
            tag = 20000
        self.next = tag + 1
        return tag


def generate_proto_sources(*, seed: int, count: int) -> list[str]:
    r = random.Random(seed)
    return [_gen_one(r, []) for _ in range(count)]


def generate_corpus_files(*, seed: int, count: int) -> list[tuple[str, str]]:
    """Generate a deterministic corpus as a *file set*.

    Returns a list of (relative_path, source).

    - File names are stable: `case_000000.proto`, ...
    - Imports only reference earlier files of the same corpus, so there are no cycles.
    """
    r = random.Random(seed)
    names = [f"case_{i:06d}.proto" for i in range(count)]
    return [(name, _gen_one(r, names[:i])) for i, name in enumerate(names)]


def _gen_one(r: random.Random, importable: list[str]) -> str:
    parts: list[str] = []
    if r.random() < 0.5:
        parts += ['syntax = "proto2";', ""]

    if r.random() < 0.6:
        pkg_parts = [_ident(r) for _ in range(r.randint(1, 4))]
        parts.append("package " + ".".join(pkg_parts) + ";")
        parts.append("")

    if importable:
        for target in r.sample(importable, k=min(len(importable), r.randint(0, 3))):
            public = "public " if r.random() < 0.2 else ""
            parts.append(f'import {public}"{target}";')
        if parts and parts[-1].startswith("import "):
            parts.append("")

    for _ in range(r.randint(0, 2)):
        parts.append(f"option {_gen_option(r)};")
    if parts and parts[-1].startswith("option "):
        parts.append("")

    for _ in range(r.randint(1, 4)):
        k = r.random()
        if k < 0.55:
            parts.append(_gen_message(r, depth=0))
        elif k < 0.75:
            parts.append(_gen_enum(r, suffix=""))
        elif k < 0.9:
            parts.append(_gen_service(r))
        else:
            parts.append(_gen_extend(r))
        parts.append("")
    return "\n".join(parts)


def _gen_doc(r: random.Random, indent: int) -> list[str]:
    pad = " " * indent
    k = r.random()
    if k < 0.7:
        return []
    words = [_ident(r) for _ in range(r.randint(1, 4))]
    if k < 0.85:
        return [f"{pad}// {w}" for w in words]
    if k < 0.95:
        return [f"{pad}/**"] + [f"{pad} * {w}" for w in words] + [f"{pad} */"]
    return [f"{pad}/* {' '.join(words)} */"]


def _string_lit(r: random.Random) -> str:
    alphabet = string.ascii_letters + string.digits + "_-/ "
    s = "".join(r.choice(alphabet) for _ in range(r.randint(0, 24)))
    if r.random() < 0.1:
        s += "\\n\\t\\101\\x41"
    return '"' + s + '"'


def _gen_value(r: random.Random, depth: int = 0) -> str:
    k = r.random()
    if k < 0.3:
        return _string_lit(r)
    if k < 0.45:
        return str(r.randint(-1000, 100000))
    if k < 0.55:
        return r.choice(["true", "false"])
    if k < 0.65:
        return f"{r.randint(0, 1000)}.{r.randint(0, 99)}"
    if k < 0.8 or depth > 1:
        return _ident(r).upper()
    if k < 0.9:
        items = [_gen_value(r, depth + 1) for _ in range(r.randint(0, 3))]
        return "[" + ", ".join(items) + "]"
    keys = [f"{_ident(r)}_{i}" for i in range(r.randint(0, 3))]
    return "{ " + " ".join(f"{key}: {_gen_value(r, depth + 1)}" for key in keys) + " }"


def _gen_option(r: random.Random) -> str:
    k = r.random()
    if k < 0.5:
        return f"{_ident(r)} = {_gen_value(r)}"
    if k < 0.8:
        return f"({_ident(r)}.{_ident(r)}) = {_gen_value(r)}"
    return f"({_ident(r)}).{_ident(r)} = {_gen_value(r)}"


def _gen_field(r: random.Random, tags: _Tags, pad: str) -> list[str]:
    label = r.choice(_LABELS)
    typ = r.choice(_SCALARS) if r.random() < 0.7 else ".".join(_ident(r) for _ in range(r.randint(1, 3)))
    tag = tags.take()
    tag_text = hex(tag) if r.random() < 0.1 else str(tag)
    opts = ""
    if r.random() < 0.3:
        chosen = [_gen_option(r) for _ in range(r.randint(1, 2))]
        if r.random() < 0.5:
            chosen.append("deprecated = true")
        opts = " [" + ", ".join(chosen) + "]"
    return [*_gen_doc(r, len(pad)), f"{pad}{label} {typ} {_ident(r)} = {tag_text}{opts};"]


def _gen_enum(r: random.Random, *, suffix: str, indent: int = 0) -> str:
    pad = " " * indent
    name = _ident(r)
    lines = [*_gen_doc(r, indent), f"{pad}enum {name} {{"]
    alias = r.random() < 0.2
    if alias:
        lines.append(f"{pad}  option allow_alias = true;")
    value = 1
    for i in range(r.randint(1, 8)):
        # Suffixes keep value names unique among sibling enums.
        vname = f"{_ident(r).upper()}_{i}{suffix}"
        opts = f" [({_ident(r)}) = {_gen_value(r)}]" if r.random() < 0.1 else ""
        lines += _gen_doc(r, indent + 2)
        lines.append(f"{pad}  {vname} = {value}{opts};")
        if not (alias and r.random() < 0.3):
            value += r.randint(1, 3)
    lines.append(f"{pad}}}")
    return "\n".join(lines)


def _gen_message(r: random.Random, *, depth: int, indent: int = 0) -> str:
    pad = " " * indent
    inner = pad + "  "
    name = _ident(r)
    lines = [*_gen_doc(r, indent), f"{pad}message {name} {{"]
    tags = _Tags(r)

    if r.random() < 0.2:
        lines.append(f"{inner}option {_gen_option(r)};")

    for _ in range(r.randint(0, 8)):
        lines += _gen_field(r, tags, inner)

    if r.random() < 0.25:
        start = 1000 + r.randint(0, 100)
        end = r.choice([str(start + r.randint(0, 50)), "max"])
        lines.append(f"{inner}extensions {start} to {end};")
    if r.random() < 0.1:
        lines.append(f"{inner}extensions 500, 600 to 700;")

    for i in range(r.randint(0, 2) if r.random() < 0.3 else 0):
        lines.append(_gen_enum(r, suffix=f"_E{i}", indent=indent + 2))
    if depth < 2 and r.random() < 0.2:
        lines.append(_gen_message(r, depth=depth + 1, indent=indent + 2))
    if r.random() < 0.1:
        lines.append(_gen_extend(r, indent=indent + 2))

    lines.append(f"{pad}}}")
    return "\n".join(lines)


def _gen_extend(r: random.Random, *, indent: int = 0) -> str:
    pad = " " * indent
    target = ".".join(_ident(r) for _ in range(r.randint(1, 3)))
    lines = [*_gen_doc(r, indent), f"{pad}extend {target} {{"]
    tags = _Tags(r)
    tags.next = 100
    for _ in range(r.randint(1, 3)):
        lines += _gen_field(r, tags, pad + "  ")
    lines.append(f"{pad}}}")
    return "\n".join(lines)


def _gen_service(r: random.Random) -> str:
    name = _ident(r)
    lines = [*_gen_doc(r, 0), f"service {name} {{"]
    if r.random() < 0.2:
        lines.append(f"  option {_gen_option(r)};")
    for _ in range(r.randint(1, 5)):
        m = _ident(r)
        req = r.choice(["google.protobuf.Empty", _ident(r), f"{_ident(r)}.{_ident(r)}"])
        resp = r.choice(["google.protobuf.Empty", _ident(r)])
        lines += _gen_doc(r, 2)
        if r.random() < 0.2:
            lines.append(f"  rpc {m} ({req}) returns ({resp}) {{")
            lines.append(f"    option {_gen_option(r)};")
            lines.append("  }")
        else:
            lines.append(f"  rpc {m} ({req}) returns ({resp});")
    lines.append("}")
    return "\n".join(lines)
