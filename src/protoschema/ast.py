from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum as _Enum

from .errors import ModelValidationError


MIN_TAG_VALUE = 1
MAX_TAG_VALUE = (1 << 29) - 1  # 536,870,911
RESERVED_TAG_VALUE_START = 19000
RESERVED_TAG_VALUE_END = 19999


def is_valid_tag(value: int) -> bool:
    """True if the value is in the legal tag range and outside the reserved band."""
    return (MIN_TAG_VALUE <= value < RESERVED_TAG_VALUE_START) or (
        RESERVED_TAG_VALUE_END < value <= MAX_TAG_VALUE
    )


def _freeze(obj: object, attr: str) -> None:
    # Defensive copy of a sequence field into a tuple, on a frozen instance.
    object.__setattr__(obj, attr, tuple(getattr(obj, attr)))


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EnumConstant:
    """A bare identifier used as an option value, e.g. `default = STRING`."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Option:
    """A single `name = value` option.

    `custom` marks an extension name, parenthesized in source (`(foo.bar)`).
    A dotted suffix assignment such as `(validation.range).min = 1` is an
    option whose value is itself an `Option`.
    """

    name: str
    value: OptionValue
    custom: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _copy_value(self.value))

    def __hash__(self) -> int:
        return hash((self.name, _hashable(self.value), self.custom))


OptionValue = str | bool | int | float | EnumConstant | list | dict | Option


def _copy_value(value: object) -> object:
    if isinstance(value, (list, tuple)):
        return [_copy_value(v) for v in value]
    if isinstance(value, dict):
        return {k: _copy_value(v) for k, v in value.items()}
    return value


def _hashable(value: object) -> object:
    if isinstance(value, list):
        return tuple(_hashable(v) for v in value)
    if isinstance(value, dict):
        return tuple((k, _hashable(v)) for k, v in value.items())
    return value


def find_option(options: Iterable[Option], name: str) -> Option | None:
    """Return the option called `name`, None when absent.

    More than one match is an error.
    """
    found: Option | None = None
    for option in options:
        if option.name == name:
            if found is not None:
                raise ModelValidationError(f"Multiple options match name: {name}", value=name)
            found = option
    return found


def options_as_map(options: Iterable[Option]) -> dict[str, object]:
    """Fold options into a name -> value mapping.

    Nested options sharing an outer name are merged into one dict, so
    `(a).b = 1` and `(a).c = 2` become `{"a": {"b": 1, "c": 2}}`.
    """
    out: dict[str, object] = {}
    for option in options:
        if isinstance(option.value, Option):
            inner = option.value
            merged = out.get(option.name)
            if not isinstance(merged, dict):
                merged = {}
                out[option.name] = merged
            merged[inner.name] = inner.value
        else:
            out[option.name] = option.value
    return out


def _is_true(options: Iterable[Option], name: str) -> bool:
    option = find_option(options, name)
    return option is not None and (option.value is True or option.value == "true")


# ---------------------------------------------------------------------------
# Messages, fields, extensions
# ---------------------------------------------------------------------------


class Label(str, _Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    REPEATED = "repeated"


@dataclass(frozen=True, slots=True)
class Field:
    label: Label
    type: str  # scalar keyword or message/enum name, unresolved
    name: str
    tag: int
    documentation: str = ""
    options: tuple[Option, ...] = ()

    def __post_init__(self) -> None:
        if not is_valid_tag(self.tag):
            raise ModelValidationError(f"Illegal tag value: {self.tag}", scope=self.name, value=self.tag)
        object.__setattr__(self, "label", Label(self.label))
        _freeze(self, "options")

    @property
    def deprecated(self) -> bool:
        return _is_true(self.options, "deprecated")

    @property
    def packed(self) -> bool:
        return _is_true(self.options, "packed")

    @property
    def default(self) -> OptionValue | None:
        option = find_option(self.options, "default")
        return option.value if option is not None else None


def _validate_field_tags(fqname: str, fields: Iterable[Field]) -> None:
    seen: set[int] = set()
    for f in fields:
        if f.tag in seen:
            raise ModelValidationError(f"Duplicate tag {f.tag} in {fqname}", scope=fqname, value=f.tag)
        seen.add(f.tag)


@dataclass(frozen=True, slots=True)
class Extensions:
    """An inclusive tag range reserved for extension fields."""

    documentation: str
    start: int
    end: int

    def __post_init__(self) -> None:
        if not (MIN_TAG_VALUE <= self.start <= self.end <= MAX_TAG_VALUE):
            raise ModelValidationError(
                f"Illegal extensions range: {self.start} to {self.end}",
                value=(self.start, self.end),
            )


@dataclass(frozen=True, slots=True)
class Message:
    name: str
    fqname: str
    documentation: str = ""
    fields: tuple[Field, ...] = ()
    nested_types: tuple[Type, ...] = ()
    extensions: tuple[Extensions, ...] = ()
    options: tuple[Option, ...] = ()

    def __post_init__(self) -> None:
        for attr in ("fields", "nested_types", "extensions", "options"):
            _freeze(self, attr)
        _validate_field_tags(self.fqname, self.fields)
        _validate_enum_names_in_scope(self.fqname, self.nested_types)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EnumValue:
    name: str
    tag: int
    documentation: str = ""
    options: tuple[Option, ...] = ()

    def __post_init__(self) -> None:
        if not is_valid_tag(self.tag):
            raise ModelValidationError(f"Illegal tag value: {self.tag}", scope=self.name, value=self.tag)
        _freeze(self, "options")


@dataclass(frozen=True, slots=True)
class Enum:
    name: str
    fqname: str
    documentation: str = ""
    options: tuple[Option, ...] = ()
    values: tuple[EnumValue, ...] = ()
    # True when allow_alias is set to boolean true; values may then share tags.
    allow_alias: bool = field(init=False, compare=False)

    def __post_init__(self) -> None:
        _freeze(self, "options")
        _freeze(self, "values")
        option = find_option(self.options, "allow_alias")
        allow_alias = option is not None and option.value is True
        object.__setattr__(self, "allow_alias", allow_alias)
        if not allow_alias:
            seen: set[int] = set()
            for v in self.values:
                if v.tag in seen:
                    raise ModelValidationError(
                        f"Duplicate tag {v.tag} in {self.fqname}", scope=self.fqname, value=v.tag
                    )
                seen.add(v.tag)

    @property
    def nested_types(self) -> tuple[Type, ...]:
        return ()


def _validate_enum_names_in_scope(fqname: str, nested_types: Iterable[Type]) -> None:
    # Enum values are siblings of their enum type (C++ scoping), so value
    # names must be unique across all enums declared in the same message.
    seen: set[str] = set()
    for t in nested_types:
        if not isinstance(t, Enum):
            continue
        for v in t.values:
            if v.name in seen:
                raise ModelValidationError(
                    f"Duplicate enum name {v.name} in scope {fqname}", scope=fqname, value=v.name
                )
            seen.add(v.name)


Type = Message | Enum


# ---------------------------------------------------------------------------
# Extend, services, file
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ExtendDeclaration:
    name: str  # as written, possibly relative
    fqname: str
    documentation: str = ""
    fields: tuple[Field, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "fields")
        _validate_field_tags(self.fqname, self.fields)


@dataclass(frozen=True, slots=True)
class Rpc:
    name: str
    request_type: str
    response_type: str
    documentation: str = ""
    options: tuple[Option, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "options")


@dataclass(frozen=True, slots=True)
class Service:
    name: str
    fqname: str
    documentation: str = ""
    options: tuple[Option, ...] = ()
    rpcs: tuple[Rpc, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "options")
        _freeze(self, "rpcs")


@dataclass(frozen=True, slots=True)
class ProtoFile:
    file_name: str = ""
    package_name: str | None = None
    dependencies: tuple[str, ...] = ()
    public_dependencies: tuple[str, ...] = ()
    types: tuple[Type, ...] = ()
    services: tuple[Service, ...] = ()
    options: tuple[Option, ...] = ()
    extend_declarations: tuple[ExtendDeclaration, ...] = ()

    def __post_init__(self) -> None:
        for attr in (
            "dependencies",
            "public_dependencies",
            "types",
            "services",
            "options",
            "extend_declarations",
        ):
            _freeze(self, attr)


Node = ProtoFile | Message | Enum | EnumValue | Field | Extensions | ExtendDeclaration | Service | Rpc | Option
