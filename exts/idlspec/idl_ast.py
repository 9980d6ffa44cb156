"""Definition trees produced by the WebIDL parser.

Nodes compare by identity (``eq=False``) so that two structurally equal
members, such as a pair of overloads, stay distinct everywhere they are used
as keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SourceLocation:
    source_name: str
    line: int
    line_text: str

    def context(self) -> str:
        stripped = self.line_text.lstrip()
        indent = len(self.line_text) - len(stripped)
        return f"{self.line_text}\n{' ' * indent}^"


@dataclass(eq=False)
class DefaultValue:
    kind: str
    value: str = ""


@dataclass(eq=False)
class IdlType:
    base: str = ""
    generic: str = ""
    subtypes: list[IdlType] = field(default_factory=list)
    union: bool = False
    nullable: bool = False
    ext_attrs: list[ExtendedAttribute] = field(default_factory=list)
    type: str = ""


@dataclass(eq=False)
class ExtendedAttribute:
    name: str
    rhs_type: str = ""
    rhs_value: str | list[str] = ""
    arguments: list[Argument] = field(default_factory=list)
    has_arguments: bool = False
    type: str = "extended-attribute"
    location: SourceLocation | None = None


@dataclass(eq=False)
class Argument:
    name: str
    idl_type: IdlType
    optional: bool = False
    variadic: bool = False
    default: DefaultValue | None = None
    ext_attrs: list[ExtendedAttribute] = field(default_factory=list)
    type: str = "argument"
    location: SourceLocation | None = None


@dataclass(eq=False)
class Definition:
    type: str
    name: str = ""
    partial: bool = False
    inheritance: str = ""
    members: list[Definition] = field(default_factory=list)
    arguments: list[Argument] = field(default_factory=list)
    ext_attrs: list[ExtendedAttribute] = field(default_factory=list)
    idl_type: IdlType | None = None
    idl_types: list[IdlType] = field(default_factory=list)
    special: str = ""
    readonly: bool = False
    required: bool = False
    default: DefaultValue | None = None
    value: str = ""
    includes: str = ""
    comments: list[str] = field(default_factory=list)
    location: SourceLocation | None = None

    def ext_attr(self, name: str) -> ExtendedAttribute | None:
        for attr in self.ext_attrs:
            if attr.name == name:
                return attr
        return None

    @property
    def source_index(self) -> int:
        if self.location is None or not self.location.source_name.isdigit():
            return 0
        return int(self.location.source_name)
