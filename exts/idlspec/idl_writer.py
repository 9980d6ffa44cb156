"""Canonical WebIDL serialisation through overridable templates.

Every template returns a fragment: a string, a docutils node, or a list of
fragments. ``wrap`` flattens fragments into the template set's output type,
so the same walk produces plain text (``TextTemplates``) or compiled markup
(``markup.MarkupTemplates``).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from .idl_ast import Argument, DefaultValue, Definition, ExtendedAttribute, IdlType

_BLOCK_TYPES = {
    "callback interface",
    "dictionary",
    "interface",
    "interface mixin",
    "namespace",
}


def _flatten(items: Any) -> Iterator[Any]:
    if isinstance(items, (list, tuple)):
        for item in items:
            yield from _flatten(item)
    else:
        yield items


def _join(separator: str, items: Iterable[Any]) -> list[Any]:
    joined: list[Any] = []
    for index, item in enumerate(items):
        if index:
            joined.append(separator)
        joined.append(item)
    return joined


class TextTemplates:
    def wrap(self, items: Any) -> str:
        return "".join(str(item) for item in _flatten(items))

    def trivia(self, text: str) -> Any:
        return text

    def generic(self, keyword: str) -> Any:
        return keyword

    def reference(self, wrapped: Any, unescaped: str, context: Any) -> Any:
        return wrapped

    def name(self, escaped: str, data: Any, parent: Definition | None) -> Any:
        return escaped

    def nameless(self, escaped: str, data: Any, parent: Definition | None) -> Any:
        return escaped

    def type(self, contents: Any) -> Any:
        return contents

    def inheritance(self, contents: Any) -> Any:
        return contents

    def definition(
        self, contents: Any, data: Definition, parent: Definition | None
    ) -> Any:
        return contents

    def extended_attribute(self, contents: Any) -> Any:
        return contents

    def extended_attribute_reference(self, name: str) -> Any:
        return name


class IdlWriter:
    def __init__(self, templates: Any = None, indent: str = "  ") -> None:
        self.templates = templates if templates is not None else TextTemplates()
        self.indent = indent

    def write(self, definitions: list[Definition]) -> Any:
        parts: list[Any] = []
        for index, definition in enumerate(definitions):
            if index:
                parts.append("\n\n")
            parts.append(self.write_definition(definition))
        return self.templates.wrap(parts)

    def write_definition(self, defn: Definition) -> Any:
        t = self.templates
        parts: list[Any] = [self._ext_attrs(defn.ext_attrs, inline=False)]
        if defn.type in _BLOCK_TYPES:
            parts.append(self._block(defn))
        elif defn.type == "enum":
            parts.append(self._enum(defn))
        elif defn.type == "typedef":
            parts += [
                "typedef ",
                self._type(defn.idl_type, defn),
                " ",
                t.name(defn.name, defn, None),
                ";",
            ]
        elif defn.type == "callback":
            parts += [
                "callback ",
                t.name(defn.name, defn, None),
                " = ",
                self._type(defn.idl_type, defn),
                " (",
                self._arguments(defn.arguments, defn),
                ");",
            ]
        elif defn.type == "includes":
            parts += [
                self._reference(defn.name, defn),
                " includes ",
                self._reference(defn.includes, defn),
                ";",
            ]
        else:
            raise ValueError(f"cannot write top-level definition of type {defn.type!r}")
        return t.wrap(
            [
                self._comments(defn.comments, ""),
                t.definition(t.wrap(parts), defn, None),
            ]
        )

    def _block(self, defn: Definition) -> list[Any]:
        t = self.templates
        parts: list[Any] = []
        if defn.partial:
            parts.append("partial ")
        parts += [defn.type, " ", t.name(defn.name, defn, None)]
        if defn.inheritance:
            parts += [
                " : ",
                t.inheritance(self._reference(defn.inheritance, defn)),
            ]
        parts.append(" {\n")
        for member in defn.members:
            parts.append(self._member(member, defn))
        parts.append("};")
        return parts

    def _enum(self, defn: Definition) -> list[Any]:
        t = self.templates
        values = [
            [
                self.indent,
                t.definition(
                    t.wrap(['"', t.name(value.value, value, defn), '"']), value, defn
                ),
            ]
            for value in defn.members
        ]
        return ["enum ", t.name(defn.name, defn, None), " {\n", _join(",\n", values), "\n};"]

    def _member(self, member: Definition, parent: Definition) -> list[Any]:
        t = self.templates
        body: list[Any] = [self._ext_attrs(member.ext_attrs, inline=True)]
        if member.type == "const":
            body += [
                "const ",
                self._type(member.idl_type, member),
                " ",
                t.name(member.name, member, parent),
                " = ",
                self._default(member.default),
                ";",
            ]
        elif member.type == "constructor":
            body += [
                t.nameless("constructor", member, parent),
                "(",
                self._arguments(member.arguments, member),
                ");",
            ]
        elif member.type == "attribute":
            if member.special:
                body.append(f"{member.special} ")
            if member.readonly:
                body.append("readonly ")
            body += [
                "attribute ",
                self._type(member.idl_type, member),
                " ",
                t.name(member.name, member, parent),
                ";",
            ]
        elif member.type == "operation":
            body.append(self._operation(member, parent))
        elif member.type in ("iterable", "maplike", "setlike"):
            if member.special:
                body.append(f"{member.special} ")
            if member.readonly:
                body.append("readonly ")
            body += [
                t.generic(member.type),
                "<",
                _join(", ", (self._type(item, member) for item in member.idl_types)),
                ">;",
            ]
        elif member.type == "field":
            if member.required:
                body.append("required ")
            body += [
                self._type(member.idl_type, member),
                " ",
                t.name(member.name, member, parent),
            ]
            if member.default is not None:
                body += [" = ", self._default(member.default)]
            body.append(";")
        else:
            raise ValueError(f"cannot write member of type {member.type!r}")
        return [
            self._comments(member.comments, self.indent),
            self.indent,
            t.definition(t.wrap(body), member, parent),
            "\n",
        ]

    def _operation(self, member: Definition, parent: Definition) -> list[Any]:
        t = self.templates
        parts: list[Any] = []
        if member.special:
            parts.append(member.special)
            if member.idl_type is None:
                return parts + [";"]
            parts.append(" ")
        parts.append(self._type(member.idl_type, member))
        parts.append(" ")
        if member.name:
            parts.append(t.name(member.name, member, parent))
        parts += ["(", self._arguments(member.arguments, member), ");"]
        return parts

    def _comments(self, comments: list[str], indent: str) -> list[Any]:
        return [[indent, self.templates.trivia(comment), "\n"] for comment in comments]

    def _type(self, idl_type: IdlType | None, context: Any) -> Any:
        t = self.templates
        if idl_type is None:
            return ""
        parts: list[Any] = [self._ext_attrs(idl_type.ext_attrs, inline=True)]
        if idl_type.union:
            parts += [
                "(",
                _join(" or ", (self._type(sub, context) for sub in idl_type.subtypes)),
                ")",
            ]
        elif idl_type.generic:
            parts += [
                t.generic(idl_type.generic),
                "<",
                _join(", ", (self._type(sub, context) for sub in idl_type.subtypes)),
                ">",
            ]
        else:
            parts.append(self._reference(idl_type.base, context))
        if idl_type.nullable:
            parts.append("?")
        return t.type(t.wrap(parts))

    def _reference(self, name: str, context: Any) -> Any:
        return self.templates.reference(name, name, context)

    def _arguments(self, arguments: list[Argument], owner: Any) -> list[Any]:
        return _join(", ", (self._argument(arg, owner) for arg in arguments))

    def _argument(self, arg: Argument, owner: Any) -> list[Any]:
        t = self.templates
        parts: list[Any] = [self._ext_attrs(arg.ext_attrs, inline=True)]
        if arg.optional:
            parts.append("optional ")
        parts.append(self._type(arg.idl_type, arg))
        if arg.variadic:
            parts.append("...")
        parts += [" ", t.name(arg.name, arg, owner)]
        if arg.default is not None:
            parts += [" = ", self._default(arg.default)]
        return parts

    def _default(self, value: DefaultValue | None) -> str:
        if value is None:
            return ""
        if value.kind == "string":
            return f'"{value.value}"'
        if value.kind == "sequence":
            return "[]"
        if value.kind == "dictionary":
            return "{}"
        return value.value

    def _ext_attrs(self, attrs: list[ExtendedAttribute], inline: bool) -> list[Any]:
        if not attrs:
            return []
        return [
            "[",
            _join(", ", (self._ext_attr(attr) for attr in attrs)),
            "]",
            " " if inline else "\n",
        ]

    def _ext_attr(self, attr: ExtendedAttribute) -> Any:
        t = self.templates
        parts: list[Any] = [t.extended_attribute_reference(attr.name)]
        if attr.rhs_type:
            parts.append("=")
            if isinstance(attr.rhs_value, list):
                parts += [
                    "(",
                    _join(
                        ", ",
                        (self._rhs(value, attr) for value in attr.rhs_value),
                    ),
                    ")",
                ]
            else:
                parts.append(self._rhs(attr.rhs_value, attr))
        if attr.has_arguments:
            parts += ["(", self._arguments(attr.arguments, attr), ")"]
        return t.extended_attribute(t.wrap(parts))

    def _rhs(self, value: str, attr: ExtendedAttribute) -> Any:
        if attr.rhs_type in ("identifier", "identifier-list"):
            return self._reference(value, attr)
        return value


def write(definitions: list[Definition]) -> str:
    return IdlWriter().write(definitions)
