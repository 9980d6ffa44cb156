"""Structural checks over every parsed block of a document, with autofixes."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .idl_ast import Argument, DefaultValue, Definition, ExtendedAttribute, IdlType


@dataclass
class Validation:
    rule_name: str
    bare_message: str
    context: str
    source_index: int
    line: int = 0
    autofix: Callable[[], None] | None = None

    @property
    def message(self) -> str:
        return f"Validation error at line {self.line}: {self.bare_message}\n{self.context}"


def _context(node: Definition | Argument | ExtendedAttribute, owner: Definition | None = None) -> str:
    location = node.location
    if location is None:
        return ""
    inside = f", inside `{owner.type} {owner.name}`" if owner is not None else ""
    return f"line {location.line}{inside}:\n{location.context()}"


def _line(node: Definition | Argument | ExtendedAttribute) -> int:
    return node.location.line if node.location is not None else 0


def validate(trees: list[list[Definition]]) -> list[Validation]:
    definitions = [defn for tree in trees for defn in tree]
    dictionaries: dict[str, list[Definition]] = {}
    for defn in definitions:
        if defn.type == "dictionary":
            dictionaries.setdefault(defn.name, []).append(defn)

    validations = list(_no_duplicate(definitions))
    for defn in definitions:
        validations.extend(_require_exposed(defn))
        validations.extend(_constructor_member(defn))
        validations.extend(_no_nointerfaceobject(defn))
        validations.extend(_dictionary_arguments(defn, dictionaries))
    validations.extend(_unknown_includes(definitions))
    return validations


def _no_duplicate(definitions: list[Definition]) -> Iterator[Validation]:
    seen: dict[str, Definition] = {}
    for defn in definitions:
        if defn.partial or defn.type == "includes":
            continue
        prior = seen.get(defn.name)
        if prior is None:
            seen[defn.name] = defn
            continue
        yield Validation(
            "no-duplicate",
            f'The name "{defn.name}" of type "{prior.type}" was already seen',
            _context(defn),
            defn.source_index,
            _line(defn),
        )


def _require_exposed(defn: Definition) -> Iterator[Validation]:
    if defn.type not in ("interface", "namespace") or defn.partial:
        return
    opted_out = ("Exposed", "LegacyNoInterfaceObject", "NoInterfaceObject")
    if any(defn.ext_attr(name) is not None for name in opted_out):
        return

    def autofix(defn: Definition = defn) -> None:
        defn.ext_attrs.insert(
            0,
            ExtendedAttribute(
                name="Exposed", rhs_type="identifier", rhs_value="Window"
            ),
        )

    yield Validation(
        "require-exposed",
        f"{defn.type.capitalize()}s must have `[Exposed]` extended attribute. "
        "To fix, add, for example, `[Exposed=Window]`. Please also consider "
        "carefully if your interface should also be exposed in a Worker scope.",
        _context(defn),
        defn.source_index,
        _line(defn),
        autofix,
    )


def _constructor_member(defn: Definition) -> Iterator[Validation]:
    if defn.type != "interface":
        return
    for attr in list(defn.ext_attrs):
        if attr.name != "Constructor":
            continue

        def autofix(defn: Definition = defn, attr: ExtendedAttribute = attr) -> None:
            defn.ext_attrs.remove(attr)
            defn.members.insert(
                0,
                Definition(
                    type="constructor",
                    arguments=list(attr.arguments),
                    location=attr.location,
                ),
            )

        yield Validation(
            "constructor-member",
            "Constructors should now be represented as a `constructor()` "
            "operation on the interface instead of `[Constructor]` extended "
            "attribute.",
            _context(attr, defn),
            defn.source_index,
            _line(attr),
            autofix,
        )


def _no_nointerfaceobject(defn: Definition) -> Iterator[Validation]:
    attr = defn.ext_attr("NoInterfaceObject")
    if attr is None:
        return
    yield Validation(
        "no-nointerfaceobject",
        "`[NoInterfaceObject]` extended attribute is an undesirable feature "
        "that may be removed from Web IDL in the future.",
        _context(attr, defn),
        defn.source_index,
        _line(attr),
    )


def _argument_lists(defn: Definition) -> Iterator[list[Argument]]:
    if defn.type == "callback":
        yield defn.arguments
    for member in defn.members:
        if member.type in ("operation", "constructor"):
            yield member.arguments


def _dictionary_name(
    idl_type: IdlType, dictionaries: dict[str, list[Definition]]
) -> str:
    if idl_type.union or idl_type.generic or idl_type.nullable:
        return ""
    return idl_type.base if idl_type.base in dictionaries else ""


def _has_required_field(
    name: str, dictionaries: dict[str, list[Definition]], seen: set[str] | None = None
) -> bool:
    seen = seen if seen is not None else set()
    if name in seen:
        return False
    seen.add(name)
    for dictionary in dictionaries.get(name, []):
        if any(member.required for member in dictionary.members):
            return True
        if dictionary.inheritance and _has_required_field(
            dictionary.inheritance, dictionaries, seen
        ):
            return True
    return False


def _followed_by_optional(arguments: list[Argument], index: int) -> bool:
    return all(arg.optional or arg.variadic for arg in arguments[index + 1 :])


def _dictionary_arguments(
    defn: Definition, dictionaries: dict[str, list[Definition]]
) -> Iterator[Validation]:
    for arguments in _argument_lists(defn):
        for index, arg in enumerate(arguments):
            if not _dictionary_name(arg.idl_type, dictionaries):
                continue
            if arg.optional and arg.default is None:

                def add_default(arg: Argument = arg) -> None:
                    arg.default = DefaultValue("dictionary")

                yield Validation(
                    "dict-arg-default",
                    "Optional dictionary arguments must have a default value of `{}`.",
                    _context(arg, defn),
                    defn.source_index,
                    _line(arg),
                    add_default,
                )
            elif (
                not arg.optional
                and not arg.variadic
                and _followed_by_optional(arguments, index)
                and not _has_required_field(arg.idl_type.base, dictionaries)
            ):

                def make_optional(arg: Argument = arg) -> None:
                    arg.optional = True
                    arg.default = DefaultValue("dictionary")

                yield Validation(
                    "dict-arg-optional",
                    "Dictionary argument must be optional if it has no required fields",
                    _context(arg, defn),
                    defn.source_index,
                    _line(arg),
                    make_optional,
                )


def _unknown_includes(definitions: list[Definition]) -> Iterator[Validation]:
    interfaces = {defn.name for defn in definitions if defn.type == "interface"}
    mixins = {defn.name for defn in definitions if defn.type == "interface mixin"}
    for defn in definitions:
        if defn.type != "includes":
            continue
        if defn.name not in interfaces:
            yield Validation(
                "unknown-include",
                f"Includes statement refers to unknown interface `{defn.name}`",
                _context(defn),
                defn.source_index,
                _line(defn),
            )
        if defn.includes not in mixins:
            yield Validation(
                "unknown-include",
                f"Includes statement refers to unknown interface mixin `{defn.includes}`",
                _context(defn),
                defn.source_index,
                _line(defn),
            )
