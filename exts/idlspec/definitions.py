"""Per-document registry of ``<dfn>``-like definitions and their decoration."""

from __future__ import annotations

import re
from typing import Any

from docutils import nodes

from .diagnostics import DiagnosticReporter
from .nodes import dfn_node

_OVERLOAD_RE = re.compile(r"!overload-\d+")


def dfn_type_for(idl_type: str) -> str:
    if idl_type == "operation":
        return "method"
    if idl_type == "field":
        return "dict-member"
    if idl_type in ("callback interface", "interface mixin"):
        return "interface"
    return idl_type


def _within_idl_block(node: nodes.Node) -> bool:
    parent = node.parent
    while parent is not None:
        if isinstance(parent, nodes.literal_block) and "idl" in parent["classes"]:
            return True
        parent = parent.parent
    return False


class DefinitionMap:
    def __init__(self, reporter: DiagnosticReporter | None = None) -> None:
        self.reporter = reporter or DiagnosticReporter()
        self._by_name: dict[str, list[nodes.Element]] = {}
        self.registered: list[nodes.Element] = []
        self._registered_ids: set[int] = set()
        self._reported_duplicates: set[int] = set()

    @classmethod
    def from_doctree(
        cls, doctree: nodes.Node, reporter: DiagnosticReporter | None = None
    ) -> DefinitionMap:
        definitions = cls(reporter)
        for dfn in doctree.findall(dfn_node):
            if _within_idl_block(dfn):
                continue
            names = list(dfn.get("lt") or []) or [dfn.astext()]
            definitions.register_definition(dfn, names)
        return definitions

    def register_definition(self, dfn: nodes.Element, names: list[str]) -> None:
        if id(dfn) not in self._registered_ids:
            self._registered_ids.add(id(dfn))
            self.registered.append(dfn)
        self._add_names(dfn, names)

    def is_registered(self, dfn: nodes.Element) -> bool:
        return id(dfn) in self._registered_ids

    def lookup(self, name: str) -> list[nodes.Element]:
        return list(self._by_name.get(name.lower(), []))

    def find_dfn(
        self, defn: Any, name: str, parent: str = ""
    ) -> nodes.Element | None:
        if defn.type in ("constructor", "operation") and "!overload" not in name:
            return self._find_normal_dfn(defn, parent, f"{name}()", name)
        return self._find_normal_dfn(defn, parent, name)

    def add_alternative_names_by_type(
        self, dfn: nodes.Element, type_: str, parent: str, name: str
    ) -> None:
        base = _OVERLOAD_RE.sub("", name)
        names: list[str] = []
        if type_ in ("operation", "constructor"):
            names.append(f"{base}()")
            if parent:
                names += [f"{parent}.{base}()", f"{parent}.{base}"]
        elif type_ == "enum-value":
            names.append(f'"{name}"')
            if parent:
                names.append(f"{parent}.{name}")
        elif parent and type_ in ("attribute", "field", "const"):
            names.append(f"{parent}.{name}")
        self._add_names(dfn, names)

    def _add_names(self, dfn: nodes.Element, names: list[str]) -> None:
        for name in names:
            bucket = self._by_name.setdefault(name.lower(), [])
            if not any(existing is dfn for existing in bucket):
                bucket.append(dfn)

    def _find_normal_dfn(
        self, defn: Any, parent: str, *names: str
    ) -> nodes.Element | None:
        dfn_type = dfn_type_for(defn.type)
        for name in names:
            lookup_name = name
            if defn.type == "enum-value" and name == "":
                lookup_name = "the-empty-string"
            dfns = self._get_dfns(lookup_name, parent, dfn_type)
            if not dfns and parent:
                dfns = self._get_dfns(lookup_name, parent, None)
            if len(dfns) > 1:
                of_parent = f" for `{parent}`" if parent else ""
                for duplicate in dfns:
                    if id(duplicate) in self._reported_duplicates:
                        continue
                    self._reported_duplicates.add(id(duplicate))
                    self.reporter.report_error(
                        duplicate,
                        f"WebIDL identifier `{name}`{of_parent} is defined multiple times",
                        "Duplicate definition.",
                        subtype="duplicate-definition",
                    )
            if dfns:
                return dfns[0]
        return None

    def _get_dfns(
        self, name: str, parent: str, dfn_type: str | None
    ) -> list[nodes.Element]:
        matches = []
        for dfn in self._by_name.get(name.lower(), []):
            if not isinstance(dfn, dfn_node):
                continue
            if str(dfn.get("dfn_for", "")).lower() != parent.lower():
                continue
            if dfn_type is not None and dfn.get("dfn_type") not in (None, "", dfn_type):
                continue
            matches.append(dfn)
        return matches


def decorate_dfn(
    dfn: nodes.Element, defn: Any, parent: str, name: str
) -> None:
    if not dfn["ids"]:
        middle = f"{parent.lower()}-" if parent else ""
        last = re.sub(r"[()]", "", name.lower())
        last = re.sub(r"\s", "-", last)
        if last == "":
            last = "the-empty-string"
        dfn["ids"].append(f"dom-{middle}{last}")
    dfn["idl"] = defn.type
    dfn["title"] = dfn.astext()
    dfn["dfn_for"] = parent
    if defn.type in ("operation", "constructor"):
        base = _OVERLOAD_RE.sub("", name)
        arguments = ", ".join(arg.name for arg in defn.arguments)
        call_forms = [f"{base}()"]
        if arguments:
            call_forms.append(f"{base}({arguments})")
        dfn["lt"] = list(dict.fromkeys([*dfn.get("lt", []), *call_forms]))
    if not dfn.get("noexport"):
        dfn["export"] = True
