"""docutils templates that turn IDL trees into linked, definition-bearing markup."""

from __future__ import annotations

from typing import Any

from docutils import nodes

from .constants import SOURCE_CITE, WORKER_GLOBALS
from .context import IdlRun
from .idl_ast import Argument, Definition
from .idl_writer import _flatten
from .linker import define_idl_name
from .nodes import xref_node


def idl_class_name(defn: Definition) -> str:
    if defn.type == "callback interface":
        return "idlInterface"
    if defn.type == "operation":
        return "idlMethod"
    if defn.type == "field":
        return "idlMember"
    if defn.type == "enum-value":
        return "idlEnumItem"
    if defn.type == "callback":
        return "idlCallback"
    return "idl" + "".join(part[:1].upper() + part[1:] for part in defn.type.split())


def _parent_name(parent: Any) -> str:
    return parent.name if parent is not None else ""


class MarkupTemplates:
    def __init__(self, run: IdlRun) -> None:
        self.run = run

    def wrap(self, items: Any) -> list[nodes.Node]:
        wrapped: list[nodes.Node] = []
        for item in _flatten(items):
            if isinstance(item, str):
                if item:
                    wrapped.append(nodes.Text(item))
            else:
                wrapped.append(item)
        return wrapped

    def _span(self, contents: Any, *classes: str) -> nodes.inline:
        span = nodes.inline(classes=list(classes))
        span.extend(self.wrap(contents))
        return span

    def trivia(self, text: str) -> Any:
        if not text.strip():
            return text
        return self._span(text, "idlSectionComment")

    def generic(self, keyword: str) -> nodes.Element:
        # Capitalised generics (Promise, FrozenArray) are interfaces.
        xref_type = "interface" if keyword[:1].isupper() else "dfn"
        return xref_node(keyword, keyword, xref_type=xref_type, cite=SOURCE_CITE)

    def reference(self, wrapped: Any, unescaped: str, context: Any) -> nodes.Element:
        xref_type = "_IDL_"
        cite = ""
        lt = ""
        if unescaped == "Window":
            xref_type = "interface"
            cite = "HTML"
        elif unescaped == "object":
            xref_type = "interface"
            cite = SOURCE_CITE
        elif (
            "Worker" in unescaped
            and getattr(context, "type", "") == "extended-attribute"
            and context.name == "Exposed"
        ):
            lt = f"{unescaped}GlobalScope"
            xref_type = "interface"
            cite = "HTML" if unescaped in WORKER_GLOBALS else ""
        link = xref_node("", "", xref_type=xref_type)
        if cite:
            link["cite"] = cite
        if lt:
            link["lt"] = lt
        link.extend(self.wrap(wrapped))
        return link

    def name(self, escaped: str, data: Any, parent: Any) -> nodes.Element:
        if isinstance(data, Argument):
            return self._span(escaped, "idlParamName")
        idl_link = define_idl_name(escaped, data, _parent_name(parent), self.run)
        if data.type != "enum-value":
            idl_link["classes"].append("idlName" if parent is not None else "idlID")
        return idl_link

    def nameless(self, escaped: str, data: Any, parent: Any) -> Any:
        if data.type == "constructor":
            return define_idl_name(escaped, data, _parent_name(parent), self.run)
        return escaped

    def type(self, contents: Any) -> nodes.Element:
        return self._span(contents, "idlType")

    def inheritance(self, contents: Any) -> nodes.Element:
        return self._span(contents, "idlSuperclass")

    def definition(self, contents: Any, data: Definition, parent: Any) -> nodes.Element:
        class_name = idl_class_name(data)
        if data.type in ("includes", "enum-value"):
            return self._span(contents, class_name)
        resolved = self.run.names.get_name_and_id(data, _parent_name(parent))
        span = self._span(contents, class_name)
        span["ids"].append(resolved.anchor_id)
        span["idl"] = data.type
        span["title"] = resolved.name
        return span

    def extended_attribute(self, contents: Any) -> nodes.Element:
        return self._span(contents, "extAttr")

    def extended_attribute_reference(self, name: str) -> nodes.Element:
        return xref_node(name, name, xref_type="extended-attribute")
