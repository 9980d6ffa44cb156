from __future__ import annotations

from docutils import nodes
from sphinx.roles import SphinxRole
from sphinx.util.nodes import split_explicit_title

from .nodes import dfn_node, xref_node


class DfnRole(SphinxRole):
    """``:dfn:`name``` or ``:dfn:`name <For>```."""

    def run(self) -> tuple[list[nodes.Node], list[nodes.system_message]]:
        has_for, text, dfn_for = split_explicit_title(self.text.strip())
        node = dfn_node(text, text)
        node["dfn_for"] = dfn_for if has_for else ""
        self.set_source_info(node)
        return [node], []


class XrefRole(SphinxRole):
    """``:xref:`text``` or ``:xref:`text <term>```."""

    def run(self) -> tuple[list[nodes.Node], list[nodes.system_message]]:
        has_term, text, term = split_explicit_title(self.text.strip())
        node = xref_node(text, text)
        if has_term:
            node["lt"] = term
        self.set_source_info(node)
        return [node], []
