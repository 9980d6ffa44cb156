from __future__ import annotations

from typing import Any

from docutils import nodes


class dfn_node(nodes.Inline, nodes.TextElement):
    pass


class xref_node(nodes.Inline, nodes.TextElement):
    pass


class cite_container(nodes.General, nodes.Element):
    pass


def _data_attributes(node: nodes.Element, keys: dict[str, str]) -> dict[str, str]:
    attributes: dict[str, str] = {}
    for key, attribute in keys.items():
        value = node.get(key)
        if value:
            # data-lt alternatives are "|"-separated.
            attributes[attribute] = "|".join(value) if isinstance(value, list) else str(value)
    return attributes


def visit_dfn_node_html(self: Any, node: dfn_node) -> None:
    attributes = _data_attributes(
        node,
        {
            "dfn_type": "data-dfn-type",
            "dfn_for": "data-dfn-for",
            "idl": "data-idl",
            "lt": "data-lt",
            "diagnostic": "title",
        },
    )
    if node.get("export"):
        attributes["data-export"] = ""
    self.body.append(self.starttag(node, "dfn", "", **attributes))


def depart_dfn_node_html(self: Any, node: dfn_node) -> None:
    self.body.append("</dfn>")


def visit_xref_node_html(self: Any, node: xref_node) -> None:
    attributes = _data_attributes(
        node,
        {
            "xref_type": "data-xref-type",
            "link_type": "data-link-type",
            "link_for": "data-link-for",
            "cite": "data-cite",
            "cite_path": "data-cite-path",
            "cite_frag": "data-cite-frag",
            "lt": "data-lt",
            "diagnostic": "title",
        },
    )
    if node.get("refid"):
        attributes["href"] = f"#{node['refid']}"
    self.body.append(self.starttag(node, "a", "", **attributes))


def depart_xref_node_html(self: Any, node: xref_node) -> None:
    self.body.append("</a>")


def visit_cite_container_html(self: Any, node: cite_container) -> None:
    attributes = _data_attributes(node, {"cite": "data-cite"})
    self.body.append(self.starttag(node, "div", "", **attributes))


def depart_cite_container_html(self: Any, node: cite_container) -> None:
    self.body.append("</div>\n")


def _passthrough(self: Any, node: nodes.Node) -> None:
    pass
