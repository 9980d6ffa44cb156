"""Definition-versus-reference decisions for IDL name occurrences."""

from __future__ import annotations

from typing import Any

from docutils import nodes

from .context import IdlRun
from .definitions import decorate_dfn, dfn_type_for
from .nodes import dfn_node, xref_node


def _is_default_json(defn: Any) -> bool:
    return (
        defn.type == "operation"
        and defn.name == "toJSON"
        and any(attr.name == "Default" for attr in defn.ext_attrs)
    )


def define_idl_name(
    escaped: str, defn: Any, parent_name: str, run: IdlRun
) -> nodes.Element:
    """Link to the existing definition of ``defn`` or make this occurrence one."""
    name = run.names.get_name_and_id(defn, parent_name).name
    definitions = run.definitions
    dfn = definitions.find_dfn(defn, name, parent_name)
    link_type = dfn_type_for(defn.type)

    if dfn is not None:
        if not defn.partial:
            dfn["export"] = True
            dfn["dfn_type"] = link_type
        decorate_dfn(dfn, defn, parent_name, name)
        definitions.add_alternative_names_by_type(dfn, defn.type, parent_name, name)
        link = xref_node("", "", link_for=parent_name, link_type=link_type)
        link["classes"].append("internalDFN")
        link["refid"] = dfn["ids"][0]
        link += nodes.literal(escaped, escaped)
        return link

    if _is_default_json(defn):
        return xref_node(
            escaped, escaped, link_type="dfn", lt="default toJSON operation"
        )

    if not defn.partial and run.auto_define:
        dfn = dfn_node(escaped, escaped, dfn_type=link_type)
        dfn["export"] = True
        definitions.register_definition(dfn, [name])
        decorate_dfn(dfn, defn, parent_name, name)
        definitions.add_alternative_names_by_type(dfn, defn.type, parent_name, name)
        return dfn

    unlinked = xref_node(
        escaped,
        escaped,
        link_type=link_type,
        xref_type=link_type,
        title=defn.name,
    )
    if defn.partial:
        unlinked["idl"] = "partial"

    show_warning = name and defn.type != "typedef" and not defn.partial
    if show_warning:
        styled_name = f"{name}()" if defn.type == "operation" else name
        of_parent = f" `{parent_name}`'s" if parent_name else ""
        run.reporter.report_warning(
            unlinked,
            f"Missing `dfn` for{of_parent} `{styled_name}` {defn.type}.",
            subtype="missing-definition",
        )
    return unlinked
