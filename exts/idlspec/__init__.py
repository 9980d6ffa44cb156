from __future__ import annotations

from typing import Any

from sphinx.application import Sphinx

from .constants import SOURCE_CITE
from .directives import CiteContextDirective, IdlDirective, InformativeDirective
from .domain import IdlDomain
from .events import (
    _on_build_finished,
    _on_builder_inited,
    _on_doctree_read,
    _on_env_merge_info,
    _on_env_purge_doc,
)
from .nodes import (
    _passthrough,
    cite_container,
    depart_cite_container_html,
    depart_dfn_node_html,
    depart_xref_node_html,
    dfn_node,
    visit_cite_container_html,
    visit_dfn_node_html,
    visit_xref_node_html,
    xref_node,
)
from .roles import DfnRole, XrefRole


def setup(app: Sphinx) -> dict[str, Any]:
    app.add_config_value("idlspec_source_cite", SOURCE_CITE, "env")
    app.add_config_value("idlspec_document_cite", "", "env")
    app.add_config_value("idlspec_auto_define", True, "env")
    app.add_config_value("idlspec_xref_database_path", "", "env")
    app.add_config_value("idlspec_xref_url", "", "env")
    app.add_config_value("idlspec_xref_timeout", 30.0, "env")
    app.add_config_value("idlspec_definitions_schema_path", "", "env")

    app.add_node(
        dfn_node,
        html=(visit_dfn_node_html, depart_dfn_node_html),
        text=(_passthrough, _passthrough),
        latex=(_passthrough, _passthrough),
    )
    app.add_node(
        xref_node,
        html=(visit_xref_node_html, depart_xref_node_html),
        text=(_passthrough, _passthrough),
        latex=(_passthrough, _passthrough),
    )
    app.add_node(
        cite_container,
        html=(visit_cite_container_html, depart_cite_container_html),
        text=(_passthrough, _passthrough),
        latex=(_passthrough, _passthrough),
    )

    app.add_domain(IdlDomain)

    app.add_role("dfn", DfnRole(), override=True)
    app.add_role("xref", XrefRole())

    app.add_directive("idl", IdlDirective)
    app.add_directive("cite-context", CiteContextDirective)
    app.add_directive("informative", InformativeDirective)

    app.connect("builder-inited", _on_builder_inited)
    app.connect("env-purge-doc", _on_env_purge_doc)
    app.connect("env-merge-info", _on_env_merge_info)
    app.connect("doctree-read", _on_doctree_read)
    app.connect("build-finished", _on_build_finished)

    return {
        "version": "0.1",
        "parallel_read_safe": True,
        "parallel_write_safe": True,
        "env_version": 1,
    }
