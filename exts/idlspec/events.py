from __future__ import annotations

import asyncio

from docutils import nodes
from sphinx.application import Sphinx
from sphinx.environment import BuildEnvironment

from .context import IdlRun
from .definitions import DefinitionMap
from .diagnostics import DiagnosticReporter
from .nodes import dfn_node
from .outputs import _emit_idl_outputs
from .record_store import (
    _doc_diagnostics,
    _doc_references,
    _ensure_env,
    _purge_doc,
    _register_definition,
)
from .registry import _configure_xref_lookup
from .utils import _slug
from .webidl import process_document
from .xref import resolve_xrefs


def _on_builder_inited(app: Sphinx) -> None:
    _ensure_env(app.builder.env)
    _configure_xref_lookup(app, app.builder.env)


def _on_env_purge_doc(app: Sphinx, env: BuildEnvironment, docname: str) -> None:
    _purge_doc(env, docname)


def _on_env_merge_info(
    app: Sphinx, env: BuildEnvironment, docnames: list[str], other: BuildEnvironment
) -> None:
    _ensure_env(env)
    _ensure_env(other)
    for docname in docnames:
        for attribute in (
            "idlspec_diagnostics",
            "idlspec_definitions",
            "idlspec_anchors",
            "idlspec_normative_references",
            "idlspec_informative_references",
        ):
            value = getattr(other, attribute).get(docname)
            if value is not None:
                getattr(env, attribute)[docname] = value
    env.idlspec_build_errors.extend(other.idlspec_build_errors)


def _assign_prose_ids(doctree: nodes.document) -> None:
    for dfn in doctree.findall(dfn_node):
        if dfn["ids"]:
            continue
        slug = _slug(dfn.astext()) or "the-empty-string"
        middle = f"{_slug(dfn['dfn_for'])}-" if dfn.get("dfn_for") else ""
        dfn["ids"].append(f"dfn-{middle}{slug}")


def _record_definitions(env: BuildEnvironment, docname: str, run: IdlRun) -> None:
    domain = env.get_domain("idl")
    for dfn in run.definitions.registered:
        if not isinstance(dfn, dfn_node) or not dfn.get("export") or not dfn["ids"]:
            continue
        anchor = dfn["ids"][0]
        dfn_for = str(dfn.get("dfn_for", ""))
        name = str(dfn.get("title") or dfn.astext())
        objtype = str(dfn.get("dfn_type") or dfn.get("idl") or "dfn")
        _register_definition(
            env,
            docname,
            {
                "anchor": anchor,
                "name": name,
                "type": objtype,
                "for": dfn_for,
                "doc": docname,
                "lt": list(dfn.get("lt") or []),
            },
        )
        domain.note_definition(
            docname, anchor, f"{dfn_for}.{name}" if dfn_for else name, objtype
        )


def _record_anchors(env: BuildEnvironment, docname: str, doctree: nodes.document) -> None:
    anchors: list[str] = []
    for elem in doctree.findall(nodes.Element):
        if isinstance(elem, dfn_node) or elem.get("idl"):
            anchors.extend(elem["ids"])
    env.idlspec_anchors[docname] = anchors


def _on_doctree_read(app: Sphinx, doctree: nodes.document) -> None:
    env = app.builder.env
    _ensure_env(env)
    docname = env.docname

    document_cite = str(app.config.idlspec_document_cite).strip()
    if document_cite and not doctree.get("cite"):
        doctree["cite"] = document_cite

    reporter = DiagnosticReporter(docname, _doc_diagnostics(env, docname))
    run = IdlRun(
        docname=docname,
        reporter=reporter,
        definitions=DefinitionMap.from_doctree(doctree, reporter),
        source_cite=app.config.idlspec_source_cite,
        auto_define=app.config.idlspec_auto_define,
    )
    process_document(doctree, run)
    _assign_prose_ids(doctree)
    _record_definitions(env, docname, run)
    _record_anchors(env, docname, doctree)

    lookup = getattr(app, "idlspec_xref_lookup", None)
    if lookup is not None:
        asyncio.run(
            resolve_xrefs(doctree, lookup, _doc_references(env, docname), reporter)
        )


def _on_build_finished(app: Sphinx, exception: Exception | None) -> None:
    if exception is not None:
        return
    env = app.builder.env
    _ensure_env(env)
    _emit_idl_outputs(app, env)
