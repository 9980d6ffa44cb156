"""Compile ``idl`` blocks: parse, render linked markup, normalise citations, validate."""

from __future__ import annotations

import re

from docutils import nodes
from sphinx.util import logging

from .context import IdlRun
from .idl_ast import Definition
from .idl_lexer import IdlSyntaxError
from .idl_parser import parse
from .idl_writer import IdlWriter, write
from .markup import MarkupTemplates
from .nodes import dfn_node, xref_node
from .validate import validate

LOGGER = logging.getLogger(__name__)


def is_idl_block(node: nodes.Node) -> bool:
    return isinstance(node, nodes.literal_block) and "idl" in node["classes"]


def find_idl_blocks(doctree: nodes.Node) -> list[nodes.literal_block]:
    return list(doctree.findall(is_idl_block))


def closest_cite_holder(node: nodes.Element) -> nodes.Element:
    current: nodes.Element | None = node
    while current is not None:
        if current.get("cite") or isinstance(current, nodes.document):
            return current
        current = current.parent
    return node


def _closest_idl_container(node: nodes.Element | None) -> nodes.Element | None:
    while node is not None and not is_idl_block(node):
        if isinstance(node, nodes.Element) and node.get("idl") and node.get("title"):
            return node
        node = node.parent
    return None


def _assign_dfn_for(block: nodes.literal_block, run: IdlRun) -> None:
    for elem in block.findall(nodes.Element):
        if elem is block or not elem.get("idl") or "dfn_for" in elem.attributes:
            continue
        parent = _closest_idl_container(elem.parent)
        if parent is not None:
            elem["dfn_for"] = parent["title"]
        if not run.definitions.is_registered(elem):
            run.definitions.register_definition(elem, [elem.get("title", "")])


def normalize_cite(block: nodes.Element, source_cite: str) -> None:
    holder = closest_cite_holder(block)
    cite = str(holder.get("cite", "")).strip()
    if not cite:
        holder["cite"] = source_cite
        return
    if not re.search(rf"\b{re.escape(source_cite)}\b", cite, flags=re.IGNORECASE):
        holder["cite"] = " ".join([source_cite, *cite.split()])


def render_idl_block(
    block: nodes.literal_block, run: IdlRun, index: int
) -> list[Definition]:
    try:
        parsed = parse(block.astext(), source_name=str(index))
    except IdlSyntaxError as exc:
        run.reporter.report_error(
            block,
            f"Failed to parse WebIDL: {exc.bare_message}.",
            exc.bare_message,
            exc.context,
            subtype="syntax",
        )
        return []

    for class_name in ("def", "idl"):
        if class_name not in block["classes"]:
            block["classes"].append(class_name)
    markup = IdlWriter(MarkupTemplates(run)).write(parsed)
    block.children = []
    block.extend(markup)
    # A rawsource that differs from the text keeps Sphinx from re-highlighting.
    block.rawsource = ""
    _assign_dfn_for(block, run)
    normalize_cite(block, run.source_cite)
    return parsed


def compile_idl_blocks(
    doctree: nodes.Node, run: IdlRun
) -> tuple[list[nodes.literal_block], list[list[Definition]]]:
    blocks = find_idl_blocks(doctree)
    trees = [render_idl_block(block, run, index) for index, block in enumerate(blocks)]
    if blocks:
        LOGGER.verbose(
            "idlspec: compiled %d idl block(s) in %s", len(blocks), run.docname
        )
    return blocks, trees


def validate_idl_blocks(
    blocks: list[nodes.literal_block], trees: list[list[Definition]], run: IdlRun
) -> None:
    for validation in validate(trees):
        detail = validation.context
        if validation.autofix is not None:
            validation.autofix()
            detail += f"\nTry fixing as:\n{write(trees[validation.source_index])}"
        run.reporter.report_error(
            blocks[validation.source_index],
            f"WebIDL validation error: {validation.bare_message}",
            validation.bare_message,
            detail,
            subtype="validation",
        )


def link_local_references(doctree: nodes.Node, run: IdlRun) -> int:
    """Point IDL references at definitions made in this document."""
    linked = 0
    for block in find_idl_blocks(doctree):
        for ref in block.findall(xref_node):
            if ref.get("refid") or ref.get("cite") or ref.get("lt"):
                continue
            if ref.get("xref_type") not in ("_IDL_", "interface"):
                continue
            target = next(
                (
                    match
                    for match in run.definitions.lookup(ref.astext())
                    if isinstance(match, dfn_node)
                    and not match.get("dfn_for")
                    and match["ids"]
                ),
                None,
            )
            if target is None:
                continue
            ref["refid"] = target["ids"][0]
            ref["classes"].append("internalDFN")
            linked += 1
    return linked


def process_document(doctree: nodes.Node, run: IdlRun) -> list[list[Definition]]:
    """Compile, validate and locally link every ``idl`` block of a document."""
    blocks, trees = compile_idl_blocks(doctree, run)
    if not blocks:
        return trees
    validate_idl_blocks(blocks, trees, run)
    link_local_references(doctree, run)
    return trees
