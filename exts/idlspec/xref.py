"""Resolve term occurrences against an external vocabulary in one batched lookup."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from docutils import nodes
from sphinx.util import logging

from .constants import INFORMATIVE_CLASS, OFFENDING_CLASS
from .diagnostics import DiagnosticReporter
from .nodes import xref_node
from .transport import XrefLookupError
from .types import ReferenceSets, TermOccurrence, XrefCandidate
from .utils import _norm_term, _split_specs
from .webidl import closest_cite_holder

LOGGER = logging.getLogger(__name__)

Lookup = Callable[[dict[str, Any]], Awaitable[dict[str, list[Any]]]]


def collect_term_occurrences(doctree: nodes.Node) -> list[xref_node]:
    return [ref for ref in doctree.findall(xref_node) if not ref.get("refid")]


def get_ref_map(elements: list[nodes.Element]) -> dict[str, list[TermOccurrence]]:
    ref_map: dict[str, list[TermOccurrence]] = {}
    for elem in elements:
        term = _norm_term(elem.get("lt") or elem.astext())
        holder = closest_cite_holder(elem)
        specs = _split_specs(str(holder.get("cite", "")))
        ref_map.setdefault(term, []).append(TermOccurrence(elem, term, specs))
    return ref_map


def create_xref_query(ref_map: dict[str, list[TermOccurrence]]) -> dict[str, Any]:
    keys = [
        {"term": term, "specs": list(occurrence.specs), "types": list(occurrence.types)}
        for term, occurrences in ref_map.items()
        for occurrence in occurrences
    ]
    return {"keys": keys}


def _flag(element: nodes.Element) -> None:
    if OFFENDING_CLASS not in element["classes"]:
        element["classes"].append(OFFENDING_CLASS)


def disambiguate(
    candidates: list[XrefCandidate],
    occurrence: TermOccurrence,
    reporter: DiagnosticReporter,
) -> XrefCandidate | None:
    if not candidates:
        return None
    elem = occurrence.element
    if len(candidates) == 1:
        candidate = candidates[0]
        if occurrence.specs and candidate.spec not in occurrence.specs:
            _flag(elem)
            reporter.log_warning(
                elem,
                f"No data for `{occurrence.term}` in {' '.join(occurrence.specs)}",
                subtype="xref",
            )
            return None
        return candidate
    _flag(elem)
    specs = ", ".join(candidate.spec for candidate in candidates)
    reporter.log_warning(
        elem, f"Ambiguity in data for `{occurrence.term}` ({specs})", subtype="xref"
    )
    return None


def _within_informative(element: nodes.Element) -> bool:
    node: nodes.Node | None = element
    while node is not None:
        if isinstance(node, nodes.Element) and INFORMATIVE_CLASS in node["classes"]:
            return True
        node = node.parent
    return False


def split_uri(uri: str) -> tuple[str, str]:
    _, slash, rest = uri.partition("/")
    path = rest if slash else uri
    cite_path, _, cite_frag = path.partition("#")
    return cite_path, cite_frag


def parse_candidates(results: Any) -> dict[str, list[XrefCandidate]]:
    """Convert a whole lookup response, raising before any element is touched."""
    if not isinstance(results, dict):
        raise XrefLookupError(
            f"xref lookup returned {type(results).__name__}, expected an object keyed by term"
        )
    parsed: dict[str, list[XrefCandidate]] = {}
    for term, raw_candidates in results.items():
        if raw_candidates is None:
            raw_candidates = []
        if not isinstance(raw_candidates, list):
            raise XrefLookupError(f"malformed candidate list for `{term}`")
        candidates: list[XrefCandidate] = []
        for item in raw_candidates:
            if isinstance(item, XrefCandidate):
                candidates.append(item)
            elif (
                isinstance(item, dict)
                and isinstance(item.get("uri"), str)
                and isinstance(item.get("spec"), str)
                and isinstance(item.get("for", []), list)
            ):
                candidates.append(XrefCandidate.from_dict(item))
            else:
                raise XrefLookupError(f"malformed candidate for `{term}`: {item!r}")
        parsed[str(term)] = candidates
    return parsed


def add_cite_to_terms(
    results: dict[str, list[Any]],
    ref_map: dict[str, list[TermOccurrence]],
    references: ReferenceSets,
    reporter: DiagnosticReporter,
) -> int:
    annotated = 0
    for term, candidates in parse_candidates(results).items():
        for occurrence in ref_map.get(term, []):
            result = disambiguate(candidates, occurrence, reporter)
            if result is None:
                continue
            elem = occurrence.element
            if result.normative:
                references.normative.add(result.spec)
            elif _within_informative(elem):
                references.informative.add(result.spec)
            else:
                reporter.log_warning(
                    elem,
                    "Adding informative reference to normative section",
                    subtype="reference-context",
                )
            cite_path, cite_frag = split_uri(result.uri)
            elem["cite"] = result.spec
            elem["cite_path"] = cite_path
            elem["cite_frag"] = cite_frag
            annotated += 1
    return annotated


async def resolve_xrefs(
    doctree: nodes.Node,
    lookup: Lookup,
    references: ReferenceSets,
    reporter: DiagnosticReporter,
) -> int:
    ref_map = get_ref_map(collect_term_occurrences(doctree))
    if not ref_map:
        return 0
    query = create_xref_query(ref_map)
    try:
        results = parse_candidates(await lookup(query))
    except XrefLookupError as exc:
        reporter.log_warning(None, str(exc), subtype="xref")
        return 0
    annotated = add_cite_to_terms(results, ref_map, references, reporter)
    LOGGER.verbose(
        "idlspec: annotated %d of %d xref occurrence(s)",
        annotated,
        len(query["keys"]),
    )
    return annotated
