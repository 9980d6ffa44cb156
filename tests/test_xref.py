from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
import pytest
from docutils import nodes
from docutils.utils import new_document

from exts.idlspec.constants import OFFENDING_CLASS
from exts.idlspec.diagnostics import DiagnosticReporter
from exts.idlspec.nodes import cite_container, xref_node
from exts.idlspec.transport import HttpXrefClient, XrefDatabase, XrefLookupError
from exts.idlspec.types import ReferenceSets, TermOccurrence, XrefCandidate
from exts.idlspec.xref import (
    add_cite_to_terms,
    create_xref_query,
    disambiguate,
    get_ref_map,
    parse_candidates,
    resolve_xrefs,
    split_uri,
)


def _section(document: nodes.document, cite: str, *terms: str, classes=()) -> list[xref_node]:
    container = cite_container(cite=cite)
    container["classes"].extend(classes)
    paragraph = nodes.paragraph()
    refs = [xref_node("", term) for term in terms]
    for ref in refs:
        paragraph += ref
    container += paragraph
    document += container
    return refs


def _occurrence(specs: list[str]) -> TermOccurrence:
    return TermOccurrence(xref_node("", "widget"), "widget", specs)


def test_ref_map_groups_normalised_terms():
    document = new_document("test.rst")
    first, second = _section(document, "A B", "Foo", "foo ")
    (third,) = _section(document, "", "Bar")
    third["lt"] = "Other  Thing"

    ref_map = get_ref_map([first, second, third])

    assert list(ref_map) == ["foo", "other thing"]
    assert [occ.element for occ in ref_map["foo"]] == [first, second]
    assert ref_map["foo"][0].specs == ["A", "B"]
    assert ref_map["other thing"][0].specs == []


def test_query_keeps_one_key_per_occurrence():
    document = new_document("test.rst")
    refs = _section(document, "A", "foo", "Foo")
    query = create_xref_query(get_ref_map(refs))
    assert query == {
        "keys": [
            {"term": "foo", "specs": ["A"], "types": []},
            {"term": "foo", "specs": ["A"], "types": []},
        ]
    }


def test_disambiguate_rules():
    reporter = DiagnosticReporter("test")
    candidate = XrefCandidate(uri="a/x.html#w", spec="A", normative=True)
    other = XrefCandidate(uri="b/y.html#w", spec="B", normative=True)

    assert disambiguate([], _occurrence(["A"]), reporter) is None
    assert disambiguate([candidate], _occurrence(["A"]), reporter) is candidate
    assert disambiguate([candidate], _occurrence([]), reporter) is candidate
    assert reporter.records == []

    mismatch = _occurrence(["B"])
    assert disambiguate([candidate], mismatch, reporter) is None
    assert OFFENDING_CLASS in mismatch.element["classes"]
    assert reporter.records[-1].message == "No data for `widget` in B"

    ambiguous = _occurrence([])
    assert disambiguate([candidate, other], ambiguous, reporter) is None
    assert OFFENDING_CLASS in ambiguous.element["classes"]
    assert reporter.records[-1].message.startswith("Ambiguity in data for `widget`")
    assert {record.subtype for record in reporter.records} == {"xref"}


@pytest.mark.parametrize(
    "uri, expected",
    [
        ("example.org/widgets.html#widget", ("widgets.html", "widget")),
        ("example.org/a/b.html", ("a/b.html", "")),
        ("index.html#frag", ("index.html", "frag")),
    ],
)
def test_split_uri(uri, expected):
    assert split_uri(uri) == expected


def test_cite_annotation_tracks_reference_sets():
    document = new_document("test.rst")
    (normative,) = _section(document, "", "Strong")
    (informative,) = _section(document, "", "Soft", classes=["informative"])
    (misplaced,) = _section(document, "", "Misplaced")
    ref_map = get_ref_map([normative, informative, misplaced])
    results = {
        "strong": [{"uri": "s.org/s.html#strong", "spec": "S", "normative": True}],
        "soft": [{"uri": "i.org/i.html#soft", "spec": "I", "normative": False}],
        "misplaced": [{"uri": "m.org/m.html#m", "spec": "M"}],
    }
    references = ReferenceSets()
    reporter = DiagnosticReporter("test")

    assert add_cite_to_terms(results, ref_map, references, reporter) == 3

    assert references.normative == {"S"}
    assert references.informative == {"I"}
    assert normative["cite"] == "S"
    assert normative["cite_path"] == "s.html"
    assert normative["cite_frag"] == "strong"
    assert misplaced["cite"] == "M"
    (record,) = reporter.records
    assert record.subtype == "reference-context"
    assert record.message == "Adding informative reference to normative section"


def test_resolve_against_database(tmp_path: Path):
    path = tmp_path / "db.json"
    path.write_text(
        json.dumps(
            {
                "schema_version": 1,
                "terms": {
                    "widget": [
                        {
                            "uri": "example.org/widgets.html#widget",
                            "spec": "A",
                            "normative": True,
                        }
                    ]
                },
            }
        ),
        encoding="utf-8",
    )
    database = XrefDatabase.load(path)
    document = new_document("test.rst")
    (in_a,) = _section(document, "A", "widget")
    (in_b,) = _section(document, "B", "widget")
    references = ReferenceSets()
    reporter = DiagnosticReporter("test")

    annotated = asyncio.run(
        resolve_xrefs(document, database.lookup, references, reporter)
    )

    assert annotated == 1
    assert in_a["cite"] == "A"
    assert in_a["cite_path"] == "widgets.html"
    assert in_a["cite_frag"] == "widget"
    assert "cite" not in in_b.attributes
    assert OFFENDING_CLASS in in_b["classes"]
    assert references.normative == {"A"}


def test_failed_lookup_annotates_nothing():
    async def failing(query):
        raise XrefLookupError("service unavailable")

    document = new_document("test.rst")
    (ref,) = _section(document, "A", "widget")
    reporter = DiagnosticReporter("test")

    annotated = asyncio.run(resolve_xrefs(document, failing, ReferenceSets(), reporter))

    assert annotated == 0
    assert "cite" not in ref.attributes
    assert reporter.records[0].message == "service unavailable"


def test_linked_references_are_not_queried():
    async def unexpected(query):
        raise AssertionError(query)

    document = new_document("test.rst")
    (ref,) = _section(document, "A", "widget")
    ref["refid"] = "widget"

    assert asyncio.run(
        resolve_xrefs(document, unexpected, ReferenceSets(), DiagnosticReporter())
    ) == 0


def test_malformed_response_annotates_nothing():
    payload = {
        "alpha": [{"uri": "a.org/a.html#alpha", "spec": "A", "normative": True}],
        "beta": ["not-a-candidate"],
    }
    client = HttpXrefClient(
        "https://xref.test/search",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)),
    )
    document = new_document("test.rst")
    alpha, beta = _section(document, "A", "alpha", "beta")
    references = ReferenceSets()
    reporter = DiagnosticReporter("test")

    annotated = asyncio.run(resolve_xrefs(document, client.lookup, references, reporter))

    assert annotated == 0
    assert "cite" not in alpha.attributes
    assert "cite" not in beta.attributes
    assert references.normative == set()
    assert [record.subtype for record in reporter.records] == ["xref"]


def test_malformed_candidates_are_rejected_before_annotation():
    async def lookup(query):
        return {
            "alpha": [{"uri": "a.org/a.html#alpha", "spec": "A", "normative": True}],
            "beta": [{"uri": "b.org/b.html#beta"}],
        }

    document = new_document("test.rst")
    alpha, _ = _section(document, "A", "alpha", "beta")
    references = ReferenceSets()

    annotated = asyncio.run(
        resolve_xrefs(document, lookup, references, DiagnosticReporter("test"))
    )

    assert annotated == 0
    assert "cite" not in alpha.attributes
    assert references.normative == set()


@pytest.mark.parametrize(
    "results",
    [
        [],
        {"alpha": "a.org/a.html"},
        {"alpha": [{"uri": "a.org/a.html", "spec": "A", "for": "Foo"}]},
    ],
)
def test_parse_candidates_rejects_bad_shapes(results):
    with pytest.raises(XrefLookupError):
        parse_candidates(results)


def test_one_lookup_serves_every_occurrence():
    queries: list[dict] = []

    async def lookup(query):
        queries.append(query)
        return {
            "alpha": [{"uri": "a.org/a.html#alpha", "spec": "A", "normative": True}],
            "beta": [{"uri": "b.org/b.html#beta", "spec": "B", "normative": True}],
        }

    document = new_document("test.rst")
    first = _section(document, "A", "alpha", "beta")
    second = _section(document, "A B", "Alpha", "beta")
    references = ReferenceSets()
    reporter = DiagnosticReporter("test")

    annotated = asyncio.run(resolve_xrefs(document, lookup, references, reporter))

    assert len(queries) == 1
    assert [key["term"] for key in queries[0]["keys"]] == ["alpha", "alpha", "beta", "beta"]
    assert annotated == 3
    assert [ref.get("cite") for ref in first] == ["A", None]
    assert [ref.get("cite") for ref in second] == ["A", "B"]
    assert OFFENDING_CLASS in first[1]["classes"]
    assert references.normative == {"A", "B"}
