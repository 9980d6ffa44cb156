from __future__ import annotations

from docutils import nodes
from docutils.utils import new_document

from conftest import dfns_in, idl_document, span_ids
from exts.idlspec.constants import OFFENDING_CLASS
from exts.idlspec.context import IdlRun
from exts.idlspec.idl_ast import Definition
from exts.idlspec.markup import idl_class_name
from exts.idlspec.nodes import xref_node
from exts.idlspec.webidl import process_document


def _refs(node: nodes.Node, text: str) -> list[xref_node]:
    return [ref for ref in node.findall(xref_node) if ref.astext() == text]


def test_overloads_get_one_canonical_definition(run):
    document = idl_document("interface Foo { void bar(); void bar(long x); };")
    process_document(document, run)

    ids = span_ids(document)
    assert "idl-def-foo" in ids
    assert "idl-def-foo-bar" in ids
    assert "idl-def-foo-bar!overload-1" in ids

    dfns = dfns_in(document)
    assert [dfn["ids"] for dfn in dfns if dfn.astext() == "Foo"] == [["dom-foo"]]
    assert [dfn["ids"] for dfn in dfns if dfn.get("idl") == "operation"] == [
        ["dom-foo-bar"],
        ["dom-foo-bar!overload-1"],
    ]
    registered = run.definitions.registered
    assert len(registered) == len({id(elem) for elem in registered})


def test_unresolvable_reference_warns_once(strict_run):
    document = idl_document("[Exposed=Window] interface Baz {};")
    process_document(document, strict_run)

    warnings = [r for r in strict_run.reporter.records if r.level == "warning"]
    assert len(warnings) == 1
    assert warnings[0].message == "Missing `dfn` for `Baz` interface."
    (marker,) = _refs(document, "Baz")
    assert not marker.get("refid")
    assert OFFENDING_CLASS in marker["classes"]
    assert dfns_in(document) == []


def test_syntax_error_abandons_only_that_block(run):
    document = idl_document("interface {", "[Exposed=Window] interface Ok {};")
    broken, ok = document.children
    process_document(document, run)

    (error,) = run.reporter.by_subtype("syntax")
    assert error.message == "Failed to parse WebIDL: Missing name in interface."
    assert error.detail.endswith("^")
    assert OFFENDING_CLASS in broken["classes"]
    assert broken.astext() == "interface {"
    assert "def" in ok["classes"]
    assert ok.rawsource == ""
    assert [dfn.astext() for dfn in dfns_in(ok)] == ["Ok"]


def test_citation_defaults_and_extends():
    for cite, expected in (("", "WebIDL"), ("HTML", "WebIDL HTML"), ("webidl DOM", "webidl DOM")):
        document = idl_document("[Exposed=Window] interface A {};", cite=cite)
        process_document(document, IdlRun())
        assert document["cite"] == expected


def test_block_citation_is_normalised_on_the_block(run):
    document = new_document("test.rst")
    text = "[Exposed=Window] interface A {};"
    block = nodes.literal_block(text, text, classes=["idl"], cite="DOM")
    document += block
    process_document(document, run)
    assert block["cite"] == "WebIDL DOM"
    assert "cite" not in document.attributes


def test_members_are_assigned_their_container(run):
    document = idl_document("[Exposed=Window] interface Foo { attribute long x; };")
    process_document(document, run)
    (member,) = [
        span for span in document.findall(nodes.inline) if span.get("idl") == "attribute"
    ]
    assert member["dfn_for"] == "Foo"
    assert "idlAttribute" in member["classes"]
    assert run.definitions.is_registered(member)


def test_validation_autofix_is_previewed(run):
    document = idl_document("interface Foo {};")
    process_document(document, run)
    (error,) = run.reporter.by_subtype("validation")
    assert error.message.startswith(
        "WebIDL validation error: Interfaces must have `[Exposed]`"
    )
    assert error.detail.endswith("Try fixing as:\n[Exposed=Window]\ninterface Foo {\n};")


def test_local_references_link_to_top_level_definitions(run):
    document = idl_document(
        "[Exposed=Window] interface A {};",
        "[Exposed=Window] interface B { attribute A a; };",
    )
    process_document(document, run)
    (ref,) = _refs(document, "A")
    assert ref["refid"] == "dom-a"
    assert "internalDFN" in ref["classes"]


def test_special_references(run):
    document = idl_document(
        "[Exposed=(Window,Worker,ServiceWorker)] interface W {\n"
        "  attribute object o;\n"
        "  Promise<sequence<long>> run();\n"
        "};"
    )
    process_document(document, run)

    (window,) = _refs(document, "Window")
    assert (window["xref_type"], window["cite"]) == ("interface", "HTML")
    (worker,) = _refs(document, "Worker")
    assert (worker["lt"], worker["cite"]) == ("WorkerGlobalScope", "HTML")
    (service,) = _refs(document, "ServiceWorker")
    assert service["lt"] == "ServiceWorkerGlobalScope"
    assert not service.get("cite")
    (obj,) = _refs(document, "object")
    assert (obj["xref_type"], obj["cite"]) == ("interface", "WebIDL")
    (promise,) = _refs(document, "Promise")
    assert (promise["xref_type"], promise["cite"]) == ("interface", "WebIDL")
    (sequence,) = _refs(document, "sequence")
    assert sequence["xref_type"] == "dfn"


def test_class_names():
    expected = {
        "interface": "idlInterface",
        "interface mixin": "idlInterfaceMixin",
        "callback interface": "idlInterface",
        "operation": "idlMethod",
        "field": "idlMember",
        "enum-value": "idlEnumItem",
        "callback": "idlCallback",
        "attribute": "idlAttribute",
        "dictionary": "idlDictionary",
    }
    for type_, class_name in expected.items():
        assert idl_class_name(Definition(type=type_)) == class_name
