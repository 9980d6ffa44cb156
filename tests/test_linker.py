from __future__ import annotations

from docutils import nodes

from exts.idlspec.constants import OFFENDING_CLASS
from exts.idlspec.context import IdlRun
from exts.idlspec.idl_ast import Definition, ExtendedAttribute
from exts.idlspec.linker import define_idl_name
from exts.idlspec.nodes import dfn_node, xref_node


def test_existing_definition_is_linked_and_exported(run):
    prose = dfn_node("bar", "bar", dfn_for="Foo")
    run.definitions.register_definition(prose, ["bar"])
    op = Definition(type="operation", name="bar")

    link = define_idl_name("bar", op, "Foo", run)

    assert isinstance(link, xref_node)
    assert link["refid"] == "dom-foo-bar"
    assert link["link_for"] == "Foo"
    assert link["link_type"] == "method"
    assert "internalDFN" in link["classes"]
    assert isinstance(link[0], nodes.literal)
    assert prose["export"] is True
    assert prose["dfn_type"] == "method"
    assert run.definitions.lookup("Foo.bar()") == [prose]


def test_partial_reference_does_not_retag_definition(run):
    prose = dfn_node("Foo", "Foo", dfn_for="", dfn_type="")
    run.definitions.register_definition(prose, ["Foo"])
    partial = Definition(type="interface", name="Foo", partial=True)

    link = define_idl_name("Foo", partial, "", run)

    assert link["refid"] == "dom-foo"
    assert prose["dfn_type"] == ""


def test_default_tojson_links_to_the_canonical_term(run):
    op = Definition(
        type="operation", name="toJSON", ext_attrs=[ExtendedAttribute(name="Default")]
    )
    link = define_idl_name("toJSON", op, "Foo", run)
    assert isinstance(link, xref_node)
    assert link["lt"] == "default toJSON operation"
    assert link["link_type"] == "dfn"
    assert run.definitions.registered == []


def test_missing_definition_is_synthesized(run):
    attr = Definition(type="attribute", name="size")
    dfn = define_idl_name("size", attr, "Box", run)
    assert isinstance(dfn, dfn_node)
    assert dfn["ids"] == ["dom-box-size"]
    assert dfn["dfn_type"] == "attribute"
    assert dfn["export"] is True
    assert run.definitions.registered == [dfn]
    assert run.definitions.lookup("Box.size") == [dfn]
    assert run.reporter.records == []


def test_missing_definition_warns_without_auto_define(strict_run):
    op = Definition(type="operation", name="go")
    link = define_idl_name("go", op, "Car", strict_run)
    assert isinstance(link, xref_node)
    assert not link.get("refid")
    assert OFFENDING_CLASS in link["classes"]
    (warning,) = strict_run.reporter.by_subtype("missing-definition")
    assert warning.message == "Missing `dfn` for `Car`'s `go()` operation."
    assert warning.level == "warning"


def test_suppressed_warnings(strict_run):
    define_idl_name("T", Definition(type="typedef", name="T"), "", strict_run)
    partial = define_idl_name(
        "P", Definition(type="dictionary", name="P", partial=True), "", strict_run
    )
    assert partial["idl"] == "partial"
    assert strict_run.reporter.records == []


def test_partial_without_base_is_never_synthesized():
    run = IdlRun()
    link = define_idl_name("P", Definition(type="interface", name="P", partial=True), "", run)
    assert isinstance(link, xref_node)
    assert run.definitions.registered == []
