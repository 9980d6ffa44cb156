from __future__ import annotations

import pytest

from exts.idlspec.idl_ast import Definition
from exts.idlspec.idl_parser import parse
from exts.idlspec.idl_writer import IdlWriter, TextTemplates, write

CANONICAL = """// Entry point.
[Exposed=Window]
interface Foo : Bar {
  constructor(DOMString name);
  const unsigned short ONE = 1;
  // The name.
  readonly attribute DOMString name;
  static undefined go(optional FooInit init = {}, long... rest);
  getter any (unsigned long index);
  stringifier;
  iterable<DOMString>;
};

dictionary FooInit {
  required (DOMString or sequence<long>)? value;
  boolean flag = false;
};

enum Mode {
  "",
  "fast"
};

typedef Promise<undefined> Ready;

callback Done = undefined (any result);

Foo includes Mixin;"""


def test_canonical_text_is_reproduced():
    assert write(parse(CANONICAL)) == CANONICAL


def test_writer_normalises_spacing():
    text = "interface   Foo{attribute long x;void y( long a,long b );};"
    assert write(parse(text)) == (
        "interface Foo {\n"
        "  attribute long x;\n"
        "  void y(long a, long b);\n"
        "};"
    )


def test_templates_see_names_and_references():
    seen: list[tuple[str, str]] = []

    class Recording(TextTemplates):
        def name(self, escaped, data, parent):
            seen.append(("name", escaped))
            return escaped

        def reference(self, wrapped, unescaped, context):
            seen.append(("reference", unescaped))
            return wrapped

    IdlWriter(Recording()).write(parse("[Exposed=Window] interface A : B { C d(); };"))
    assert seen == [
        ("reference", "Window"),
        ("name", "A"),
        ("reference", "B"),
        ("reference", "C"),
        ("name", "d"),
    ]


def test_unknown_top_level_type_is_rejected():
    with pytest.raises(ValueError):
        write([Definition(type="operation", name="x")])
