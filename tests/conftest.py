from __future__ import annotations

from pathlib import Path

import pytest
from docutils import nodes
from docutils.utils import new_document

from exts.idlspec.context import IdlRun
from exts.idlspec.nodes import dfn_node


def idl_document(*texts: str, cite: str = "") -> nodes.document:
    document = new_document("test.rst")
    if cite:
        document["cite"] = cite
    for text in texts:
        document += nodes.literal_block(text, text, classes=["idl"])
    return document


def dfns_in(node: nodes.Node) -> list[dfn_node]:
    return list(node.findall(dfn_node))


def span_ids(node: nodes.Node) -> list[str]:
    return [
        anchor
        for elem in node.findall(nodes.inline)
        if elem.get("idl")
        for anchor in elem["ids"]
    ]


@pytest.fixture
def run() -> IdlRun:
    return IdlRun(docname="test")


@pytest.fixture
def strict_run() -> IdlRun:
    return IdlRun(docname="test", auto_define=False)


@pytest.fixture
def write_project(tmp_path: Path):
    def _write(pages: dict[str, str], conf_extra: str = "") -> Path:
        srcdir = tmp_path / "src"
        srcdir.mkdir(exist_ok=True)
        conf = "\n".join(
            [
                'extensions = ["exts.idlspec", "exts.idlspec_lints"]',
                'master_doc = "index"',
                'exclude_patterns = ["_build"]',
                conf_extra,
            ]
        )
        (srcdir / "conf.py").write_text(conf + "\n", encoding="utf-8")
        for name, text in pages.items():
            (srcdir / f"{name}.rst").write_text(text, encoding="utf-8")
        return srcdir

    return _write
