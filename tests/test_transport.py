from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
import pytest

from exts.idlspec.transport import (
    HttpXrefClient,
    XrefDatabase,
    XrefDatabaseError,
    XrefLookupError,
    validate_database,
)

QUERY = {"keys": [{"term": "widget", "specs": [], "types": []}]}


def test_load_jsonc_database(tmp_path: Path):
    path = tmp_path / "terms.json"
    path.write_text(
        "// vocabulary\n"
        + json.dumps(
            {
                "schema_version": 1,
                "terms": {
                    "Event  Loop": [
                        {"uri": "html.spec/webappapis.html#event-loop", "spec": "HTML"}
                    ]
                },
            }
        ),
        encoding="utf-8",
    )
    database = XrefDatabase.load(path)
    assert list(database.terms) == ["event loop"]


def test_load_yaml_database(tmp_path: Path):
    path = tmp_path / "terms.yaml"
    path.write_text(
        "schema_version: 1\n"
        "terms:\n"
        "  widget:\n"
        "    - uri: example.org/widgets.html#widget\n"
        "      spec: A\n"
        "      type: interface\n"
        "      normative: true\n",
        encoding="utf-8",
    )
    database = XrefDatabase.load(path)
    assert database.terms["widget"][0]["type"] == "interface"


def test_invalid_database_is_rejected(tmp_path: Path):
    path = tmp_path / "terms.json"
    path.write_text(
        json.dumps({"schema_version": 1, "terms": {"widget": [{"uri": ""}]}}),
        encoding="utf-8",
    )
    with pytest.raises(XrefDatabaseError, match="invalid xref database"):
        XrefDatabase.load(path)


def test_unreadable_database_is_rejected(tmp_path: Path):
    with pytest.raises(XrefDatabaseError, match="failed to read"):
        XrefDatabase.load(tmp_path / "missing.json")


def test_validate_database_reports_paths():
    errors = validate_database({"schema_version": 2, "terms": {}})
    assert errors == ["schema_version: 1 was expected"]


def test_search_filters_and_dedupes():
    database = XrefDatabase(
        {
            "widget": [
                {"uri": "a/w.html#w", "spec": "A", "type": "interface"},
                {"uri": "a/w.html#w", "spec": "A", "type": "interface"},
                {"uri": "b/w.html#w", "spec": "B", "type": "dfn"},
            ]
        }
    )
    result = database.search(
        {
            "keys": [
                {"term": "widget", "specs": ["A"], "types": []},
                {"term": "widget", "specs": [], "types": ["dfn"]},
                {"term": "gadget", "specs": [], "types": []},
            ]
        }
    )
    assert [item["uri"] for item in result["widget"]] == ["a/w.html#w", "b/w.html#w"]
    assert result["gadget"] == []


def test_http_client_posts_query():
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(
            200, json={"widget": [{"uri": "a/w.html#w", "spec": "A"}], "gadget": None}
        )

    client = HttpXrefClient(
        "https://xref.test/search", transport=httpx.MockTransport(handler)
    )
    result = asyncio.run(client.lookup(QUERY))

    assert seen == [QUERY]
    assert result == {"widget": [{"uri": "a/w.html#w", "spec": "A"}], "gadget": []}


def test_http_client_raises_on_server_error():
    client = HttpXrefClient(
        "https://xref.test/search",
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )
    with pytest.raises(XrefLookupError, match="failed"):
        asyncio.run(client.lookup(QUERY))


def test_http_client_rejects_non_object_payload():
    client = HttpXrefClient(
        "https://xref.test/search",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[1])),
    )
    with pytest.raises(XrefLookupError, match="malformed response"):
        asyncio.run(client.lookup(QUERY))


def test_http_client_rejects_malformed_candidates():
    payload = {
        "alpha": [{"uri": "a/w.html#alpha", "spec": "A", "normative": True}],
        "beta": ["not-a-candidate"],
    }
    client = HttpXrefClient(
        "https://xref.test/search",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)),
    )
    with pytest.raises(XrefLookupError, match="beta/0"):
        asyncio.run(client.lookup(QUERY))
