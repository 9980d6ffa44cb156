"""Lookup transports for batched xref queries.

Both transports answer ``lookup(query)`` where ``query`` is
``{"keys": [{"term": ..., "specs": [...], "types": [...]}, ...]}`` and the
result maps each queried term to a list of candidate dicts
(``uri``, ``spec``, ``type``, ``normative``, ``for``).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import yaml
from jsonschema import Draft202012Validator

from .utils import _norm_term, _read_data_file

SCHEMA_DIR = Path(__file__).parent / "schema"
DATABASE_SCHEMA_PATH = SCHEMA_DIR / "xref-database.schema.json"
RESPONSE_SCHEMA_PATH = SCHEMA_DIR / "xref-response.schema.json"


class XrefLookupError(RuntimeError):
    pass


class XrefDatabaseError(ValueError):
    pass


def _schema_errors(payload: Any, schema_path: Path) -> list[str]:
    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    validator = Draft202012Validator(schema)
    errors = sorted(
        validator.iter_errors(payload), key=lambda err: list(err.absolute_path)
    )
    return [
        f"{'/'.join(str(part) for part in err.absolute_path) or '<root>'}: {err.message}"
        for err in errors
    ]


def validate_database(
    payload: Any, schema_path: Path = DATABASE_SCHEMA_PATH
) -> list[str]:
    return _schema_errors(payload, schema_path)


def _matches(candidate: dict[str, Any], key: dict[str, Any]) -> bool:
    specs = key.get("specs") or []
    types = key.get("types") or []
    if specs and candidate.get("spec") not in specs:
        return False
    if types and candidate.get("type") not in types:
        return False
    return True


class XrefDatabase:
    """Term database answering queries locally."""

    def __init__(self, terms: dict[str, list[dict[str, Any]]]) -> None:
        self.terms: dict[str, list[dict[str, Any]]] = {}
        for term, candidates in terms.items():
            self.terms.setdefault(_norm_term(term), []).extend(candidates)

    @classmethod
    def load(cls, path: Path) -> XrefDatabase:
        try:
            payload = _read_data_file(path)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
            raise XrefDatabaseError(
                f"failed to read xref database {path}: {exc}"
            ) from exc
        errors = validate_database(payload)
        if errors:
            sample = "\n- " + "\n- ".join(errors[:10])
            raise XrefDatabaseError(f"invalid xref database {path}:{sample}")
        return cls(payload["terms"])

    def search(self, query: dict[str, Any]) -> dict[str, list[dict[str, Any]]]:
        result: dict[str, list[dict[str, Any]]] = {}
        for key in query.get("keys", []):
            term = key["term"]
            found = result.setdefault(term, [])
            for candidate in self.terms.get(term, []):
                if not _matches(candidate, key):
                    continue
                if any(item["uri"] == candidate["uri"] for item in found):
                    continue
                found.append(candidate)
        return result

    async def lookup(self, query: dict[str, Any]) -> dict[str, list[dict[str, Any]]]:
        return self.search(query)


class HttpXrefClient:
    """POSTs the batched query to a remote xref service."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def lookup(self, query: dict[str, Any]) -> dict[str, list[dict[str, Any]]]:
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout), transport=self._transport
            ) as client:
                response = await client.post(self.url, json=query)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise XrefLookupError(f"xref lookup against {self.url} failed: {exc}") from exc

        errors = _schema_errors(payload, RESPONSE_SCHEMA_PATH)
        if errors:
            sample = "\n- " + "\n- ".join(errors[:10])
            raise XrefLookupError(
                f"xref lookup against {self.url} returned a malformed response:{sample}"
            )
        return {
            str(term): list(candidates or [])
            for term, candidates in payload.items()
        }
