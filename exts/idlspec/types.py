from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from docutils import nodes


@dataclass(frozen=True)
class ResolvedName:
    name: str
    anchor_id: str


@dataclass
class Diagnostic:
    level: str
    subtype: str
    message: str
    short_message: str = ""
    detail: str = ""
    doc: str = ""
    line: int | None = None

    def to_record(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "subtype": self.subtype,
            "message": self.message,
            "short_message": self.short_message,
            "detail": self.detail,
            "doc": self.doc,
            "line": self.line,
        }


@dataclass
class TermOccurrence:
    element: nodes.Element
    term: str
    specs: list[str]
    types: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class XrefCandidate:
    uri: str
    spec: str
    type: str = ""
    normative: bool = False
    for_: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> XrefCandidate:
        return cls(
            uri=str(payload.get("uri", "")),
            spec=str(payload.get("spec", "")),
            type=str(payload.get("type", "")),
            normative=bool(payload.get("normative", False)),
            for_=tuple(str(item) for item in payload.get("for", []) or []),
        )


@dataclass
class ReferenceSets:
    normative: set[str] = field(default_factory=set)
    informative: set[str] = field(default_factory=set)
