"""Diagnostics collaborator: flags offending elements and logs through Sphinx."""

from __future__ import annotations

from docutils import nodes
from sphinx.util import logging

from .constants import OFFENDING_CLASS
from .types import Diagnostic

LOGGER = logging.getLogger(__name__)


class DiagnosticReporter:
    def __init__(
        self, docname: str = "", records: list[Diagnostic] | None = None
    ) -> None:
        self.docname = docname
        self.records: list[Diagnostic] = records if records is not None else []

    def report_error(
        self,
        element: nodes.Element,
        message: str,
        short_message: str = "",
        detail: str = "",
        *,
        subtype: str = "validation",
    ) -> Diagnostic:
        self._flag(element, short_message or message)
        return self._emit("error", subtype, element, message, short_message, detail)

    def report_warning(
        self,
        element: nodes.Element,
        message: str,
        short_message: str = "",
        *,
        subtype: str = "missing-definition",
    ) -> Diagnostic:
        self._flag(element, short_message or message)
        return self._emit("warning", subtype, element, message, short_message, "")

    def log_warning(
        self, element: nodes.Element | None, message: str, *, subtype: str
    ) -> Diagnostic:
        return self._emit("warning", subtype, element, message, "", "")

    def by_subtype(self, subtype: str) -> list[Diagnostic]:
        return [record for record in self.records if record.subtype == subtype]

    def _flag(self, element: nodes.Element, message: str) -> None:
        if OFFENDING_CLASS not in element["classes"]:
            element["classes"].append(OFFENDING_CLASS)
        element["diagnostic"] = message

    def _emit(
        self,
        level: str,
        subtype: str,
        element: nodes.Element | None,
        message: str,
        short_message: str,
        detail: str,
    ) -> Diagnostic:
        line = element.line if element is not None else None
        diagnostic = Diagnostic(
            level=level,
            subtype=subtype,
            message=message,
            short_message=short_message,
            detail=detail,
            doc=self.docname,
            line=line,
        )
        self.records.append(diagnostic)
        text = f"{message}\n{detail}" if detail else message
        location = element if element is not None and element.source else None
        if location is None and self.docname:
            location = (self.docname, line)
        LOGGER.warning(text, location=location, type="idlspec", subtype=subtype)
        return diagnostic
