from __future__ import annotations

from dataclasses import dataclass, field

from .constants import SOURCE_CITE
from .definitions import DefinitionMap
from .diagnostics import DiagnosticReporter
from .names import IdlNameMap


@dataclass
class IdlRun:
    """State owned by one document-processing run."""

    docname: str = ""
    reporter: DiagnosticReporter = field(default_factory=DiagnosticReporter)
    definitions: DefinitionMap | None = None
    names: IdlNameMap = field(default_factory=IdlNameMap)
    source_cite: str = SOURCE_CITE
    auto_define: bool = True

    def __post_init__(self) -> None:
        if self.definitions is None:
            self.definitions = DefinitionMap(self.reporter)
