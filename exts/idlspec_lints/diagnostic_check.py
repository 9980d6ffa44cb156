from __future__ import annotations

from sphinx.environment import BuildEnvironment

from exts.idlspec.constants import DIAGNOSTIC_SUBTYPES


def _group_diagnostics(env: BuildEnvironment) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {subtype: [] for subtype in DIAGNOSTIC_SUBTYPES}
    for docname in sorted(env.idlspec_diagnostics):
        for record in env.idlspec_diagnostics[docname]:
            where = f"{docname}:{record.line}" if record.line else docname
            grouped.setdefault(record.subtype, []).append(
                f"{where}: {record.level}: {record.message}"
            )
    return grouped
