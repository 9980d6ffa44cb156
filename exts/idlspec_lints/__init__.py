from __future__ import annotations

from pathlib import Path
from typing import Any

from sphinx.application import Sphinx
from sphinx.environment import BuildEnvironment
from sphinx.errors import ExtensionError
from sphinx.util import logging

from .anchor_check import _find_duplicate_anchors
from .common import _ensure_env, _write_json, _write_text
from .diagnostic_check import _group_diagnostics

LOGGER = logging.getLogger(__name__)


def _run_lints(app: Sphinx, env: BuildEnvironment) -> None:
    _ensure_env(env)
    findings: dict[str, list[str]] = {
        **_group_diagnostics(env),
        "anchor-uniqueness": _find_duplicate_anchors(env),
        "build-errors": list(env.idlspec_build_errors),
    }

    lint_root_raw = str(app.config.idlspec_lint_root).strip()
    if lint_root_raw:
        lint_root = Path(lint_root_raw)
        for name, values in findings.items():
            _write_text(lint_root / f"{name}-lint.log", "\n".join(values) + "\n")
        summary = {
            "lint_counts": {key: len(value) for key, value in findings.items()},
            "status": (
                "pass" if all(not values for values in findings.values()) else "fail"
            ),
            "strict": bool(app.config.idlspec_lints_strict),
        }
        _write_json(lint_root / "lint-summary.json", summary)

    all_findings = [item for values in findings.values() for item in values]
    if not all_findings:
        return
    LOGGER.info("idlspec: %d lint finding(s)", len(all_findings))
    if app.config.idlspec_lints_strict:
        sample = "\n- " + "\n- ".join(all_findings[:20])
        raise ExtensionError(f"env-check-consistency failed:{sample}")


def setup(app: Sphinx) -> dict[str, Any]:
    app.add_config_value("idlspec_lint_root", "", "env")
    app.add_config_value("idlspec_lints_strict", False, "env")
    app.connect("env-check-consistency", _run_lints)
    return {
        "version": "0.1",
        "parallel_read_safe": True,
        "parallel_write_safe": True,
        "env_version": 1,
    }
