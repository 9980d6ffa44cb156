from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from sphinx.environment import BuildEnvironment


def _ensure_env(env: BuildEnvironment) -> None:
    if not hasattr(env, "idlspec_diagnostics"):
        env.idlspec_diagnostics = {}
    if not hasattr(env, "idlspec_anchors"):
        env.idlspec_anchors = {}
    if not hasattr(env, "idlspec_build_errors"):
        env.idlspec_build_errors = []


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _write_json(path: Path, value: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(value, indent=2, sort_keys=True) + "\n", encoding="utf-8"
    )
