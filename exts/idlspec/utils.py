from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

import yaml


def _slug(value: str) -> str:
    lowered = value.strip().lower()
    slug = re.sub(r"[^a-z0-9]+", "-", lowered)
    slug = re.sub(r"-{2,}", "-", slug)
    return slug.strip("-")


def _norm_term(value: str) -> str:
    return " ".join(value.split()).lower()


def _split_specs(value: str) -> list[str]:
    return value.split()


def _read_jsonc(path: Path) -> Any:
    raw = path.read_text(encoding="utf-8")
    stripped = re.sub(r"^\s*//.*$", "", raw, flags=re.MULTILINE)
    return json.loads(stripped)


def _read_data_file(path: Path) -> Any:
    if path.suffix in {".yaml", ".yml"}:
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return _read_jsonc(path)
