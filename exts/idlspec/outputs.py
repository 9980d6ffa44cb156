from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from sphinx.application import Sphinx
from sphinx.environment import BuildEnvironment
from sphinx.util import logging

from .record_store import _ensure_env, _record_error
from .transport import SCHEMA_DIR

LOGGER = logging.getLogger(__name__)


def _write_json(path: Path, value: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(value, indent=2, sort_keys=True) + "\n", encoding="utf-8"
    )


def _definitions_schema_path(app: Sphinx) -> Path:
    schema_path_raw = str(app.config.idlspec_definitions_schema_path).strip()
    if schema_path_raw:
        return Path(schema_path_raw)
    return SCHEMA_DIR / "idl-definitions.schema.json"


def _validate_definitions(
    env: BuildEnvironment, schema_path: Path, payload: dict[str, Any]
) -> None:
    if not schema_path.exists():
        _record_error(env, f"idl-definitions schema file missing: {schema_path}")
        return
    try:
        schema = json.loads(schema_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        _record_error(env, f"idl-definitions schema could not be read: {exc}")
        return
    validator = Draft202012Validator(schema)
    errors = sorted(
        validator.iter_errors(payload), key=lambda err: list(err.absolute_path)
    )
    for err in errors:
        _record_error(env, f"idl-definitions schema validation error: {err.message}")


def _emit_idl_outputs(app: Sphinx, env: BuildEnvironment) -> None:
    _ensure_env(env)
    build_root = Path(app.outdir).parent

    definitions: list[dict[str, Any]] = []
    for docname in sorted(env.idlspec_definitions):
        definitions.extend(env.idlspec_definitions[docname])
    definitions_payload = {
        "schema_version": 1,
        "definitions": definitions,
    }
    _validate_definitions(env, _definitions_schema_path(app), definitions_payload)
    definitions_path = build_root / "idl-definitions.json"
    _write_json(definitions_path, definitions_payload)

    docnames = sorted(
        set(env.idlspec_normative_references) | set(env.idlspec_informative_references)
    )
    references_payload = {
        "schema_version": 1,
        "documents": {
            docname: {
                "normative": sorted(
                    env.idlspec_normative_references.get(docname, set())
                ),
                "informative": sorted(
                    env.idlspec_informative_references.get(docname, set())
                ),
            }
            for docname in docnames
        },
    }
    _write_json(build_root / "idl-references.json", references_payload)
    LOGGER.info(
        "idlspec: wrote %d definition(s) to %s", len(definitions), definitions_path
    )
