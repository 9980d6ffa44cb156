from __future__ import annotations

from typing import Any

from sphinx.environment import BuildEnvironment
from sphinx.util import logging

from .types import Diagnostic, ReferenceSets

LOGGER = logging.getLogger(__name__)


def _ensure_env(env: BuildEnvironment) -> None:
    if not hasattr(env, "idlspec_diagnostics"):
        env.idlspec_diagnostics = {}
    if not hasattr(env, "idlspec_definitions"):
        env.idlspec_definitions = {}
    if not hasattr(env, "idlspec_normative_references"):
        env.idlspec_normative_references = {}
    if not hasattr(env, "idlspec_informative_references"):
        env.idlspec_informative_references = {}
    if not hasattr(env, "idlspec_anchors"):
        env.idlspec_anchors = {}
    if not hasattr(env, "idlspec_build_errors"):
        env.idlspec_build_errors = []


def _record_error(env: BuildEnvironment, message: str) -> None:
    _ensure_env(env)
    env.idlspec_build_errors.append(message)
    LOGGER.warning(message, type="idlspec", subtype="build")


def _doc_diagnostics(env: BuildEnvironment, docname: str) -> list[Diagnostic]:
    _ensure_env(env)
    return env.idlspec_diagnostics.setdefault(docname, [])


def _doc_references(env: BuildEnvironment, docname: str) -> ReferenceSets:
    _ensure_env(env)
    return ReferenceSets(
        normative=env.idlspec_normative_references.setdefault(docname, set()),
        informative=env.idlspec_informative_references.setdefault(docname, set()),
    )


def _register_definition(
    env: BuildEnvironment, docname: str, record: dict[str, Any]
) -> None:
    _ensure_env(env)
    env.idlspec_definitions.setdefault(docname, []).append(record)


def _purge_doc(env: BuildEnvironment, docname: str) -> None:
    _ensure_env(env)
    env.idlspec_diagnostics.pop(docname, None)
    env.idlspec_definitions.pop(docname, None)
    env.idlspec_anchors.pop(docname, None)
    env.idlspec_normative_references.pop(docname, None)
    env.idlspec_informative_references.pop(docname, None)
