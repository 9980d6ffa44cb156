"""Stable names and anchor ids for IDL definitions.

One ``IdlNameMap`` belongs to one document-processing run. It owns the
counters that disambiguate partial definitions and operation overloads, and
memoizes results by node identity, so asking twice for the same node never
advances a counter.
"""

from __future__ import annotations

from typing import Any

from .constants import CALL_SIGNATURE_TYPES, CONTAINER_TYPES
from .types import ResolvedName


def _definition_name(defn: Any) -> str:
    if defn.type == "enum-value":
        return defn.value
    if defn.type == "operation":
        return defn.name
    return defn.name or defn.type


def _idl_id(name: str, parent: str) -> str:
    if not parent:
        return f"idl-def-{name.lower()}"
    return f"idl-def-{parent.lower()}-{name.lower()}"


class IdlNameMap:
    def __init__(self) -> None:
        self.operation_names: dict[str, int] = {}
        self.idl_partials: dict[str, int] = {}
        self._resolved: dict[int, tuple[Any, ResolvedName]] = {}
        self._issued_ids: set[str] = set()

    def get_name_and_id(self, defn: Any, parent: str = "") -> ResolvedName:
        cached = self._resolved.get(id(defn))
        if cached is not None:
            return cached[1]
        result = self._resolve_name_and_id(defn, parent)
        # The node is kept alongside its result so its id() cannot be reused.
        self._resolved[id(defn)] = (defn, result)
        return result

    def _resolve_name_and_id(self, defn: Any, parent: str) -> ResolvedName:
        name = _definition_name(defn)
        idl_id = _idl_id(name, parent)
        if defn.type in CONTAINER_TYPES:
            idl_id += self._resolve_partial(defn)
        elif defn.type in CALL_SIGNATURE_TYPES:
            overload = self._resolve_overload(name, parent)
            if overload:
                name += overload
                idl_id += overload
            elif defn.arguments:
                idl_id += "".join(f"-{arg.name.lower()}" for arg in defn.arguments)
        return ResolvedName(name=name, anchor_id=self._claim_id(idl_id))

    def _resolve_partial(self, defn: Any) -> str:
        if not defn.partial:
            return ""
        self.idl_partials[defn.name] = self.idl_partials.get(defn.name, 0) + 1
        return f"-partial-{self.idl_partials[defn.name]}"

    def _resolve_overload(self, name: str, parent: str) -> str:
        qualified_name = f"{parent}.{name}"
        call_name = f"{qualified_name}()"
        seen = self.operation_names.get(qualified_name, 0)
        prior_calls = self.operation_names.get(call_name, 0)
        overload = f"!overload-{prior_calls}" if seen else ""
        self.operation_names[call_name] = prior_calls + 1
        self.operation_names[qualified_name] = seen + 1
        return overload

    def _claim_id(self, idl_id: str) -> str:
        candidate = idl_id
        suffix = 1
        while candidate in self._issued_ids:
            suffix += 1
            candidate = f"{idl_id}-{suffix}"
        self._issued_ids.add(candidate)
        return candidate
