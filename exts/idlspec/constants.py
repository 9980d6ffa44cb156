from __future__ import annotations

SOURCE_CITE = "WebIDL"

CONTAINER_TYPES = {
    "callback interface",
    "dictionary",
    "interface",
    "interface mixin",
}

CALL_SIGNATURE_TYPES = {
    "constructor",
    "operation",
}

GENERIC_TYPES = {
    "FrozenArray",
    "ObservableArray",
    "Promise",
    "record",
    "sequence",
}

WORKER_GLOBALS = {"Worker", "DedicatedWorker", "SharedWorker"}

OFFENDING_CLASS = "idl-offending-element"
INFORMATIVE_CLASS = "informative"

DIAGNOSTIC_SUBTYPES = (
    "syntax",
    "validation",
    "missing-definition",
    "duplicate-definition",
    "xref",
    "reference-context",
)
