from __future__ import annotations

from typing import Any

from sphinx.domains import Domain


class IdlDomain(Domain):
    name = "idl"
    label = "WebIDL"
    roles: dict[str, Any] = {}
    directives: dict[str, Any] = {}
    initial_data = {
        "objects": {},
    }

    def note_definition(
        self, docname: str, anchor: str, fullname: str, objtype: str
    ) -> None:
        key = f"{docname}#{anchor}"
        self.data.setdefault("objects", {})[key] = (docname, anchor, fullname, objtype)

    def clear_doc(self, docname: str) -> None:
        stale = [
            key
            for key, value in self.data.get("objects", {}).items()
            if value[0] == docname
        ]
        for key in stale:
            del self.data["objects"][key]

    def merge_domaindata(self, docnames: list[str], otherdata: dict[str, Any]) -> None:
        for key, value in otherdata.get("objects", {}).items():
            if value[0] in docnames:
                self.data.setdefault("objects", {})[key] = value

    def get_objects(self) -> list[tuple[str, str, str, str, str, int]]:
        objects = []
        for docname, anchor, fullname, objtype in self.data.get("objects", {}).values():
            objects.append((fullname, fullname, objtype, docname, anchor, 1))
        return objects
