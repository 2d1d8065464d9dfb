"""Read-only query surface over a :class:`~specdocs.spec_index.SpecIndex`.

Planners and writers look up spec content through these helpers instead of
walking the index directly. :meth:`SpecTools.context_for` bundles exactly the
content a section documents so it can be shipped to a hosted agent in one
request.
"""

from __future__ import annotations

import typing as typ

from .models import Section, SectionType

if typ.TYPE_CHECKING:
    from .spec_index import SpecIndex


class SpecTools:
    """Named lookups over a spec index."""

    def __init__(self, index: SpecIndex) -> None:
        self.index = index

    def list_tags(self) -> list[dict[str, str]]:
        """List all API tags with descriptions."""
        return [dict(tag) for tag in self.index.tags]

    def read_endpoints(self, tag: str) -> list[dict[str, typ.Any]]:
        """Return every endpoint for ``tag``; use ``"untagged"`` for untagged ones."""
        return list(self.index.paths_by_tag.get(tag, []))

    def read_schema(self, name: str) -> typ.Any | None:
        """Return a resolved schema definition, or ``None`` when unknown."""
        return self.index.schemas.get(name)

    def list_schemas(self) -> list[str]:
        return list(self.index.schemas)

    def read_security(self) -> list[dict[str, typ.Any]]:
        return list(self.index.security)

    def read_spec_info(self) -> dict[str, typ.Any]:
        """Return API metadata: title, version, description and servers."""
        return {"info": self.index.info, "servers": self.index.servers}

    def summary(self) -> dict[str, typ.Any]:
        """Return the compact overview a planner needs to lay out sections."""
        return {
            **self.read_spec_info(),
            "tags": [
                {**tag, "endpointCount": len(self.read_endpoints(tag["name"]))}
                for tag in self.list_tags()
            ],
            "schemas": self.list_schemas(),
            "securitySchemes": [scheme.get("id") for scheme in self.read_security()],
            "hasErrorResponses": bool(self.error_responses()),
        }

    def error_responses(self) -> list[dict[str, typ.Any]]:
        """Return every 4xx/5xx response as ``{path, method, code, response}``."""
        found: list[dict[str, typ.Any]] = []
        for endpoint in self.index.endpoints():
            for code, response in (endpoint["operation"].get("responses") or {}).items():
                if str(code).startswith(("4", "5")):
                    found.append(
                        {
                            "path": endpoint["path"],
                            "method": endpoint["method"],
                            "code": str(code),
                            "response": response,
                        }
                    )
        return found

    def context_for(self, section: Section) -> dict[str, typ.Any]:
        """Return the spec content a writer needs for ``section``."""
        match section.type:
            case SectionType.OVERVIEW:
                return {**self.read_spec_info(), "tags": self.list_tags()}
            case SectionType.AUTH:
                return {"security": self.read_security()}
            case SectionType.ENDPOINT_GROUP:
                return {
                    "endpoints": {tag: self.read_endpoints(tag) for tag in section.related_tags},
                    "schemas": {
                        name: self.read_schema(name) for name in section.related_schemas
                    },
                }
            case SectionType.SCHEMAS:
                return {"schemas": dict(self.index.schemas)}
            case SectionType.ERRORS:
                return {"errors": self.error_responses()}
        return {}


__all__ = ["SpecTools"]
