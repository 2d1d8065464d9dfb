"""Deterministic planner that lays out sections without a hosted model.

The layout mirrors what the hosted planner is asked to produce: an overview
at ``index.md``, an authentication page when security schemes exist, one
endpoint page per tag, then schemas and errors pages when the spec has them.
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from specdocs.models import DocPlan, Section, SectionType
from specdocs.tools import SpecTools

if typ.TYPE_CHECKING:
    from specdocs.spec_index import SpecIndex

_SCHEMA_POINTER = re.compile(r"^#/(?:components/schemas|definitions)/(.+)$")


def _slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-") or "section"


def _unique_path(base: str, used: set[str]) -> str:
    candidate = f"endpoints/{base}.md"
    suffix = 2
    while candidate in used:
        candidate = f"endpoints/{base}-{suffix}.md"
        suffix += 1
    used.add(candidate)
    return candidate


def referenced_schemas(index: SpecIndex, tag: str) -> list[str]:
    """Return names of schemas used by the endpoints of ``tag``, sorted.

    Resolved definitions are shared between the schema table and every place
    that referenced them, so identity identifies a use; circular markers still
    carry their pointer.
    """
    by_identity = {id(definition): name for name, definition in index.schemas.items()}
    found: set[str] = set()
    stack: list[typ.Any] = [entry["operation"] for entry in index.paths_by_tag.get(tag, [])]
    visited: set[int] = set()
    while stack:
        node = stack.pop()
        if id(node) in visited:
            continue
        visited.add(id(node))
        if isinstance(node, dict):
            if id(node) in by_identity:
                found.add(by_identity[id(node)])
            ref = node.get("$ref")
            if isinstance(ref, str) and (match := _SCHEMA_POINTER.match(ref)):
                found.add(match.group(1).replace("~1", "/").replace("~0", "~"))
            stack.extend(node.values())
        elif isinstance(node, list):
            stack.extend(node)
    return sorted(name for name in found if name in index.schemas)


class RulePlanner:
    """Plan sections from the shape of the spec alone.

    Parameters
    ----------
    group_label : str | None, optional
        Navigation group assigned to every endpoint page; ``None`` keeps them
        top-level.
    """

    def __init__(self, group_label: str | None = "Endpoints") -> None:
        self.group_label = group_label

    def plan(self, index: SpecIndex, instructions: str | None = None) -> DocPlan:  # noqa: ARG002
        tools = SpecTools(index)
        sections: list[Section] = [
            Section(
                id="overview",
                title="Overview",
                output_path="index.md",
                type=SectionType.OVERVIEW,
                description="API title, description, base URL and a quick-start guide.",
            )
        ]
        if index.security:
            sections.append(
                Section(
                    id="auth",
                    title="Authentication",
                    output_path="authentication.md",
                    type=SectionType.AUTH,
                    description="Each authentication method with example headers.",
                )
            )

        used_paths: set[str] = set()
        for tag in tools.list_tags():
            name = tag["name"]
            if not tools.read_endpoints(name):
                continue
            sections.append(
                Section(
                    id=f"tag:{name}",
                    title=name.replace("-", " ").replace("_", " ").title(),
                    output_path=_unique_path(_slugify(name), used_paths),
                    type=SectionType.ENDPOINT_GROUP,
                    description=tag["description"] or f"Endpoints tagged {name}.",
                    related_tags=(name,),
                    related_schemas=tuple(referenced_schemas(index, name)),
                    group=self.group_label,
                )
            )

        if index.schemas:
            sections.append(
                Section(
                    id="schemas",
                    title="Schemas",
                    output_path="schemas.md",
                    type=SectionType.SCHEMAS,
                    description="Key models with field descriptions.",
                )
            )
        if tools.error_responses():
            sections.append(
                Section(
                    id="errors",
                    title="Errors",
                    output_path="errors.md",
                    type=SectionType.ERRORS,
                    description="Common error codes with handling advice.",
                )
            )
        return DocPlan(
            tuple(
                dc.replace(section, order=order)
                for order, section in enumerate(sections)
            )
        )


__all__ = ["RulePlanner", "referenced_schemas"]
