"""Dataclasses describing a documentation plan and the sections within it."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ


class PlanError(ValueError):
    """Raised when a documentation plan violates its uniqueness rules."""


class SectionType(enum.StrEnum):
    """Kinds of section a plan may contain; each selects different spec content."""

    OVERVIEW = "overview"
    AUTH = "auth"
    ENDPOINT_GROUP = "endpoint-group"
    SCHEMAS = "schemas"
    ERRORS = "errors"


@dc.dataclass(frozen=True, slots=True)
class Section:
    """One unit of generated output.

    Attributes
    ----------
    id : str
        Identifier unique within a plan, e.g. ``"overview"`` or ``"tag:pets"``.
    title : str
        Human-readable title used for navigation.
    output_path : str
        Relative, slash-separated markdown path such as ``"endpoints/pets.md"``.
    type : SectionType
        Which slice of the spec the section documents.
    order : int
        Display and processing order.
    description : str
        Brief of what the section should cover; passed to the writer.
    related_tags : tuple[str, ...]
        Tags whose endpoints the section depends on.
    related_schemas : tuple[str, ...]
        Schema names the section depends on.
    group : str | None
        Navigation group label, or ``None`` for a top-level entry.
    """

    id: str
    title: str
    output_path: str
    type: SectionType
    order: int = 0
    description: str = ""
    related_tags: tuple[str, ...] = ()
    related_schemas: tuple[str, ...] = ()
    group: str | None = None

    @classmethod
    def from_mapping(cls, data: typ.Mapping[str, typ.Any]) -> Section:
        """Build a section from a camelCase or snake_case mapping."""
        try:
            section_id = str(data["id"])
            title = str(data["title"])
            output_path = str(data.get("outputPath") or data["output_path"])
            section_type = SectionType(data["type"])
        except (KeyError, ValueError) as exc:
            msg = f"Invalid section payload: {exc}"
            raise PlanError(msg) from exc
        tags = data.get("relatedTags", data.get("related_tags")) or ()
        schemas = data.get("relatedSchemas", data.get("related_schemas")) or ()
        return cls(
            id=section_id,
            title=title,
            output_path=output_path,
            type=section_type,
            order=int(data.get("order", 0) or 0),
            description=str(data.get("description") or ""),
            related_tags=tuple(str(tag) for tag in tags),
            related_schemas=tuple(str(name) for name in schemas),
            group=data.get("group") or None,
        )

    def to_dict(self) -> dict[str, typ.Any]:
        """Return the camelCase payload exchanged with remote agents."""
        payload: dict[str, typ.Any] = {
            "id": self.id,
            "title": self.title,
            "outputPath": self.output_path,
            "type": str(self.type),
            "description": self.description,
            "relatedTags": list(self.related_tags),
            "relatedSchemas": list(self.related_schemas),
            "order": self.order,
        }
        if self.group:
            payload["group"] = self.group
        return payload


@dc.dataclass(frozen=True, slots=True)
class SectionOutput:
    """Title and markdown body produced by a writer for one section."""

    title: str
    markdown: str


@dc.dataclass(frozen=True, slots=True)
class DocPlan:
    """Ordered, validated list of sections for one run."""

    sections: tuple[Section, ...]

    def __post_init__(self) -> None:
        """Reject duplicate ids or output paths."""
        seen_ids: set[str] = set()
        seen_paths: set[str] = set()
        for section in self.sections:
            if section.id in seen_ids:
                msg = f"Duplicate section id {section.id!r} in plan."
                raise PlanError(msg)
            if section.output_path in seen_paths:
                msg = f"Duplicate output path {section.output_path!r} in plan."
                raise PlanError(msg)
            seen_ids.add(section.id)
            seen_paths.add(section.output_path)

    @classmethod
    def from_sections(cls, sections: typ.Iterable[Section]) -> DocPlan:
        """Return a plan whose sections are stably sorted by ``order``."""
        return cls(tuple(sorted(sections, key=lambda section: section.order)))

    def __iter__(self) -> typ.Iterator[Section]:
        return iter(self.sections)

    def __len__(self) -> int:
        return len(self.sections)

    def to_dict(self) -> dict[str, typ.Any]:
        """Return the plan payload exchanged with remote agents."""
        return {"sections": [section.to_dict() for section in self.sections]}


__all__ = ["DocPlan", "PlanError", "Section", "SectionOutput", "SectionType"]
