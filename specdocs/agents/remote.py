"""Planner and writer backed by the hosted agent API."""

from __future__ import annotations

import typing as typ

from specdocs.models import DocPlan, Section, SectionOutput, SectionType
from specdocs.tools import SpecTools

from .client import AgentClient, AgentError

if typ.TYPE_CHECKING:
    from specdocs.spec_index import SpecIndex

PLANNER_INSTRUCTIONS = """\
You are an API documentation architect. Analyze the API spec summary and decide
the optimal documentation structure.

Rules:
- Always include an "overview" section first (outputPath: "index.md", order: 0)
- Include an "auth" section if security schemes exist (outputPath: "authentication.md")
- Create one "endpoint-group" section per tag, using outputPath: "endpoints/{tag-slug}.md"
- Group untagged endpoints under a section with relatedTags: ["untagged"]
- Include a "schemas" section if there are schemas (outputPath: "schemas.md")
- Include an "errors" section if endpoints define error responses (outputPath: "errors.md")
- Each section must declare its relatedTags and relatedSchemas
- Use lowercase kebab-case for file paths
- Order sections: overview, auth, endpoint groups, schemas, errors

Navigation grouping:
- Use the "group" field to organize endpoint sections into logical sidebar groups
- Top-level sections (overview, auth, schemas, errors) have no group
- Choose short, descriptive group names"""

WRITER_INSTRUCTIONS = """\
You are a technical API documentation writer. Write clear, accurate markdown
documentation for the given section using the spec content provided.

Guidelines:
- Include practical code examples (curl, and language examples if appropriate)
- Use tables for parameter lists and response fields
- Include request and response examples with realistic sample data
- Cross-reference other sections with relative links to their .md output paths
- Do NOT include a top-level heading (# Title); it is added automatically
- Use ## and ### headings; they drive the page table of contents"""

SECTION_SCHEMA: dict[str, typ.Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "title": {"type": "string"},
        "outputPath": {"type": "string"},
        "type": {"type": "string", "enum": [str(kind) for kind in SectionType]},
        "description": {"type": "string"},
        "group": {"type": "string"},
        "relatedTags": {"type": "array", "items": {"type": "string"}},
        "relatedSchemas": {"type": "array", "items": {"type": "string"}},
        "order": {"type": "number"},
    },
    "required": ["id", "title", "outputPath", "type", "description", "order"],
}
PLAN_SCHEMA: dict[str, typ.Any] = {
    "type": "object",
    "properties": {"sections": {"type": "array", "items": SECTION_SCHEMA}},
    "required": ["sections"],
}
OUTPUT_SCHEMA: dict[str, typ.Any] = {
    "type": "object",
    "properties": {"title": {"type": "string"}, "markdown": {"type": "string"}},
    "required": ["title", "markdown"],
}


def _with_user_instructions(base: str, instructions: str | None) -> str:
    if not instructions:
        return base
    return f"{base}\n\nUser instructions for documentation style:\n{instructions}"


class RemotePlanner:
    """Ask the hosted model for a documentation plan."""

    def __init__(self, client: AgentClient) -> None:
        self.client = client

    def plan(self, index: SpecIndex, instructions: str | None) -> DocPlan:
        payload = self.client.call(
            name="doc-planner",
            instructions=_with_user_instructions(PLANNER_INSTRUCTIONS, instructions),
            payload={"spec": SpecTools(index).summary()},
            output_schema=PLAN_SCHEMA,
        )
        raw_sections = payload.get("sections")
        if not isinstance(raw_sections, list):
            msg = "Planner returned no sections."
            raise AgentError(msg)
        return DocPlan.from_sections(
            Section.from_mapping(item) for item in raw_sections if isinstance(item, dict)
        )


class RemoteWriter:
    """Ask the hosted model to write one section at a time."""

    def __init__(
        self, client: AgentClient, index: SpecIndex, instructions: str | None = None
    ) -> None:
        self.client = client
        self.tools = SpecTools(index)
        self.instructions = _with_user_instructions(WRITER_INSTRUCTIONS, instructions)

    def write(self, section: Section, plan: DocPlan) -> SectionOutput:
        payload = self.client.call(
            name="doc-writer",
            instructions=self.instructions,
            payload={
                "section": section.to_dict(),
                "plan": plan.to_dict(),
                "spec": self.tools.context_for(section),
            },
            output_schema=OUTPUT_SCHEMA,
        )
        title = payload.get("title")
        markdown = payload.get("markdown")
        if not isinstance(markdown, str):
            msg = f"Writer returned no markdown for section {section.id!r}."
            raise AgentError(msg)
        return SectionOutput(title=str(title or section.title), markdown=markdown)


__all__ = [
    "OUTPUT_SCHEMA",
    "PLAN_SCHEMA",
    "RemotePlanner",
    "RemoteWriter",
]
