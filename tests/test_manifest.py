"""Tests for manifest persistence and the plan data model."""

from __future__ import annotations

import logging
from pathlib import Path

import msgspec.json as msgspec_json
import pytest

from specdocs._constants import MANIFEST_FILENAME
from specdocs.manifest import Manifest, ManifestEntry, load_manifest, save_manifest
from specdocs.models import DocPlan, PlanError, Section, SectionType


def _entry(path: str, order: int | None) -> ManifestEntry:
    return ManifestEntry(
        content_hash=f"hash-{path}",
        output_path=path,
        generated_at="2026-01-01T00:00:00Z",
        title=path.removesuffix(".md").title(),
        order=order,
    )


def test_saved_manifest_uses_camel_case_keys(tmp_path: Path) -> None:
    manifest = Manifest(
        spec_hash="spec",
        instructions_hash="instr",
        sections={"overview": _entry("index.md", 0)},
    )

    path = save_manifest(tmp_path, manifest)

    assert path == tmp_path / MANIFEST_FILENAME
    payload = msgspec_json.decode(path.read_bytes())
    assert payload == {
        "version": 1,
        "specHash": "spec",
        "instructionsHash": "instr",
        "sections": {
            "overview": {
                "contentHash": "hash-index.md",
                "outputPath": "index.md",
                "title": "Index",
                "order": 0,
                "generatedAt": "2026-01-01T00:00:00Z",
            }
        },
    }
    assert load_manifest(tmp_path) == manifest


def test_missing_manifest_loads_as_none(tmp_path: Path) -> None:
    assert load_manifest(tmp_path) is None


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        '{"specHash": "only"}',
        '{"specHash": "a", "instructionsHash": "b", "sections": ["x"]}',
    ],
)
def test_corrupt_manifest_loads_as_none(
    tmp_path: Path, content: str, caplog: pytest.LogCaptureFixture
) -> None:
    (tmp_path / MANIFEST_FILENAME).write_text(content, encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        assert load_manifest(tmp_path) is None
    assert "manifest" in caplog.text.lower()


def test_ordered_entries_sort_by_order_with_missing_as_zero() -> None:
    manifest = Manifest(
        spec_hash="s",
        instructions_hash="i",
        sections={
            "errors": _entry("errors.md", 4),
            "overview": _entry("index.md", None),
            "auth": _entry("authentication.md", 1),
        },
    )

    assert [section_id for section_id, _ in manifest.ordered_entries()] == [
        "overview",
        "auth",
        "errors",
    ]


def test_plan_rejects_duplicate_ids() -> None:
    first = Section(id="a", title="A", output_path="a.md", type=SectionType.OVERVIEW)
    second = Section(id="a", title="B", output_path="b.md", type=SectionType.SCHEMAS)

    with pytest.raises(PlanError, match="Duplicate section id"):
        DocPlan((first, second))


def test_plan_rejects_duplicate_output_paths() -> None:
    first = Section(id="a", title="A", output_path="same.md", type=SectionType.OVERVIEW)
    second = Section(id="b", title="B", output_path="same.md", type=SectionType.SCHEMAS)

    with pytest.raises(PlanError, match="Duplicate output path"):
        DocPlan((first, second))


def test_section_from_mapping_accepts_agent_payload() -> None:
    section = Section.from_mapping(
        {
            "id": "tag:pets",
            "title": "Pets",
            "outputPath": "endpoints/pets.md",
            "type": "endpoint-group",
            "description": "Pet endpoints",
            "relatedTags": ["pets"],
            "relatedSchemas": ["Pet"],
            "order": 2,
            "group": "Endpoints",
        }
    )

    assert section.type is SectionType.ENDPOINT_GROUP
    assert section.related_tags == ("pets",)
    assert section.to_dict()["outputPath"] == "endpoints/pets.md"


def test_section_from_mapping_rejects_unknown_type() -> None:
    with pytest.raises(PlanError):
        Section.from_mapping(
            {"id": "x", "title": "X", "outputPath": "x.md", "type": "appendix"}
        )
