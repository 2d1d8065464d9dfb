"""Persist and reload the record of what was last generated.

The manifest lives at :data:`~specdocs._constants.MANIFEST_FILENAME` inside the
docs directory. A missing or unreadable manifest is never an error: callers get
``None`` and treat the run as having no prior state.
"""

from __future__ import annotations

import dataclasses as dc
import json
import logging
import typing as typ
from pathlib import Path

from ._constants import MANIFEST_FILENAME

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1


@dc.dataclass(slots=True)
class ManifestEntry:
    """Stored state for one section id."""

    content_hash: str
    output_path: str
    generated_at: str
    title: str | None = None
    group: str | None = None
    order: int | None = None

    @classmethod
    def from_mapping(cls, data: typ.Mapping[str, typ.Any]) -> ManifestEntry:
        order = data.get("order")
        return cls(
            content_hash=str(data["contentHash"]),
            output_path=str(data["outputPath"]),
            generated_at=str(data.get("generatedAt") or ""),
            title=data.get("title"),
            group=data.get("group") or None,
            order=int(order) if order is not None else None,
        )

    def to_dict(self) -> dict[str, typ.Any]:
        payload: dict[str, typ.Any] = {
            "contentHash": self.content_hash,
            "outputPath": self.output_path,
        }
        if self.title is not None:
            payload["title"] = self.title
        if self.group:
            payload["group"] = self.group
        if self.order is not None:
            payload["order"] = self.order
        payload["generatedAt"] = self.generated_at
        return payload


@dc.dataclass(slots=True)
class Manifest:
    """Last known good build state used to diff the next run."""

    spec_hash: str
    instructions_hash: str
    sections: dict[str, ManifestEntry] = dc.field(default_factory=dict)
    version: int = MANIFEST_VERSION

    @classmethod
    def from_mapping(cls, data: typ.Mapping[str, typ.Any]) -> Manifest:
        sections_raw = data.get("sections") or {}
        if not isinstance(sections_raw, dict):
            msg = "Manifest 'sections' must be a mapping."
            raise TypeError(msg)
        return cls(
            spec_hash=str(data["specHash"]),
            instructions_hash=str(data["instructionsHash"]),
            sections={
                str(section_id): ManifestEntry.from_mapping(entry)
                for section_id, entry in sections_raw.items()
            },
            version=int(data.get("version", MANIFEST_VERSION)),
        )

    def to_dict(self) -> dict[str, typ.Any]:
        return {
            "version": self.version,
            "specHash": self.spec_hash,
            "instructionsHash": self.instructions_hash,
            "sections": {
                section_id: entry.to_dict() for section_id, entry in self.sections.items()
            },
        }

    def ordered_entries(self) -> list[tuple[str, ManifestEntry]]:
        """Return ``(id, entry)`` pairs stably sorted by ``order`` (missing as 0)."""
        return sorted(self.sections.items(), key=lambda item: item[1].order or 0)


def manifest_path(docs_dir: Path) -> Path:
    """Return the manifest location inside ``docs_dir``."""
    return docs_dir / MANIFEST_FILENAME


def load_manifest(docs_dir: Path) -> Manifest | None:
    """Return the stored manifest, or ``None`` when absent or corrupt."""
    path = manifest_path(docs_dir)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.debug("No manifest at %s", path)
        return None
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable manifest %s: %s", path, exc)
        return None
    if not isinstance(payload, dict):
        logger.warning("Ignoring manifest %s: top level is not an object", path)
        return None
    try:
        return Manifest.from_mapping(payload)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        logger.warning("Ignoring malformed manifest %s: %s", path, exc)
        return None


def save_manifest(docs_dir: Path, manifest: Manifest) -> Path:
    """Write ``manifest`` as pretty-printed JSON, replacing any previous file."""
    path = manifest_path(docs_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(manifest.to_dict(), indent=2) + "\n", encoding="utf-8")
    return path


__all__ = [
    "MANIFEST_VERSION",
    "Manifest",
    "ManifestEntry",
    "load_manifest",
    "manifest_path",
    "save_manifest",
]
