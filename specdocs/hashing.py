"""Deterministic content hashes for sections and whole specifications.

Each section type depends on a different slice of the spec index. Only that
slice is serialized, with object keys sorted, and hashed with SHA-256, so a
section is regenerated exactly when the content it documents changes.
"""

from __future__ import annotations

import hashlib
import json
import typing as typ

from .models import Section, SectionType
from .tools import SpecTools

if typ.TYPE_CHECKING:
    from .spec_index import SpecIndex


def canonical_json(value: typ.Any) -> str:
    """Serialize ``value`` with sorted keys and compact separators."""
    return json.dumps(
        value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str
    )


def sha256_hex(text: str) -> str:
    """Return the hex SHA-256 digest of ``text`` encoded as UTF-8."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def compute_spec_hash(index: SpecIndex) -> str:
    """Return the hash of the entire spec index."""
    return sha256_hex(canonical_json(index.to_dict()))


def compute_section_hash(section: Section, index: SpecIndex) -> str:
    """Return the content hash for ``section`` against ``index``.

    Parameters
    ----------
    section : Section
        Section descriptor; its ``type`` selects which parts of the index are
        hashed, and ``related_tags``/``related_schemas`` narrow endpoint groups.
    index : SpecIndex
        Fully dereferenced spec index.

    Returns
    -------
    str
        Hex SHA-256 digest. Equal inputs always produce equal digests.
    """
    return sha256_hex(canonical_json(_select_parts(section, index)))


def _select_parts(section: Section, index: SpecIndex) -> list[typ.Any]:
    parts: list[typ.Any] = []
    match section.type:
        case SectionType.OVERVIEW:
            parts.append(index.info)
            parts.append(index.servers)
            parts.append(
                [{"name": tag["name"], "description": tag["description"]} for tag in index.tags]
            )
        case SectionType.AUTH:
            parts.append(index.security)
        case SectionType.ENDPOINT_GROUP:
            for tag in sorted(section.related_tags):
                parts.append({"tag": tag, "endpoints": index.paths_by_tag.get(tag, [])})
            for name in sorted(section.related_schemas):
                parts.append({"schema": name, "definition": index.schemas.get(name)})
        case SectionType.SCHEMAS:
            parts.append(sorted(index.schemas.items(), key=lambda item: item[0]))
        case SectionType.ERRORS:
            parts.append(_error_responses(index))
    return parts


def _error_responses(index: SpecIndex) -> list[dict[str, typ.Any]]:
    """Collect every 4xx/5xx response across all endpoints in canonical order."""
    collected = SpecTools(index).error_responses()
    collected.sort(key=canonical_json)
    return collected


__all__ = [
    "canonical_json",
    "compute_section_hash",
    "compute_spec_hash",
    "sha256_hex",
]
