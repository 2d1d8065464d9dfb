"""Sidebar navigation and relative path helpers for rendered pages."""

from __future__ import annotations

import typing as typ
from pathlib import PurePosixPath

from .models import NavGroup, NavItem

if typ.TYPE_CHECKING:
    from .models import Heading, NavEntry, PageSource


def root_prefix(href: str) -> str:
    """Return the relative prefix from ``href`` back to the site root.

    >>> root_prefix("index.html")
    './'
    >>> root_prefix("endpoints/pets.html")
    '../'
    """
    depth = len(PurePosixPath(href).parts) - 1
    return "../" * depth if depth > 0 else "./"


def build_navigation(
    pages: typ.Sequence[PageSource],
    current_id: str,
    toc: typ.Sequence[Heading] = (),
) -> list[NavEntry]:
    """Build the sidebar entries for the page identified by ``current_id``.

    Ungrouped pages become top-level items in page order. Grouped pages are
    collected under one :class:`NavGroup` per label, placed where the label
    first appears; later members join that group in page order. Only the
    current page is marked active and carries ``toc``.
    """
    entries: list[NavEntry] = []
    groups: dict[str, NavGroup] = {}
    for page in pages:
        active = page.id == current_id
        item = NavItem(
            title=page.nav_title,
            href=page.href,
            active=active,
            toc=list(toc) if active else [],
        )
        if page.group is None:
            entries.append(item)
            continue
        group = groups.get(page.group)
        if group is None:
            group = NavGroup(label=page.group)
            groups[page.group] = group
            entries.append(group)
        group.items.append(item)
    return entries


__all__ = ["build_navigation", "root_prefix"]
