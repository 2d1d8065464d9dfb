"""Shared dataclasses used by the site rendering pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ


@dc.dataclass(frozen=True, slots=True)
class Heading:
    """Second- or third-level heading and the anchor id it renders with."""

    level: int
    text: str
    slug: str


@dc.dataclass(slots=True)
class PageSource:
    """One manifest section paired with its markdown source.

    Attributes
    ----------
    id : str
        Section id from the manifest.
    title : str
        Page title: the first ``#`` heading of the body, else the manifest
        title, else the id.
    nav_title : str
        Label shown in navigation; the manifest title when present.
    source_path : str
        Relative markdown path such as ``"endpoints/pets.md"``.
    href : str
        Relative rendered path such as ``"endpoints/pets.html"``.
    group : str | None
        Navigation group label.
    body : str
        Markdown source text.
    """

    id: str
    title: str
    nav_title: str
    source_path: str
    href: str
    group: str | None
    body: str


@dc.dataclass(slots=True)
class NavItem:
    """Navigation link; only the active page's item carries a TOC."""

    title: str
    href: str
    active: bool = False
    toc: list[Heading] = dc.field(default_factory=list)

    is_group: typ.ClassVar[bool] = False


@dc.dataclass(slots=True)
class NavGroup:
    """Labeled cluster of navigation items sharing a group name."""

    label: str
    items: list[NavItem] = dc.field(default_factory=list)

    is_group: typ.ClassVar[bool] = True


NavEntry = NavItem | NavGroup

__all__ = ["Heading", "NavEntry", "NavGroup", "NavItem", "PageSource"]
