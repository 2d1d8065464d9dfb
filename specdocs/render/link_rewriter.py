"""Rewrite intra-site markdown links to the rendered page extension."""

from __future__ import annotations

import typing as typ
from urllib.parse import urlsplit, urlunsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

SOURCE_SUFFIX = ".md"
PAGE_SUFFIX = ".html"


def page_href(source_path: str) -> str:
    """Return the rendered page path for a section source path.

    >>> page_href("endpoints/pets.md")
    'endpoints/pets.html'
    """
    if source_path.endswith(SOURCE_SUFFIX):
        return source_path[: -len(SOURCE_SUFFIX)] + PAGE_SUFFIX
    return source_path + PAGE_SUFFIX


def rewrite_link(target: str | None) -> str | None:
    """Return ``target`` with a ``.md`` path swapped for ``.html``, or ``None``.

    Only relative links are rewritten; query strings and fragments are kept.

    >>> rewrite_link("pets.md#create-a-pet")
    'pets.html#create-a-pet'
    >>> rewrite_link("https://example.com/readme.md") is None
    True
    """
    if not target or target.startswith(("#", "//", "/")):
        return None
    parsed = urlsplit(target)
    if parsed.scheme or parsed.netloc or not parsed.path.lower().endswith(SOURCE_SUFFIX):
        return None
    path = parsed.path[: -len(SOURCE_SUFFIX)] + PAGE_SUFFIX
    return urlunsplit(("", "", path, parsed.query, parsed.fragment))


class SourceLinkExtension(Extension):
    """Point links to other sections' markdown sources at their rendered pages."""

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the link treeprocessor on the Markdown instance."""
        md.treeprocessors.register(SourceLinkTreeprocessor(md), "specdocs_source_links", 15)


class SourceLinkTreeprocessor(Treeprocessor):
    """Rewrite ``<a href="*.md">`` anchors in the parsed markdown tree."""

    def run(self, root: Element) -> Element:  # pragma: no cover - Markdown API
        for element in root.iter("a"):
            rewritten = rewrite_link(element.get("href"))
            if rewritten:
                element.set("href", rewritten)
        return root


__all__ = [
    "SourceLinkExtension",
    "SourceLinkTreeprocessor",
    "page_href",
    "rewrite_link",
]
