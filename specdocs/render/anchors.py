"""Markdown extension that assigns slug ids to second- and third-level headings.

The ids are computed from the rendered heading text, and every heading that
received one is recorded on the extension, so the table of contents and the
in-page anchors always come from the same source.
"""

from __future__ import annotations

import re
import typing as typ
from html import unescape

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor
from markdown.util import AMP_SUBSTITUTE, HTML_PLACEHOLDER_RE

from .models import Heading

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

TOC_LEVELS = {"h2": 2, "h3": 3}
_ESCAPED_CHAR = re.compile("\x02(\\d+)\x03")
_PLACEHOLDER = re.compile("\x02[^\x03]*\x03")
_TAG = re.compile(r"<[^>]+>")
_NON_SLUG = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify(text: str) -> str:
    """Return the URL-safe anchor for ``text``.

    Lower-cases, drops characters outside word/space/hyphen, turns whitespace
    runs into single hyphens, collapses repeated hyphens and trims edge ones.

    Examples
    --------
    >>> slugify("Create a Pet!")
    'create-a-pet'
    >>> slugify("  GET /pets/{id}  ")
    'get-petsid'
    """
    lowered = _NON_SLUG.sub("", text.lower())
    hyphenated = _WHITESPACE.sub("-", lowered.strip())
    return _HYPHENS.sub("-", hyphenated).strip("-")


def _element_text(element: Element, md: Markdown) -> str:
    """Return the visible text of a heading, restoring stashed entities and HTML."""

    def stashed(match: re.Match[str]) -> str:
        blocks = md.htmlStash.rawHtmlBlocks
        index = int(match.group(1))
        if index >= len(blocks):
            return ""
        return _TAG.sub("", str(blocks[index]))

    raw = "".join(element.itertext())
    raw = _ESCAPED_CHAR.sub(lambda match: chr(int(match.group(1))), raw)
    raw = HTML_PLACEHOLDER_RE.sub(stashed, raw).replace(AMP_SUBSTITUTE, "&")
    return unescape(_PLACEHOLDER.sub("", raw)).strip()


class HeadingAnchorExtension(Extension):
    """Register :class:`HeadingAnchorTreeprocessor` and expose collected headings."""

    def __init__(self) -> None:
        super().__init__()
        self.headings: list[Heading] = []

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the heading treeprocessor after inline processing."""
        md.treeprocessors.register(HeadingAnchorTreeprocessor(md, self), "specdocs_anchors", 5)


class HeadingAnchorTreeprocessor(Treeprocessor):
    """Set ``id`` on each h2/h3 element and record it as a :class:`Heading`."""

    def __init__(self, md: Markdown, extension: HeadingAnchorExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: Element) -> Element:
        self.extension.headings = []
        for element in root.iter():
            level = TOC_LEVELS.get(element.tag)
            if level is None:
                continue
            text = _element_text(element, self.md)
            slug = slugify(text)
            element.set("id", slug)
            self.extension.headings.append(Heading(level=level, text=text, slug=slug))
        return root


__all__ = ["HeadingAnchorExtension", "HeadingAnchorTreeprocessor", "slugify"]
