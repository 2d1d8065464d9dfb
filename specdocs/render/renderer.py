"""Markdown to HTML conversion with heading anchors and highlighted code."""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from html import unescape

from markdown import Markdown

from .anchors import HeadingAnchorExtension
from .link_rewriter import SourceLinkExtension

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension

    from .highlighter import CodeHighlighter
    from .models import Heading

CODE_BLOCK_PATTERN = re.compile(
    r'<pre><code(?: class="language-([^"]+)")?>(.*?)</code></pre>', re.DOTALL
)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)


@dc.dataclass(frozen=True, slots=True)
class RenderedContent:
    """HTML body of one page plus the headings its TOC is built from."""

    html: str
    headings: tuple[Heading, ...] = ()


class HtmlContentRenderer:
    """Render section markdown into HTML fragments."""

    def __init__(
        self, highlighter: CodeHighlighter, *, rewrite_links: bool = True
    ) -> None:
        """Initialize the renderer.

        Parameters
        ----------
        highlighter : CodeHighlighter
            Open highlighter used for every fenced code block.
        rewrite_links : bool, optional
            Rewrite relative ``.md`` links to ``.html``. Defaults to ``True``.
        """
        self.highlighter = highlighter
        self.rewrite_links = rewrite_links

    def render(self, text: str) -> RenderedContent:
        """Convert ``text`` into HTML and collect its h2/h3 headings."""
        normalized = self._normalize_fenced_blocks(text)
        if not normalized.strip():
            return RenderedContent(html="")
        anchors = HeadingAnchorExtension()
        extensions: list[Extension | str] = [
            "fenced_code",
            "tables",
            "sane_lists",
            anchors,
        ]
        if self.rewrite_links:
            extensions.append(SourceLinkExtension())
        html = Markdown(extensions=extensions).convert(normalized)
        return RenderedContent(
            html=self._highlight_code_blocks(html), headings=tuple(anchors.headings)
        )

    def _highlight_code_blocks(self, html: str) -> str:
        def _repl(match: re.Match[str]) -> str:
            language = match.group(1)
            code = unescape(match.group(2))
            return self.highlighter.highlight(code, language)

        return CODE_BLOCK_PATTERN.sub(_repl, html)

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        """Unindent fences and drop ``lang,extra`` fence attributes."""
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            return f"{fence}{language or ''}"

        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


def extract_headings(text: str) -> list[Heading]:
    """Return the second- and third-level headings of a markdown document.

    Headings inside fenced code are ignored and inline markup is reduced to
    its text, exactly as the rendered page shows it.

    >>> [h.slug for h in extract_headings("## Create a Pet\\n\\n### Body")]
    ['create-a-pet', 'body']
    """
    anchors = HeadingAnchorExtension()
    normalized = HtmlContentRenderer._normalize_fenced_blocks(text)
    Markdown(extensions=["fenced_code", "tables", "sane_lists", anchors]).convert(
        normalized
    )
    return list(anchors.headings)


__all__ = ["HtmlContentRenderer", "RenderedContent", "extract_headings"]
