"""Scoped Pygments highlighter shared by every page of one site render."""

from __future__ import annotations

import typing as typ
from html import escape

from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

if typ.TYPE_CHECKING:
    import types

    from pygments.lexer import Lexer

DEFAULT_STYLE = "default"
HIGHLIGHT_CLASS = "highlight"


class CodeHighlighter:
    """Highlight code blocks, caching lexers until :meth:`close` is called.

    The highlighter is a context manager so a site render acquires it once
    and releases it on every exit path::

        with CodeHighlighter() as highlighter:
            html = highlighter.highlight("print(1)", "python")
    """

    def __init__(self, style: str = DEFAULT_STYLE) -> None:
        self.style = style
        self._formatter = HtmlFormatter(style=style, cssclass=HIGHLIGHT_CLASS)
        self._lexers: dict[str, Lexer | None] = {}
        self._closed = False

    def __enter__(self) -> CodeHighlighter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: types.TracebackType | None,
    ) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def stylesheet(self) -> str:
        """Return the CSS rules for highlighted blocks."""
        return self._formatter.get_style_defs(f".{HIGHLIGHT_CLASS}")

    def close(self) -> None:
        """Drop cached lexers; further highlighting raises ``RuntimeError``."""
        self._lexers.clear()
        self._closed = True

    def highlight(self, code: str, language: str | None = None) -> str:
        """Return highlighted HTML for ``code``.

        Unrecognized or missing languages fall back to a plain escaped block
        rather than failing the render.

        Raises
        ------
        RuntimeError
            If the highlighter has been closed.
        """
        if self._closed:
            msg = "CodeHighlighter is closed"
            raise RuntimeError(msg)
        lexer = self._lexer_for(language)
        if lexer is None:
            return self.plain_block(code, language)
        html = highlight(code, lexer, self._formatter)
        safe_lang = escape(language or "", quote=True)
        return html.replace(
            f'<div class="{HIGHLIGHT_CLASS}">',
            f'<div class="{HIGHLIGHT_CLASS}" data-language="{safe_lang}">',
            1,
        )

    @staticmethod
    def plain_block(code: str, language: str | None = None) -> str:
        """Return ``code`` escaped inside a bare ``pre``/``code`` pair."""
        class_attr = (
            f' class="language-{escape(language, quote=True)}"' if language else ""
        )
        return f"<pre><code{class_attr}>{escape(code)}</code></pre>"

    def _lexer_for(self, language: str | None) -> Lexer | None:
        if not language:
            return None
        key = language.lower()
        if key not in self._lexers:
            try:
                self._lexers[key] = get_lexer_by_name(key)
            except ClassNotFound:
                self._lexers[key] = None
        return self._lexers[key]


__all__ = ["DEFAULT_STYLE", "HIGHLIGHT_CLASS", "CodeHighlighter"]
