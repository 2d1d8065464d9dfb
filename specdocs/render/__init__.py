"""Static site rendering for generated documentation."""

from __future__ import annotations

from .anchors import slugify
from .highlighter import CodeHighlighter
from .link_rewriter import SourceLinkExtension, page_href, rewrite_link
from .models import Heading, NavGroup, NavItem, PageSource
from .navigation import build_navigation, root_prefix
from .renderer import HtmlContentRenderer, RenderedContent, extract_headings
from .site import SiteRenderer

__all__ = [
    "CodeHighlighter",
    "Heading",
    "HtmlContentRenderer",
    "NavGroup",
    "NavItem",
    "PageSource",
    "RenderedContent",
    "SiteRenderer",
    "SourceLinkExtension",
    "build_navigation",
    "extract_headings",
    "page_href",
    "rewrite_link",
    "root_prefix",
    "slugify",
]
