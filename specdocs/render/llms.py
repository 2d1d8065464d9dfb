"""Plain-text index artifacts for language-model consumers."""

from __future__ import annotations

import re
import typing as typ

if typ.TYPE_CHECKING:
    from .models import PageSource

DESCRIPTION_LIMIT = 160
H1_PATTERN = re.compile(r"^#[ \t]+(.+?)[ \t#]*$", re.MULTILINE)
_FENCE = re.compile(r"^\s*(```|~~~)")
_NON_PROSE = re.compile(r"^\s*(#|\||>|<|[-*+]\s|\d+\.\s|!\[|---|===)")
_LINK = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
_EMPHASIS = re.compile(r"(\*\*|__|\*|`)")


def first_heading(body: str) -> str | None:
    """Return the text of the first ``#`` heading in ``body``, if any."""
    match = H1_PATTERN.search(body)
    return match.group(1).strip() if match else None


def strip_first_heading(body: str) -> str:
    """Remove the first ``#`` heading line and the blank lines after it."""
    match = H1_PATTERN.search(body)
    if match is None:
        return body.strip("\n")
    return (body[: match.start()] + body[match.end() :]).strip("\n")


def summarize(body: str, limit: int = DESCRIPTION_LIMIT) -> str:
    """Return the first prose line of ``body``, truncated to ``limit`` chars.

    Headings, list items, tables, quotes and fenced code are skipped.

    >>> summarize("# Pets\\n\\n```\\nx\\n```\\nManage the *pets* store.")
    'Manage the pets store.'
    """
    in_fence = False
    for line in body.splitlines():
        if _FENCE.match(line):
            in_fence = not in_fence
            continue
        if in_fence or not line.strip() or _NON_PROSE.match(line):
            continue
        text = _EMPHASIS.sub("", _LINK.sub(r"\1", line)).strip()
        if not text:
            continue
        if len(text) > limit:
            return text[: limit - 3].rstrip() + "..."
        return text
    return ""


def build_llms_index(site_title: str, pages: typ.Sequence[PageSource]) -> str:
    """Return ``llms.txt``: one link line per page in navigation order."""
    lines = [f"# {site_title}", ""]
    for page in pages:
        line = f"- [{page.nav_title}]({page.href})"
        description = summarize(page.body)
        if description:
            line = f"{line}: {description}"
        lines.append(line)
    return "\n".join(lines) + "\n"


def build_llms_full(pages: typ.Sequence[PageSource]) -> str:
    """Return ``llms-full.txt``: every page body under its own title boundary."""
    blocks = [
        f"# {page.title}\n\n{strip_first_heading(page.body)}".rstrip()
        for page in pages
    ]
    return "\n\n---\n\n".join(blocks) + "\n"


__all__ = [
    "build_llms_full",
    "build_llms_index",
    "first_heading",
    "strip_first_heading",
    "summarize",
]
