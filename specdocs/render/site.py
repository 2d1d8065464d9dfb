"""Render a generated docs directory into a static HTML site."""

from __future__ import annotations

import logging
import shutil
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from specdocs._constants import (
    LLMS_FULL_NAME,
    LLMS_INDEX_NAME,
    SITE_DIRNAME,
    STYLESHEET_NAME,
)
from specdocs.config import load_site_branding
from specdocs.manifest import load_manifest

from .highlighter import DEFAULT_STYLE, CodeHighlighter
from .link_rewriter import page_href
from .llms import build_llms_full, build_llms_index, first_heading
from .models import PageSource
from .navigation import build_navigation, root_prefix
from .renderer import HtmlContentRenderer

if typ.TYPE_CHECKING:
    from specdocs.config import SiteBranding
    from specdocs.manifest import Manifest

logger = logging.getLogger(__name__)

PAGE_TEMPLATE = "page.jinja"


class SiteRenderer:
    """Turn manifest-listed markdown sections into a navigable HTML site."""

    def __init__(
        self,
        docs_dir: Path,
        *,
        templates_dir: Path | None = None,
        branding: SiteBranding | None = None,
        pygments_style: str = DEFAULT_STYLE,
    ) -> None:
        """Initialize the renderer.

        Parameters
        ----------
        docs_dir : Path
            Directory holding the manifest and the section markdown files.
        templates_dir : Path, optional
            Directory containing ``page.jinja`` and ``style.css``; defaults to
            the package templates.
        branding : SiteBranding, optional
            Title and icon override; read from the site sidecar when omitted.
        pygments_style : str, optional
            Pygments style used for code blocks.
        """
        self.docs_dir = Path(docs_dir)
        self.site_dir = self.docs_dir / SITE_DIRNAME
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        self.branding = branding
        self.pygments_style = pygments_style
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template(PAGE_TEMPLATE)

    def run(self) -> list[Path]:
        """Render every section and write the supporting artifacts.

        Returns
        -------
        list[Path]
            Every file written under the site directory, pages first.

        Raises
        ------
        FileNotFoundError
            When the manifest, a section source or the configured icon is
            missing.
        """
        manifest = load_manifest(self.docs_dir)
        if manifest is None:
            msg = f"No manifest found in {self.docs_dir}. Run 'specdocs generate' first."
            raise FileNotFoundError(msg)
        branding = self.branding or load_site_branding(self.docs_dir)
        if branding.icon is not None and not branding.icon.is_file():
            msg = f"Icon not found: {branding.icon}"
            raise FileNotFoundError(msg)

        pages = self._load_pages(manifest)
        site_title = branding.display_title
        icon_name = branding.icon.name if branding.icon is not None else None
        self.site_dir.mkdir(parents=True, exist_ok=True)

        written: list[Path] = []
        with CodeHighlighter(self.pygments_style) as highlighter:
            renderer = HtmlContentRenderer(highlighter)
            for page in pages:
                content = renderer.render(page.body)
                root = root_prefix(page.href)
                html = self.template.render(
                    page=page,
                    content=content.html,
                    nav=build_navigation(pages, page.id, content.headings),
                    root=root,
                    site_title=site_title,
                    icon_name=icon_name,
                    stylesheet=STYLESHEET_NAME,
                )
                written.append(self._write(page.href, html))
                logger.info("  Rendered: %s", page.href)
            stylesheet = self._static_stylesheet() + "\n" + highlighter.stylesheet + "\n"

        written.append(self._write(STYLESHEET_NAME, stylesheet))
        written.append(self._write(LLMS_INDEX_NAME, build_llms_index(site_title, pages)))
        written.append(self._write(LLMS_FULL_NAME, build_llms_full(pages)))
        for page in pages:
            written.append(self._write(page.source_path, page.body))
        if branding.icon is not None and icon_name is not None:
            target = self.site_dir / icon_name
            shutil.copyfile(branding.icon, target)
            written.append(target)
        logger.info("Site rendered: %d page(s) in %s", len(pages), self.site_dir)
        return written

    def _load_pages(self, manifest: Manifest) -> list[PageSource]:
        pages: list[PageSource] = []
        for section_id, entry in manifest.ordered_entries():
            source = self.docs_dir / entry.output_path
            if not source.is_file():
                logger.warning(
                    "Skipping %s: %s has not been generated", section_id, source
                )
                continue
            body = source.read_text(encoding="utf-8")
            title = first_heading(body) or entry.title or section_id
            pages.append(
                PageSource(
                    id=section_id,
                    title=title,
                    nav_title=entry.title or title,
                    source_path=entry.output_path,
                    href=page_href(entry.output_path),
                    group=entry.group,
                    body=body,
                )
            )
        return pages

    def _static_stylesheet(self) -> str:
        return (self.templates_dir / STYLESHEET_NAME).read_text(encoding="utf-8")

    def _write(self, relative: str, text: str) -> Path:
        path = self.site_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path


__all__ = ["SiteRenderer"]
