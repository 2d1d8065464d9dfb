"""End-to-end tests for rendering a docs directory into a static site.

The fixtures write a manifest plus markdown sections exactly as ``generate``
leaves them, run :class:`specdocs.render.SiteRenderer`, and inspect the
written pages with BeautifulSoup.
"""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from specdocs._constants import SITE_CONFIG_FILENAME
from specdocs.agents import RulePlanner
from specdocs.config import ConfigError
from specdocs.manifest import Manifest, ManifestEntry, save_manifest
from specdocs.orchestrator import GenerationOrchestrator
from specdocs.render import SiteRenderer

if typ.TYPE_CHECKING:
    from conftest import RecordingWriter

    from specdocs.config import GeneratorConfig

SECTIONS: list[tuple[str, str, str, str | None, str]] = [
    (
        "overview",
        "index.md",
        "Overview",
        None,
        "# Overview\n\nThe Petstore API manages pets.\n\n## Base URL\n\nUse HTTPS.\n",
    ),
    (
        "tag:pets",
        "endpoints/pets.md",
        "Pets",
        "Endpoints",
        "# Pets\n\nCreate and list pets.\n\n"
        "## Create a pet\n\n"
        "See the [Pet schema](../schemas.md#pet).\n\n"
        "```bash\ncurl -X POST https://api.example.com/pets\n```\n\n"
        "### Request body\n\nJSON.\n",
    ),
    (
        "auth",
        "authentication.md",
        "Authentication",
        None,
        "# Authentication\n\nSend an API key.\n",
    ),
    (
        "tag:store",
        "endpoints/store.md",
        "Store",
        "Endpoints",
        "# Store\n\nPlace orders.\n",
    ),
    (
        "schemas",
        "schemas.md",
        "Schemas",
        None,
        "# Schemas\n\nData models.\n\n## Pet\n\nA pet.\n",
    ),
]


@pytest.fixture
def docs_tree(tmp_path: Path) -> Path:
    """Write markdown sections and a manifest into a fresh docs directory."""
    docs = tmp_path / "docs"
    entries: dict[str, ManifestEntry] = {}
    for order, (section_id, path, title, group, body) in enumerate(SECTIONS):
        target = docs / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(body, encoding="utf-8")
        entries[section_id] = ManifestEntry(
            content_hash=f"h{order}",
            output_path=path,
            generated_at="2026-01-01T00:00:00Z",
            title=title,
            group=group,
            order=order,
        )
    save_manifest(docs, Manifest(spec_hash="s", instructions_hash="i", sections=entries))
    return docs


def _soup(path: Path) -> BeautifulSoup:
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


def test_renders_pages_with_grouped_navigation(docs_tree: Path) -> None:
    written = SiteRenderer(docs_tree).run()
    site = docs_tree / "_site"

    assert site / "index.html" in written
    soup = _soup(site / "endpoints" / "pets.html")
    top_level = soup.select("ul.nav > li")
    labels = [
        (li.select_one(".nav-group-label") or li.a).get_text(strip=True)
        for li in top_level
    ]
    assert labels == ["Overview", "Endpoints", "Authentication", "Schemas"]
    group_links = [a.get_text(strip=True) for a in soup.select("li.nav-group > ul > li > a")]
    assert group_links == ["Pets", "Store"]


def test_active_page_is_marked_with_resolvable_toc(docs_tree: Path) -> None:
    SiteRenderer(docs_tree).run()
    soup = _soup(docs_tree / "_site" / "endpoints" / "pets.html")

    active = soup.select("li.active")
    assert len(active) == 1
    assert active[0].a.get_text(strip=True) == "Pets"
    toc_targets = [a["href"] for a in active[0].select("ul.toc a")]
    assert toc_targets == ["#create-a-pet", "#request-body"]
    for target in toc_targets:
        assert soup.find(id=target[1:]) is not None


def test_relative_paths_follow_page_depth(docs_tree: Path) -> None:
    SiteRenderer(docs_tree).run()
    nested = _soup(docs_tree / "_site" / "endpoints" / "pets.html")
    top = _soup(docs_tree / "_site" / "index.html")

    assert nested.find("link", rel="stylesheet")["href"] == "../style.css"
    assert top.find("link", rel="stylesheet")["href"] == "./style.css"
    nav_hrefs = [a["href"] for a in nested.select("ul.nav > li > a")]
    assert "../index.html" in nav_hrefs
    body_link = nested.select_one("article a[href*='schemas']")
    assert body_link["href"] == "../schemas.html#pet"


def test_code_blocks_are_highlighted_and_stylesheet_written(docs_tree: Path) -> None:
    SiteRenderer(docs_tree).run()
    site = docs_tree / "_site"
    soup = _soup(site / "endpoints" / "pets.html")

    block = soup.select_one("article div.highlight")
    assert block is not None
    assert block["data-language"] == "bash"
    css = (site / "style.css").read_text(encoding="utf-8")
    assert ".sidebar" in css
    assert ".highlight" in css


def test_writes_llms_indexes_and_markdown_copies(docs_tree: Path) -> None:
    SiteRenderer(docs_tree).run()
    site = docs_tree / "_site"

    index = (site / "llms.txt").read_text(encoding="utf-8").splitlines()
    assert index[0] == "# API Docs"
    assert index[2] == "- [Overview](index.html): The Petstore API manages pets."
    assert index[3] == "- [Pets](endpoints/pets.html): Create and list pets."
    full = (site / "llms-full.txt").read_text(encoding="utf-8")
    assert full.count("\n---\n") == len(SECTIONS) - 1
    assert full.count("# Pets\n") == 1
    copy = site / "endpoints" / "pets.md"
    assert copy.read_text(encoding="utf-8") == SECTIONS[1][4]


def test_branding_sidecar_sets_title_and_icon(docs_tree: Path) -> None:
    (docs_tree / "logo.svg").write_text("<svg/>", encoding="utf-8")
    (docs_tree / SITE_CONFIG_FILENAME).write_text(
        json.dumps({"title": "Petstore Docs", "icon": "logo.svg"}), encoding="utf-8"
    )

    SiteRenderer(docs_tree).run()
    site = docs_tree / "_site"
    soup = _soup(site / "endpoints" / "store.html")

    assert soup.select_one(".logo span").get_text(strip=True) == "Petstore Docs"
    assert soup.select_one(".logo img")["src"] == "../logo.svg"
    assert soup.title.get_text() == "Store | Petstore Docs"
    assert (site / "logo.svg").read_text(encoding="utf-8") == "<svg/>"


def test_missing_icon_is_fatal(docs_tree: Path) -> None:
    (docs_tree / SITE_CONFIG_FILENAME).write_text(
        json.dumps({"icon": "missing.png"}), encoding="utf-8"
    )

    with pytest.raises(FileNotFoundError, match="Icon not found"):
        SiteRenderer(docs_tree).run()


def test_invalid_sidecar_is_a_config_error(docs_tree: Path) -> None:
    (docs_tree / SITE_CONFIG_FILENAME).write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ConfigError):
        SiteRenderer(docs_tree).run()


def test_missing_manifest_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="No manifest"):
        SiteRenderer(tmp_path).run()


def test_sections_without_source_are_skipped(
    generator_config: GeneratorConfig,
    docs_dir: Path,
    recording_writer: RecordingWriter,
) -> None:
    recording_writer.failing = {"tag:store"}
    report = GenerationOrchestrator(
        generator_config, RulePlanner(), writer_factory=lambda _index: recording_writer
    ).run()
    assert list(report.failed) == ["tag:store"]

    SiteRenderer(docs_dir).run()
    site = docs_dir / "_site"

    assert (site / "endpoints" / "pets.html").is_file()
    assert not (site / "endpoints" / "store.html").exists()
    nav_hrefs = [a["href"] for a in _soup(site / "index.html").select("ul.nav a")]
    assert "./endpoints/store.html" not in nav_hrefs
    assert "./endpoints/pets.html" in nav_hrefs
    assert "endpoints/store.html" not in (site / "llms.txt").read_text(encoding="utf-8")
