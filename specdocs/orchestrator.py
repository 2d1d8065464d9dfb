"""Incremental generation of markdown sections from an API specification.

:class:`GenerationOrchestrator` builds the spec index, compares per-section
content hashes with the stored manifest, asks the writer for every stale
section concurrently, removes files whose sections left the plan, and
persists a fresh manifest.

Example
-------
>>> from pathlib import Path
>>> from specdocs.agents import RulePlanner
>>> from specdocs.config import GeneratorConfig
>>> from specdocs.orchestrator import GenerationOrchestrator
>>> config = GeneratorConfig(spec="petstore.yaml", output=Path("docs"))
>>> orchestrator = GenerationOrchestrator(
...     config, RulePlanner(), writer_factory=lambda index: my_writer
... )  # doctest: +SKIP
>>> report = orchestrator.run()  # doctest: +SKIP
>>> report.generated  # doctest: +SKIP
['overview', 'tag:pets']
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import datetime as dt
import inspect
import logging
import typing as typ
from pathlib import Path

from .hashing import compute_section_hash, compute_spec_hash, sha256_hex
from .manifest import Manifest, ManifestEntry, load_manifest, save_manifest
from .spec_index import build_spec_index

if typ.TYPE_CHECKING:
    from .agents.protocols import Planner, Writer
    from .config import GeneratorConfig
    from .models import DocPlan, Section, SectionOutput
    from .spec_index import SpecIndex

logger = logging.getLogger(__name__)

WriterFactory = typ.Callable[["SpecIndex"], "Writer"]


@dc.dataclass(slots=True)
class GenerationReport:
    """Outcome of one orchestrator run.

    Attributes
    ----------
    output_dir : Path
        Docs directory that was updated.
    up_to_date : bool
        ``True`` when the spec and instructions were unchanged and nothing ran.
    planned : list[str]
        Section ids in plan order.
    cached : list[str]
        Sections skipped because their content hash was unchanged.
    generated : list[str]
        Sections written in this run.
    failed : dict[str, str]
        Section id to error message for writer failures.
    written : list[Path]
        Markdown files written in this run.
    removed : list[str]
        Orphaned output paths deleted from disk.
    """

    output_dir: Path
    up_to_date: bool = False
    planned: list[str] = dc.field(default_factory=list)
    cached: list[str] = dc.field(default_factory=list)
    generated: list[str] = dc.field(default_factory=list)
    failed: dict[str, str] = dc.field(default_factory=dict)
    written: list[Path] = dc.field(default_factory=list)
    removed: list[str] = dc.field(default_factory=list)


class GenerationOrchestrator:
    """Decide which sections are stale, regenerate them, and record the result."""

    def __init__(
        self,
        config: GeneratorConfig,
        planner: Planner,
        writer_factory: WriterFactory,
    ) -> None:
        """Initialize the orchestrator.

        Parameters
        ----------
        config : GeneratorConfig
            Run settings: spec location, output directory, instructions, force.
        planner : Planner
            Produces the ordered section plan from the spec index.
        writer_factory : Callable[[SpecIndex], Writer]
            Builds the writer once the spec index exists.
        """
        self.config = config
        self.planner = planner
        self.writer_factory = writer_factory
        self.output_dir = Path(config.output)

    def run(self) -> GenerationReport:
        """Run one generation pass.

        Returns
        -------
        GenerationReport
            What was cached, generated, failed and removed.

        Raises
        ------
        ParseError
            When the spec cannot be loaded; nothing is written.
        PlanError
            When the plan contains duplicate ids or output paths.
        """
        logger.info("Parsing spec: %s", self.config.spec)
        index = build_spec_index(self.config.spec)
        logger.info("API: %s v%s", index.info["title"], index.info["version"])
        logger.info(
            "Tags: %s", ", ".join(tag["name"] for tag in index.tags) or "(none)"
        )
        logger.info("Schemas: %d", len(index.schemas))
        logger.info("Endpoints: %d", index.endpoint_count())

        spec_hash = compute_spec_hash(index)
        instructions_hash = sha256_hex(self.config.instructions or "")
        manifest = load_manifest(self.output_dir)
        report = GenerationReport(output_dir=self.output_dir)

        if (
            not self.config.force
            and manifest is not None
            and manifest.spec_hash == spec_hash
            and manifest.instructions_hash == instructions_hash
        ):
            logger.info("Spec and instructions unchanged. Nothing to regenerate.")
            report.up_to_date = True
            return report

        force_all = (
            self.config.force
            or manifest is None
            or manifest.instructions_hash != instructions_hash
        )
        if force_all and not self.config.force and manifest is not None:
            logger.info("Instructions changed. Regenerating all sections.")

        logger.info("Planning documentation structure...")
        plan = self.planner.plan(index, self.config.instructions)
        report.planned = [section.id for section in plan]
        logger.info("Plan: %d sections", len(plan))
        for section in plan:
            logger.info("  %s. %s (%s)", section.order, section.title, section.output_path)

        hashes = {section.id: compute_section_hash(section, index) for section in plan}
        stale = self._classify(plan, hashes, manifest, force_all, report)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        if stale:
            logger.info("Generating %d section(s)...", len(stale))
            writer = self.writer_factory(index)
            results = asyncio.run(self._write_all(writer, stale, plan))
            for section in plan:
                outcome = results.get(section.id)
                if outcome is None:
                    continue
                if isinstance(outcome, BaseException):
                    report.failed[section.id] = str(outcome) or type(outcome).__name__
                    continue
                report.written.append(self._persist(section, outcome))
                report.generated.append(section.id)
        else:
            logger.info("All sections up to date. Nothing to regenerate.")

        if manifest is not None:
            report.removed = self._remove_orphans(plan, manifest)

        self._write_manifest(
            plan, hashes, spec_hash, instructions_hash, report.failed
        )
        if report.failed:
            logger.warning(
                "%d section(s) skipped due to failure: %s",
                len(report.failed),
                ", ".join(report.failed),
            )
        logger.info("Generation complete. Output: %s", self.output_dir)
        return report

    def _classify(
        self,
        plan: DocPlan,
        hashes: typ.Mapping[str, str],
        manifest: Manifest | None,
        force_all: bool,
        report: GenerationReport,
    ) -> list[Section]:
        """Return sections needing regeneration, recording cached ones."""
        if force_all or manifest is None:
            return list(plan)
        stale: list[Section] = []
        for section in plan:
            cached = manifest.sections.get(section.id)
            if cached is not None and cached.content_hash == hashes[section.id]:
                logger.info("  [cached] %s", section.title)
                report.cached.append(section.id)
            else:
                stale.append(section)
        return stale

    async def _write_all(
        self, writer: Writer, sections: list[Section], plan: DocPlan
    ) -> dict[str, SectionOutput | BaseException]:
        """Invoke the writer for every section concurrently and settle all results."""

        async def _invoke(section: Section) -> SectionOutput:
            logger.info("  Writing: %s...", section.title)
            if inspect.iscoroutinefunction(writer.write):
                result = await writer.write(section, plan)
            else:
                result = await asyncio.to_thread(writer.write, section, plan)
            if inspect.isawaitable(result):
                result = await result
            logger.info("  Done: %s", section.title)
            return typ.cast("SectionOutput", result)

        outcomes = await asyncio.gather(
            *(_invoke(section) for section in sections), return_exceptions=True
        )
        results: dict[str, SectionOutput | BaseException] = {}
        for section, outcome in zip(sections, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning("  Failed: %s - %s", section.title, outcome)
            results[section.id] = outcome
        return results

    def _persist(self, section: Section, output: SectionOutput) -> Path:
        path = self.output_dir / section.output_path
        path.parent.mkdir(parents=True, exist_ok=True)
        body = output.markdown.strip("\n")
        path.write_text(f"# {output.title}\n\n{body}\n", encoding="utf-8")
        logger.info("  Wrote: %s", section.output_path)
        return path

    def _remove_orphans(self, plan: DocPlan, manifest: Manifest) -> list[str]:
        """Delete files recorded in ``manifest`` whose paths left the plan."""
        current = {section.output_path for section in plan}
        root = self.output_dir.resolve()
        removed: list[str] = []
        for section_id, entry in manifest.sections.items():
            if entry.output_path in current:
                continue
            target = (self.output_dir / entry.output_path).resolve()
            if not target.is_relative_to(root):
                logger.warning("Refusing to remove %s outside %s", target, root)
                continue
            try:
                target.unlink()
            except FileNotFoundError:
                continue
            logger.info(
                "  Removed orphan: %s (section %r no longer in plan)",
                entry.output_path,
                section_id,
            )
            removed.append(entry.output_path)
        return removed

    def _write_manifest(
        self,
        plan: DocPlan,
        hashes: typ.Mapping[str, str],
        spec_hash: str,
        instructions_hash: str,
        failed: typ.Mapping[str, str],
    ) -> None:
        """Record one entry per planned section.

        A section whose writer failed is stored with an empty hash and the spec
        hash is left blank, so the next run neither short-circuits nor treats
        the failed section as cached.
        """
        generated_at = dt.datetime.now(dt.UTC).isoformat().replace("+00:00", "Z")
        sections: dict[str, ManifestEntry] = {}
        for section in plan:
            content_hash = "" if section.id in failed else hashes[section.id]
            sections[section.id] = ManifestEntry(
                content_hash=content_hash,
                output_path=section.output_path,
                generated_at=generated_at,
                title=section.title,
                group=section.group,
                order=section.order,
            )
        save_manifest(
            self.output_dir,
            Manifest(
                spec_hash="" if failed else spec_hash,
                instructions_hash=instructions_hash,
                sections=sections,
            ),
        )


__all__ = ["GenerationOrchestrator", "GenerationReport", "WriterFactory"]
