"""Contracts for the content producers driven by the orchestrator."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from specdocs.models import DocPlan, Section, SectionOutput
    from specdocs.spec_index import SpecIndex


class Planner(typ.Protocol):
    """Turn a spec index into an ordered documentation plan."""

    def plan(self, index: SpecIndex, instructions: str | None) -> DocPlan: ...


class Writer(typ.Protocol):
    """Produce the title and markdown body for one section.

    Implementations may be plain functions of the protocol shape or
    coroutines; the orchestrator awaits coroutine results and runs blocking
    implementations in worker threads.
    """

    def write(
        self, section: Section, plan: DocPlan
    ) -> SectionOutput | typ.Awaitable[SectionOutput]: ...


__all__ = ["Planner", "Writer"]
