"""Typed dataclasses describing specdocs configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

DEFAULT_MODEL = "openai/gpt-5.2"
DEFAULT_OUTPUT_DIR = Path("docs")
DEFAULT_API_BASE = "https://api.opper.ai/v2"
DEFAULT_SITE_TITLE = "API Docs"
PLANNER_KINDS = ("agent", "rules")


class ConfigError(ValueError):
    """Raised when the configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class GeneratorConfig:
    """Settings for one ``generate`` run.

    Attributes
    ----------
    spec : str
        Path or URL of the API specification.
    output : Path
        Docs directory receiving markdown sections and the manifest.
    instructions : str | None
        Free-form writing instructions forwarded to the planner and writer.
    model : str
        Model identifier requested from the hosted agent API.
    site : bool
        Render the static site after generation.
    force : bool
        Regenerate every section regardless of the manifest.
    title : str | None
        Site title shown in the sidebar header.
    icon : Path | None
        Icon copied into the site and shown next to the title.
    planner : str
        ``"agent"`` for the hosted planner, ``"rules"`` for the offline one.
    api_key : str | None
        Credential for the hosted agent API.
    api_base : str
        Base URL of the hosted agent API.
    """

    spec: str
    output: Path = DEFAULT_OUTPUT_DIR
    instructions: str | None = None
    model: str = DEFAULT_MODEL
    site: bool = False
    force: bool = False
    title: str | None = None
    icon: Path | None = None
    planner: str = "agent"
    api_key: str | None = None
    api_base: str = DEFAULT_API_BASE

    def require_api_key(self) -> str:
        """Return the API key or raise when none is configured."""
        if not self.api_key:
            msg = (
                "OPPER_API_KEY environment variable is required. "
                "Get your key at https://opper.ai"
            )
            raise ConfigError(msg)
        return self.api_key

    def branding(self) -> SiteBranding:
        """Return the branding recorded for the site renderer."""
        icon = self.icon.resolve() if self.icon else None
        return SiteBranding(title=self.title, icon=icon)


@dc.dataclass(slots=True)
class SiteBranding:
    """Optional sidebar branding read by the site renderer."""

    title: str | None = None
    icon: Path | None = None

    @property
    def display_title(self) -> str:
        return self.title or DEFAULT_SITE_TITLE


__all__ = [
    "DEFAULT_API_BASE",
    "DEFAULT_MODEL",
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_SITE_TITLE",
    "PLANNER_KINDS",
    "ConfigError",
    "GeneratorConfig",
    "SiteBranding",
]
