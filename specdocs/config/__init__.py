"""Load and validate configuration for specdocs runs.

This subpackage parses the optional ``openapi-docs.yaml`` file, merges it with
command-line overrides and the ``OPPER_API_KEY`` environment variable, and
produces typed dataclasses (:class:`GeneratorConfig`, :class:`SiteBranding`)
that the orchestrator and site renderer consume. The primary entry point is
:func:`load_config`.

Examples
--------
>>> from specdocs.config import load_config
>>> config = load_config(overrides={"spec": "petstore.yaml"}, environ={})
>>> config.output.as_posix()
'docs'
"""

from .loader import load_config, load_site_branding, save_site_branding
from .models import (
    DEFAULT_MODEL,
    DEFAULT_SITE_TITLE,
    ConfigError,
    GeneratorConfig,
    SiteBranding,
)

__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_SITE_TITLE",
    "ConfigError",
    "GeneratorConfig",
    "SiteBranding",
    "load_config",
    "load_site_branding",
    "save_site_branding",
]
