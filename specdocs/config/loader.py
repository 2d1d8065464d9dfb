"""Load generator configuration and site branding into typed dataclasses."""

from __future__ import annotations

import json
import os
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .._constants import DEFAULT_CONFIG_FILENAME, SITE_CONFIG_FILENAME
from .models import (
    DEFAULT_API_BASE,
    DEFAULT_MODEL,
    DEFAULT_OUTPUT_DIR,
    PLANNER_KINDS,
    ConfigError,
    GeneratorConfig,
    SiteBranding,
)


def load_config(
    path: Path | None = None,
    *,
    overrides: typ.Mapping[str, typ.Any] | None = None,
    environ: typ.Mapping[str, str] | None = None,
) -> GeneratorConfig:
    """Merge the YAML config file with command-line overrides.

    Parameters
    ----------
    path : Path, optional
        Explicit configuration file. When ``None`` the default
        ``openapi-docs.yaml`` in the working directory is used if it exists.
    overrides : Mapping[str, Any], optional
        Values supplied on the command line; ``None`` values are ignored so
        file settings show through.
    environ : Mapping[str, str], optional
        Environment used for the ``OPPER_API_KEY`` fallback; defaults to
        ``os.environ``.

    Returns
    -------
    GeneratorConfig
        Fully merged configuration.

    Raises
    ------
    FileNotFoundError
        If an explicitly requested configuration file does not exist.
    ConfigError
        If the file is not a mapping, no spec is configured, or the planner
        kind is unknown.
    """
    env = os.environ if environ is None else environ
    file_values = _read_config_file(path)
    cli_values = {key: value for key, value in (overrides or {}).items() if value is not None}

    def pick(key: str, default: typ.Any = None) -> typ.Any:
        if key in cli_values:
            return cli_values[key]
        return file_values.get(key, default)

    spec = pick("spec")
    if not spec:
        msg = (
            "No spec file provided. Use --spec or set 'spec' in "
            f"{DEFAULT_CONFIG_FILENAME}"
        )
        raise ConfigError(msg)

    planner = str(pick("planner", "agent"))
    if planner not in PLANNER_KINDS:
        msg = f"Unknown planner {planner!r}; expected one of {', '.join(PLANNER_KINDS)}."
        raise ConfigError(msg)

    icon = pick("icon")
    return GeneratorConfig(
        spec=str(spec),
        output=Path(pick("output", DEFAULT_OUTPUT_DIR)),
        instructions=pick("instructions"),
        model=str(pick("model", DEFAULT_MODEL)),
        site=bool(pick("site", False)),
        force=bool(cli_values.get("force", False)),
        title=pick("title"),
        icon=Path(icon) if icon else None,
        planner=planner,
        api_key=pick("api_key") or env.get("OPPER_API_KEY"),
        api_base=str(pick("api_base", DEFAULT_API_BASE)),
    )


def _read_config_file(path: Path | None) -> dict[str, typ.Any]:
    if path is None:
        path = Path(DEFAULT_CONFIG_FILENAME)
        if not path.exists():
            return {}
    elif not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level configuration structure must be a mapping."
        raise ConfigError(msg)
    return dict(loaded)


def load_site_branding(docs_dir: Path) -> SiteBranding:
    """Read the site sidecar from ``docs_dir``; absent means defaults.

    Raises
    ------
    ConfigError
        If the sidecar exists but is not a JSON object.
    """
    path = docs_dir / SITE_CONFIG_FILENAME
    if not path.exists():
        return SiteBranding()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"Site config '{path}' is not valid JSON: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(payload, dict):
        msg = f"Site config '{path}' must be a JSON object."
        raise ConfigError(msg)
    icon = payload.get("icon")
    icon_path = Path(icon) if icon else None
    if icon_path is not None and not icon_path.is_absolute():
        icon_path = docs_dir / icon_path
    return SiteBranding(title=payload.get("title") or None, icon=icon_path)


def save_site_branding(docs_dir: Path, branding: SiteBranding) -> Path:
    """Write the site sidecar consumed by :func:`load_site_branding`."""
    payload: dict[str, str] = {}
    if branding.title:
        payload["title"] = branding.title
    if branding.icon:
        payload["icon"] = str(branding.icon)
    path = docs_dir / SITE_CONFIG_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return path


__all__ = ["load_config", "load_site_branding", "save_site_branding"]
