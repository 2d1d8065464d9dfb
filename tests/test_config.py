"""Tests for configuration loading and the site branding sidecar."""

from __future__ import annotations

from pathlib import Path

import pytest

from specdocs.config import (
    DEFAULT_MODEL,
    ConfigError,
    GeneratorConfig,
    SiteBranding,
    load_config,
    load_site_branding,
    save_site_branding,
)


def _write_config(path: Path, text: str) -> Path:
    path.write_text(text.strip() + "\n", encoding="utf-8")
    return path


def test_file_values_are_loaded(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path / "openapi-docs.yaml",
        """
spec: ./openapi.yaml
output: site-docs
instructions: Prefer Python examples.
model: anthropic/claude
site: true
title: Pet Docs
planner: rules
""",
    )

    config = load_config(config_path, environ={})

    assert config == GeneratorConfig(
        spec="./openapi.yaml",
        output=Path("site-docs"),
        instructions="Prefer Python examples.",
        model="anthropic/claude",
        site=True,
        title="Pet Docs",
        planner="rules",
    )


def test_cli_overrides_win_and_none_is_ignored(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path / "openapi-docs.yaml", "spec: file.yaml\nmodel: from-file\n"
    )

    config = load_config(
        config_path,
        overrides={"spec": "cli.yaml", "model": None, "force": True},
        environ={},
    )

    assert config.spec == "cli.yaml"
    assert config.model == "from-file"
    assert config.force is True


def test_force_is_never_read_from_file(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path / "openapi-docs.yaml", "spec: file.yaml\nforce: true\n"
    )

    assert load_config(config_path, environ={}).force is False


def test_default_file_in_working_directory_is_optional(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    config = load_config(overrides={"spec": "api.json"}, environ={})

    assert config.model == DEFAULT_MODEL
    assert config.output == Path("docs")
    assert config.planner == "agent"


def test_default_file_in_working_directory_is_used(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _write_config(tmp_path / "openapi-docs.yaml", "spec: from-default.yaml\n")
    monkeypatch.chdir(tmp_path)

    assert load_config(environ={}).spec == "from-default.yaml"


def test_explicit_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml", environ={})


def test_missing_spec_raises(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "openapi-docs.yaml", "model: x\n")

    with pytest.raises(ConfigError, match="No spec"):
        load_config(config_path, environ={})


def test_unknown_planner_raises(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ConfigError, match="Unknown planner"):
        load_config(overrides={"spec": "a.yaml", "planner": "magic"}, environ={})


def test_non_mapping_file_raises(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "openapi-docs.yaml", "- spec\n")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(config_path, environ={})


def test_api_key_falls_back_to_environment(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "openapi-docs.yaml", "spec: a.yaml\n")

    config = load_config(config_path, environ={"OPPER_API_KEY": "secret"})

    assert config.require_api_key() == "secret"


def test_missing_api_key_raises(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "openapi-docs.yaml", "spec: a.yaml\n")

    with pytest.raises(ConfigError, match="OPPER_API_KEY"):
        load_config(config_path, environ={}).require_api_key()


def test_branding_sidecar_round_trip(tmp_path: Path) -> None:
    icon = tmp_path / "logo.png"
    icon.write_bytes(b"png")

    save_site_branding(tmp_path, SiteBranding(title="Docs", icon=icon))

    branding = load_site_branding(tmp_path)
    assert branding.title == "Docs"
    assert branding.icon == icon
    assert branding.display_title == "Docs"


def test_absent_sidecar_uses_defaults(tmp_path: Path) -> None:
    branding = load_site_branding(tmp_path)

    assert branding == SiteBranding()
    assert branding.display_title == "API Docs"
