"""Cyclopts CLI entrypoint for generating and rendering API documentation.

The ``specdocs`` console script turns an OpenAPI or Swagger specification
into one markdown file per documentation section, regenerating only the
sections whose inputs changed, and optionally renders those files into a
static HTML site with ``llms.txt`` indexes.

Examples
--------
Generate docs for a local spec and render the site:

>>> from specdocs.cli import app
>>> app(["generate", "--spec", "petstore.yaml", "--site"])  # doctest: +SKIP

Re-render an existing docs directory:

>>> app(["render", "--dir", "docs"])  # doctest: +SKIP
"""

from __future__ import annotations

import functools
import http.server
import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import SITE_DIRNAME
from .agents import AgentClient, RemotePlanner, RemoteWriter, RulePlanner
from .config import load_config, save_site_branding
from .config.models import DEFAULT_OUTPUT_DIR
from .orchestrator import GenerationOrchestrator
from .render import SiteRenderer

if typ.TYPE_CHECKING:
    from .agents import Planner
    from .config import GeneratorConfig

DEFAULT_PORT = 3333
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = App(name="specdocs", config=cyclopts.config.Env("SPECDOCS_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT
    )


def _build_planner(settings: GeneratorConfig, client: AgentClient) -> Planner:
    if settings.planner == "rules":
        return RulePlanner()
    return RemotePlanner(client)


@app.command(help="Generate markdown documentation sections from an API spec.")
def generate(
    *,
    spec: typ.Annotated[
        str | None, Parameter(help="Path or URL of the OpenAPI/Swagger spec")
    ] = None,
    output: typ.Annotated[
        Path | None, Parameter(help="Docs output directory (default: docs)")
    ] = None,
    instructions: typ.Annotated[
        str | None, Parameter(help="Extra writing instructions for every section")
    ] = None,
    model: typ.Annotated[
        str | None, Parameter(help="Model identifier for the agent API")
    ] = None,
    site: typ.Annotated[
        bool | None, Parameter(help="Render the static site after generating")
    ] = None,
    force: typ.Annotated[
        bool, Parameter(help="Regenerate every section, ignoring the manifest")
    ] = False,
    title: typ.Annotated[str | None, Parameter(help="Site title")] = None,
    icon: typ.Annotated[Path | None, Parameter(help="Site icon file")] = None,
    planner: typ.Annotated[
        typ.Literal["agent", "rules"] | None,
        Parameter(help="Plan with the agent API or the built-in rules"),
    ] = None,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to openapi-docs.yaml")
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Enable debug logging")] = False,
) -> None:
    """Generate documentation sections, then optionally render the site.

    Parameters
    ----------
    spec : str or None, optional
        Spec location; falls back to ``spec`` in the configuration file.
    output : Path or None, optional
        Directory receiving the markdown sections and the manifest.
    instructions : str or None, optional
        Free-form instructions; changing them regenerates every section.
    model : str or None, optional
        Model identifier forwarded to the agent API.
    site : bool or None, optional
        Render ``<output>/_site`` once generation finishes.
    force : bool, optional
        Ignore the manifest and regenerate everything.
    title : str or None, optional
        Site title recorded for the renderer.
    icon : Path or None, optional
        Icon recorded for the renderer.
    planner : {"agent", "rules"} or None, optional
        Planner implementation; defaults to ``"agent"``.
    config : Path or None, optional
        Explicit configuration file; ``openapi-docs.yaml`` is used when
        present and this is omitted.
    verbose : bool, optional
        Log at DEBUG level.

    Raises
    ------
    ConfigError
        If no spec is configured or the API key is missing.
    ParseError
        If the spec cannot be loaded.
    """
    _configure_logging(verbose)
    settings = load_config(
        config,
        overrides={
            "spec": spec,
            "output": output,
            "instructions": instructions,
            "model": model,
            "site": site,
            "force": force,
            "title": title,
            "icon": icon,
            "planner": planner,
        },
    )
    client = AgentClient(
        api_key=settings.require_api_key(),
        model=settings.model,
        api_base=settings.api_base,
    )
    try:
        orchestrator = GenerationOrchestrator(
            settings,
            _build_planner(settings, client),
            writer_factory=lambda index: RemoteWriter(
                client, index, settings.instructions
            ),
        )
        report = orchestrator.run()
    finally:
        client.close()

    for path in report.written:
        print(f"wrote {_format_path(path)}")
    for relative in report.removed:
        print(f"removed {_format_path(settings.output / relative)}")
    if settings.site:
        sidecar = save_site_branding(settings.output, settings.branding())
        print(f"wrote {_format_path(sidecar)}")
        for path in SiteRenderer(settings.output).run():
            print(f"wrote {_format_path(path)}")


@app.command(help="Render an existing docs directory into a static HTML site.")
def render(
    *,
    dir: typ.Annotated[  # noqa: A002
        Path, Parameter(help="Docs directory containing the manifest")
    ] = DEFAULT_OUTPUT_DIR,
    verbose: typ.Annotated[bool, Parameter(help="Enable debug logging")] = False,
) -> None:
    """Render ``dir`` into ``dir/_site``.

    Raises
    ------
    FileNotFoundError
        If the manifest or the configured icon is missing.
    """
    _configure_logging(verbose)
    for path in SiteRenderer(dir).run():
        print(f"wrote {_format_path(path)}")


@app.command(help="Preview the rendered site with a local HTTP server.")
def serve(
    *,
    dir: typ.Annotated[  # noqa: A002
        Path, Parameter(help="Docs directory whose _site is served")
    ] = DEFAULT_OUTPUT_DIR,
    port: typ.Annotated[int, Parameter(help="Port to listen on")] = DEFAULT_PORT,
) -> None:
    """Serve ``dir/_site`` until interrupted.

    Raises
    ------
    FileNotFoundError
        If the site has not been rendered yet.
    """
    site_dir = dir / SITE_DIRNAME
    if not site_dir.is_dir():
        msg = f"No site found at {site_dir}. Run 'specdocs render' first."
        raise FileNotFoundError(msg)
    handler = functools.partial(
        http.server.SimpleHTTPRequestHandler, directory=str(site_dir)
    )
    with http.server.ThreadingHTTPServer(("", port), handler) as server:
        print(f"serving {_format_path(site_dir)} at http://localhost:{port}")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("stopped")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``specdocs`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
