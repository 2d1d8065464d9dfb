"""Incremental API documentation generator and static site renderer.

This package exposes the ``specdocs`` CLI, which plans documentation
sections from an OpenAPI/Swagger spec, regenerates only the sections whose
inputs changed, and renders the results into a static site.

Exports
-------
- ``app``: Cyclopts application with ``generate``, ``render`` and ``serve``.
- ``main``: Convenience function that invokes the app.

Examples
--------
>>> from specdocs import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
