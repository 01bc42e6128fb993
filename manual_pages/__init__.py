"""Render HR enablement manuals from structured YAML content.

This package exposes the ``manual`` command used locally and in CI to lint
manual content and build the static HTML pages and index.

Exports
-------
- ``app``: Cyclopts application with the ``build``, ``lint`` and
  ``check-diagram`` commands.
- ``main``: Convenience function that invokes the app.

Examples
--------
>>> from manual_pages import app
>>> app.name
('manual',)
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
