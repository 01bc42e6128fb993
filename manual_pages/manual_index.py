"""Build and render the landing page listing every generated manual.

The builder reads the metadata that
:class:`~manual_pages.generator.ManualPageGenerator` writes next to each
manual's pages and renders a table of contents with section numbers and
reading times. Manuals that have not been built yet are skipped.

>>> from pathlib import Path
>>> from manual_pages.config import load_site_config
>>> from manual_pages.manual_index import ManualIndexBuilder
>>> site = load_site_config(Path("config/manuals.yaml"))  # doctest: +SKIP
>>> ManualIndexBuilder(site).run()  # doctest: +SKIP
PosixPath('public/index.html')
"""

from __future__ import annotations

import json
import os
import typing as typ
from pathlib import Path

import structlog
from jinja2 import Environment, FileSystemLoader, select_autoescape

from ._constants import PAGE_META_TEMPLATE

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from .config import ManualConfig, SiteConfig

log = structlog.get_logger(__name__)


class ManualIndexBuilder:
    """Render a landing page enumerating generated manuals."""

    def __init__(
        self, site_config: SiteConfig, *, templates_dir: Path | None = None
    ) -> None:
        """Initialize the index builder.

        Parameters
        ----------
        site_config : SiteConfig
            Parsed site configuration (from
            :func:`manual_pages.config.load_site_config`).
        templates_dir : Path, optional
            Directory containing the Jinja templates. Defaults to the
            ``manual_pages/templates`` directory when ``None``.
        """
        self.site_config = site_config
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template("manual_index.jinja")

    def run(self) -> Path:
        """Render the index HTML file to the configured output path."""
        entries = self._gather_entries()
        output_path = self.site_config.index_output
        output_path.parent.mkdir(parents=True, exist_ok=True)
        html = self.template.render(theme=self.site_config.theme, manuals=entries)
        output_path.write_text(html, encoding="utf-8")
        log.info("index_written", path=str(output_path), manuals=len(entries))
        return output_path

    def _gather_entries(self) -> list[dict[str, typ.Any]]:
        """Collect one entry per built manual, in configuration order."""
        entries: list[dict[str, typ.Any]] = []
        index_root = self.site_config.index_output.parent
        for manual in self.site_config.manuals.values():
            metadata = _read_manual_metadata(manual)
            if metadata is None:
                log.warning("manual_not_built", manual=manual.key)
                continue
            first_file = manual.output_dir / metadata["first_file"]
            sections = [
                {
                    "id": item["id"],
                    "number": item.get("number", ""),
                    "title": item["title"],
                    "parent_id": item.get("parent_id"),
                    "read_time_minutes": item.get("read_time_minutes", 0),
                    "href": _relativize(manual.output_dir / item["file"], index_root),
                }
                for item in metadata.get("sections", [])
            ]
            entries.append(
                {
                    "key": manual.key,
                    "label": manual.label or metadata.get("title", manual.key),
                    "description": manual.description,
                    "href": _relativize(first_file, index_root),
                    "read_time_minutes": metadata.get("read_time_minutes", 0),
                    "sections": sections,
                }
            )
        return entries


def _read_manual_metadata(manual: ManualConfig) -> dict[str, typ.Any] | None:
    """Return the metadata written for ``manual``, or None when it is absent."""
    meta_path = manual.output_dir / PAGE_META_TEMPLATE.format(key=manual.key)
    if not meta_path.exists():
        return None
    try:
        payload = json.loads(meta_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):  # pragma: no cover - IO guard
        return None
    if not isinstance(payload, dict) or not payload.get("first_file"):
        return None
    return payload


def _relativize(target: Path, relative_to: Path) -> str:
    """Return the POSIX-relative path from ``relative_to`` to ``target``."""
    return Path(os.path.relpath(target, start=relative_to)).as_posix()


__all__ = ["ManualIndexBuilder"]
