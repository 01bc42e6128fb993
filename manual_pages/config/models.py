"""Typed dataclasses describing manual site configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class ThemeConfig:
    """Visual theming applied to generated manual pages."""

    site_name: str = "People Operations"
    manual_label: str = "Enablement Manual"
    tagline: str = "Guides, reference tables and workflows for HR administrators."


@dc.dataclass(slots=True)
class ManualConfig:
    """A fully resolved manual definition sourced from YAML config."""

    key: str
    label: str
    content_dir: Path
    description: str
    page_title_suffix: str
    filename_prefix: str
    output_dir: Path
    pygments_style: str
    breadcrumb_separator: str
    footer_note: str
    theme: ThemeConfig


@dc.dataclass(slots=True)
class SiteConfig:
    """Collection of manual configs alongside shared defaults."""

    manuals: dict[str, ManualConfig]
    default_manual: str | None = None
    index_output: Path = Path("public/index.html")
    theme: ThemeConfig = dc.field(default_factory=ThemeConfig)

    def get_manual(self, manual_id: str | None) -> ManualConfig:
        """Return the requested manual or fall back to the configured default."""
        if manual_id is None:
            return self._get_default_manual()
        try:
            return self.manuals[manual_id]
        except KeyError as exc:
            available = ", ".join(sorted(self.manuals))
            msg = f"Unknown manual '{manual_id}'. Known manuals: {available}"
            raise SiteConfigError(msg) from exc

    def _get_default_manual(self) -> ManualConfig:
        """Return the configured default manual or the first defined one."""
        if self.default_manual and self.default_manual in self.manuals:
            return self.manuals[self.default_manual]
        if not self.manuals:  # pragma: no cover - loader rejects this
            msg = "No manuals configured."
            raise SiteConfigError(msg)
        first_key = next(iter(self.manuals))
        return self.manuals[first_key]


__all__ = ["ManualConfig", "SiteConfig", "SiteConfigError", "ThemeConfig"]
