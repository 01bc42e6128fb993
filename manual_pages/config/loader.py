"""Load manual site configuration YAML into typed dataclasses."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import _build_theme_config, _default_label, _merge_theme, _optional_str
from .models import ManualConfig, SiteConfig, SiteConfigError, ThemeConfig


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the manuals to build.

    Parameters
    ----------
    path : Path
        Filesystem path to the configuration file (for example,
        ``config/manuals.yaml``).

    Returns
    -------
    SiteConfig
        Parsed configuration with every manual's defaults resolved.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    SiteConfigError
        If the top level is not a mapping, no manuals are defined, or a manual
        omits ``content_dir``.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from manual_pages.config import load_site_config
    >>> config = load_site_config(Path("config/manuals.yaml"))  # doctest: +SKIP
    >>> config.get_manual(None).key  # doctest: +SKIP
    'appraisals'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise SiteConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    defaults = raw.get("defaults", {}) or {}

    manual_defaults = _ManualDefaults(
        theme=_build_theme_config(defaults.get("theme", {}) or {}),
        output_dir=Path(defaults.get("output_dir", "public")),
        filename_prefix=defaults.get("filename_prefix", ""),
        pygments_style=defaults.get("pygments_style", "monokai"),
        page_title_suffix=defaults.get("page_title_suffix", "Manual"),
        breadcrumb_separator=defaults.get("breadcrumb_separator", "›"),
        footer_note=defaults.get("footer_note", ""),
    )

    manuals_raw = raw.get("manuals") or {}
    if not manuals_raw:
        msg = "No manuals defined in configuration."
        raise SiteConfigError(msg)

    manuals: dict[str, ManualConfig] = {}
    for key, payload in manuals_raw.items():
        match payload:
            case dict():
                manuals[key] = _build_manual_config(
                    key=key, payload=payload, defaults=manual_defaults
                )
            case _:
                msg = f"Manual '{key}' must be a mapping."
                raise SiteConfigError(msg)

    return SiteConfig(
        manuals=manuals,
        default_manual=defaults.get("default_manual"),
        index_output=Path(defaults.get("index_output", "public/index.html")),
        theme=manual_defaults.theme,
    )


@dc.dataclass(slots=True)
class _ManualDefaults:
    """Internal container for manual default configuration values."""

    theme: ThemeConfig
    output_dir: Path
    filename_prefix: str
    pygments_style: str
    page_title_suffix: str
    breadcrumb_separator: str
    footer_note: str


def _build_manual_config(
    *,
    key: str,
    payload: typ.Mapping[str, typ.Any],
    defaults: _ManualDefaults,
) -> ManualConfig:
    """Build a ManualConfig for one manual entry using defaults and overrides."""
    content_dir = _optional_str(payload.get("content_dir"))
    if content_dir is None:
        msg = f"Manual '{key}' is missing 'content_dir'."
        raise SiteConfigError(msg)

    return ManualConfig(
        key=key,
        label=payload.get("label") or _default_label(key),
        content_dir=Path(content_dir),
        description=payload.get("description", "") or "",
        page_title_suffix=payload.get("page_title_suffix", defaults.page_title_suffix),
        filename_prefix=payload.get("filename_prefix", defaults.filename_prefix),
        output_dir=Path(payload.get("output_dir", defaults.output_dir)),
        pygments_style=payload.get("pygments_style", defaults.pygments_style),
        breadcrumb_separator=payload.get(
            "breadcrumb_separator", defaults.breadcrumb_separator
        ),
        footer_note=payload.get("footer_note", defaults.footer_note),
        theme=_merge_theme(defaults.theme, payload.get("theme")),
    )


__all__ = ["load_site_config"]
