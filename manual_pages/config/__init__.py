"""Load and validate the manual site configuration.

This subpackage parses ``config/manuals.yaml``, merges global defaults with
per-manual overrides and produces typed dataclasses (:class:`SiteConfig`,
:class:`ManualConfig`) for the generators. Logging setup lives in
:mod:`manual_pages.config.logging`.

Examples
--------
>>> from pathlib import Path
>>> from manual_pages.config import load_site_config
>>> site = load_site_config(Path("config/manuals.yaml"))  # doctest: +SKIP
>>> site.get_manual("appraisals").content_dir  # doctest: +SKIP
PosixPath('content/appraisals')
"""

from .loader import load_site_config
from .logging import configure_logging
from .models import ManualConfig, SiteConfig, SiteConfigError, ThemeConfig

__all__ = [
    "ManualConfig",
    "SiteConfig",
    "SiteConfigError",
    "ThemeConfig",
    "configure_logging",
    "load_site_config",
]
