"""Utility helpers shared by the manual configuration loader."""

from __future__ import annotations

import typing as typ

from .models import ThemeConfig


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _merge_theme(
    base: ThemeConfig, override: typ.Mapping[str, typ.Any] | None
) -> ThemeConfig:
    """Merge an override theme mapping into the base ThemeConfig."""
    if not override:
        return base
    return ThemeConfig(
        site_name=override.get("site_name", base.site_name),
        manual_label=override.get("manual_label", base.manual_label),
        tagline=override.get("tagline", base.tagline),
    )


def _build_theme_config(payload: typ.Mapping[str, typ.Any]) -> ThemeConfig:
    """Build a ThemeConfig instance from the provided mapping payload."""
    return _merge_theme(ThemeConfig(), payload)


def _default_label(key: str) -> str:
    """Derive a human label from a manual key such as ``"pay-review"``."""
    return key.replace("-", " ").replace("_", " ").title()


__all__ = [
    "_build_theme_config",
    "_default_label",
    "_merge_theme",
    "_optional_str",
]
