"""Callout variants and the registry mapping each one to a visual treatment.

The set of variants is closed: content authors pick from
:class:`CalloutVariant`, and a :class:`VariantRegistry` must carry a style for
every member. Adding a variant without teaching :func:`_default_style` about it
trips ``typing.assert_never`` under a type checker and the exhaustiveness check
in :class:`VariantRegistry` at import time.

Examples
--------
>>> from manual_pages.content.variants import DEFAULT_VARIANTS
>>> DEFAULT_VARIANTS.resolve("tip").icon
'lightbulb'
>>> DEFAULT_VARIANTS.resolve("bogus")  # doctest: +IGNORE_EXCEPTION_DETAIL
Traceback (most recent call last):
UnknownVariantError: Unknown callout variant 'bogus'.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ
from types import MappingProxyType

from .errors import UnknownVariantError


class CalloutVariant(enum.StrEnum):
    """Semantic tags accepted by callout blocks."""

    INFO = "info"
    WARNING = "warning"
    TIP = "tip"
    NOTE = "note"
    PREREQUISITE = "prerequisite"
    SUCCESS = "success"
    CRITICAL = "critical"
    COMPLIANCE = "compliance"
    INDUSTRY = "industry"
    INTEGRATION = "integration"
    SECURITY = "security"
    FUTURE = "future"


@dc.dataclass(frozen=True, slots=True)
class VariantStyle:
    """Visual treatment applied to a callout.

    Attributes
    ----------
    border_accent : str
        CSS class for the left border accent.
    background_tone : str
        CSS class for the tinted background.
    icon : str
        Icon identifier resolved by the front-end icon set.
    icon_color : str
        CSS class colouring the icon.
    """

    border_accent: str
    background_tone: str
    icon: str
    icon_color: str


def _tinted(color: str, icon: str) -> VariantStyle:
    return VariantStyle(
        border_accent=f"border-l-{color}-500",
        background_tone=f"bg-{color}-50",
        icon=icon,
        icon_color=f"text-{color}-600",
    )


def _default_style(variant: CalloutVariant) -> VariantStyle:
    """Return the built-in style for ``variant``."""
    match variant:
        case CalloutVariant.INFO:
            return _tinted("blue", "info")
        case CalloutVariant.WARNING:
            return _tinted("amber", "alert-triangle")
        case CalloutVariant.TIP:
            return _tinted("emerald", "lightbulb")
        case CalloutVariant.NOTE:
            return _tinted("slate", "sticky-note")
        case CalloutVariant.PREREQUISITE:
            return _tinted("violet", "clipboard-check")
        case CalloutVariant.SUCCESS:
            return _tinted("green", "check-circle-2")
        case CalloutVariant.CRITICAL:
            return _tinted("red", "alert-octagon")
        case CalloutVariant.COMPLIANCE:
            return _tinted("indigo", "scale")
        case CalloutVariant.INDUSTRY:
            return _tinted("cyan", "building-2")
        case CalloutVariant.INTEGRATION:
            return _tinted("teal", "plug")
        case CalloutVariant.SECURITY:
            return _tinted("rose", "lock")
        case CalloutVariant.FUTURE:
            return _tinted("fuchsia", "rocket")
        case _:
            typ.assert_never(variant)


def parse_variant(tag: str | CalloutVariant) -> CalloutVariant:
    """Coerce ``tag`` into a :class:`CalloutVariant` or raise UnknownVariantError."""
    if isinstance(tag, CalloutVariant):
        return tag
    try:
        return CalloutVariant(str(tag).strip().lower())
    except ValueError as exc:
        raise UnknownVariantError(tag) from exc


class VariantRegistry:
    """Immutable mapping from callout variants to their styles."""

    def __init__(self, styles: typ.Mapping[CalloutVariant, VariantStyle]) -> None:
        """Build a registry, refusing mappings that miss any variant.

        Parameters
        ----------
        styles : Mapping[CalloutVariant, VariantStyle]
            Style for every member of :class:`CalloutVariant`.

        Raises
        ------
        ValueError
            If one or more variants have no style.
        """
        missing = [variant.value for variant in CalloutVariant if variant not in styles]
        if missing:
            msg = f"Variant registry is missing styles for: {', '.join(missing)}"
            raise ValueError(msg)
        self._styles: typ.Mapping[CalloutVariant, VariantStyle] = MappingProxyType(
            {variant: styles[variant] for variant in CalloutVariant}
        )

    def resolve(self, tag: str | CalloutVariant) -> VariantStyle:
        """Return the style for ``tag``; unknown tags raise UnknownVariantError."""
        return self._styles[parse_variant(tag)]

    def __contains__(self, tag: object) -> bool:
        if not isinstance(tag, str):
            return False
        try:
            parse_variant(tag)
        except UnknownVariantError:
            return False
        return True

    def __iter__(self) -> typ.Iterator[CalloutVariant]:
        return iter(self._styles)

    def __len__(self) -> int:
        return len(self._styles)

    @classmethod
    def default(cls) -> VariantRegistry:
        """Return a registry populated with the built-in styles."""
        return cls({variant: _default_style(variant) for variant in CalloutVariant})


DEFAULT_VARIANTS = VariantRegistry.default()


__all__ = [
    "DEFAULT_VARIANTS",
    "CalloutVariant",
    "VariantRegistry",
    "VariantStyle",
    "parse_variant",
]
