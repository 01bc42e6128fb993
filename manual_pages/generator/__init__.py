"""Rendering and page generation for enablement manuals."""

from .blocks import ENFORCEMENT_BADGES, BadgeStyle, BlockRenderer, enforcement_badge
from .link_rewriter import SectionLinkExtension
from .links import ResolvedLink, SectionLinkResolver
from .models import PageLink, SectionModel
from .page_generator import ManualPageGenerator
from .renderer import HtmlContentRenderer

__all__ = [
    "ENFORCEMENT_BADGES",
    "BadgeStyle",
    "BlockRenderer",
    "HtmlContentRenderer",
    "ManualPageGenerator",
    "PageLink",
    "ResolvedLink",
    "SectionLinkExtension",
    "SectionLinkResolver",
    "SectionModel",
    "enforcement_badge",
]
