"""Shared dataclasses used by the page generation pipeline."""

from __future__ import annotations

import dataclasses as dc

from markupsafe import Markup  # noqa: TC002 - dataclass field type


@dc.dataclass(slots=True)
class PageLink:
    """Link to a neighbouring or related page."""

    label: str
    href: str


@dc.dataclass(slots=True)
class SectionModel:
    """Structured data passed to the section page template.

    Attributes
    ----------
    id : str
        Section identifier; also the page filename stem.
    title : str
        Section heading including its number.
    short_title : str
        Title used for navigation labels.
    description : str
        One-line summary shown under the heading.
    content_level : str
        Reading depth label.
    read_time_minutes : int
        Estimated reading time; ``0`` hides the badge.
    audience : list[str]
        Target roles.
    industry_context : dict[str, object] or None
        Frequency, timing, benchmark and compliance list, if present.
    breadcrumb_html : Markup
        Rendered navigation trail for the page header.
    body_html : Markup
        Rendered content blocks.
    children : list[PageLink]
        Subsections listed on a part page.
    previous : PageLink or None
        Link to the preceding section in reading order.
    next : PageLink or None
        Link to the following section in reading order.
    """

    id: str
    title: str
    short_title: str
    description: str
    content_level: str
    read_time_minutes: int
    audience: list[str]
    industry_context: dict[str, object] | None
    breadcrumb_html: Markup
    body_html: Markup
    children: list[PageLink]
    previous: PageLink | None
    next: PageLink | None


__all__ = ["PageLink", "SectionModel"]
