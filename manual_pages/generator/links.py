"""Turn section identifiers into page links."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from manual_pages.content.models import RelatedTopic


@dc.dataclass(frozen=True, slots=True)
class ResolvedLink:
    """Clickable cross-reference produced for a related topic."""

    label: str
    href: str
    section_id: str


class SectionLinkResolver:
    """Map section identifiers to generated page filenames.

    The resolver formats links only; whether the target section exists is the
    linter's concern, not the renderer's.
    """

    def __init__(self, filename_prefix: str = "") -> None:
        self.filename_prefix = filename_prefix

    def filename_for(self, section_id: str) -> str:
        return f"{self.filename_prefix}{section_id}.html"

    def href_for(self, section_id: str, fragment: str = "") -> str:
        """Return the relative URL of ``section_id``, with an optional fragment."""
        href = self.filename_for(section_id)
        return f"{href}#{fragment}" if fragment else href

    def resolve(self, topics: typ.Iterable[RelatedTopic]) -> list[ResolvedLink]:
        """Return one link per topic, preserving order."""
        return [
            ResolvedLink(
                label=topic.title,
                href=self.href_for(topic.section_id),
                section_id=topic.section_id,
            )
            for topic in topics
        ]


__all__ = ["ResolvedLink", "SectionLinkResolver"]
