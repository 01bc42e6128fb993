"""Markdown extension rewriting ``section:`` links to generated page URLs."""

from __future__ import annotations

import typing as typ

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from manual_pages.content.references import split_section_href

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from .links import SectionLinkResolver
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any
    SectionLinkResolver = typ.Any


class SectionLinkExtension(Extension):
    """Rewrite ``[text](section:sec-2-1#anchor)`` links in prose.

    Insert this extension into a ``markdown.Markdown`` instance so authors can
    cross-reference sections by identifier instead of by output filename.
    Targets are rewritten whether or not they exist; dangling identifiers are
    reported by :class:`~manual_pages.content.lint.ContentLinter`.
    """

    def __init__(self, resolver: SectionLinkResolver) -> None:
        self.resolver = resolver

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the section-link treeprocessor on the Markdown instance."""
        processor = SectionLinkTreeprocessor(md, self.resolver)
        md.treeprocessors.register(processor, "manual_section_links", 15)


class SectionLinkTreeprocessor(Treeprocessor):
    """Rewrite ``section:`` anchors in the parsed markdown tree."""

    def __init__(self, md: Markdown, resolver: SectionLinkResolver) -> None:
        super().__init__(md)
        self.resolver = resolver

    def run(self, root: Element) -> Element:
        """Rewrite section anchors and tag them for styling."""
        for element in root.iter():
            if element.tag != "a":
                continue
            rewritten = self._rewrite(element.get("href"))
            if rewritten:
                element.set("href", rewritten)
                element.set("class", "xref")
        return root

    def _rewrite(self, target: str | None) -> str | None:
        if not target:
            return None
        parts = split_section_href(target.strip())
        if parts is None:
            return None
        section_id, fragment = parts
        return self.resolver.href_for(section_id, fragment)


__all__ = ["SectionLinkExtension", "SectionLinkTreeprocessor"]
