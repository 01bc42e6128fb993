"""Cross-reference links written inside prose.

Markdown bodies link to other sections with the ``section:`` scheme, for
example ``[index settings](section:sec-2-4)``,
``[weights](section:sec-2-4#weights "Weights")`` or a reference definition
such as ``[setup]: section:sec-2-1``. The renderer rewrites these to page
URLs; the linter uses :func:`iter_section_links` to check they resolve.

Targets are collected from the parsed markdown tree, so every link form the
renderer rewrites is also checked.

>>> list(iter_section_links("See [rules](section:sec-2-4#rules) and [x](https://a.b)."))
['sec-2-4']
"""

from __future__ import annotations

import typing as typ

from markdown import Markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

SECTION_SCHEME = "section:"
# Extensions whose syntax changes where links can appear (code fences, tables).
PROSE_EXTENSIONS = ("fenced_code", "tables", "sane_lists")


def split_section_href(href: str) -> tuple[str, str] | None:
    """Return ``(section_id, fragment)`` for a ``section:`` href, else ``None``."""
    if not href.startswith(SECTION_SCHEME):
        return None
    target = href[len(SECTION_SCHEME) :]
    section_id, _, fragment = target.partition("#")
    if not section_id:
        return None
    return section_id, fragment


class _SectionLinkCollector(Treeprocessor):
    """Record the section id of every ``section:`` anchor in the tree."""

    def __init__(self, md: Markdown, found: list[str]) -> None:
        super().__init__(md)
        self.found = found

    def run(self, root: Element) -> None:
        for element in root.iter("a"):
            parts = split_section_href((element.get("href") or "").strip())
            if parts is not None:
                self.found.append(parts[0])


class _CollectSectionLinks(Extension):
    def __init__(self, found: list[str]) -> None:
        super().__init__()
        self.found = found

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        md.treeprocessors.register(
            _SectionLinkCollector(md, self.found), "manual_section_link_collector", 15
        )


def iter_section_links(markdown_text: str) -> typ.Iterator[str]:
    """Yield the section ids referenced by ``section:`` links in ``markdown_text``.

    Inline links, links with titles, ``<...>`` targets and reference-style
    definitions are all found; links inside code are not.
    """
    if not markdown_text.strip():
        return
    found: list[str] = []
    md = Markdown(extensions=[*PROSE_EXTENSIONS, _CollectSectionLinks(found)])
    md.convert(markdown_text)
    yield from found


__all__ = [
    "PROSE_EXTENSIONS",
    "SECTION_SCHEME",
    "iter_section_links",
    "split_section_href",
]
