"""Closed registries behind cross-section navigation and linking.

Both registries are built once when a manual is loaded and never mutated; the
renderer and the linter receive them by reference.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from types import MappingProxyType

from .errors import DuplicateSectionError, UnknownSectionError

if typ.TYPE_CHECKING:
    from .models import Section


class SectionRegistry:
    """Ordered, enumerable identifier space of a manual's sections."""

    def __init__(self, sections: typ.Iterable[Section]) -> None:
        """Index ``sections`` by identifier, preserving their order.

        Raises
        ------
        DuplicateSectionError
            If two sections share an identifier.
        """
        indexed: dict[str, Section] = {}
        for section in sections:
            if section.id in indexed:
                raise DuplicateSectionError(section.id)
            indexed[section.id] = section
        self._sections: typ.Mapping[str, Section] = MappingProxyType(indexed)

    def __contains__(self, section_id: object) -> bool:
        return section_id in self._sections

    def __iter__(self) -> typ.Iterator[Section]:
        return iter(self._sections.values())

    def __len__(self) -> int:
        return len(self._sections)

    def ids(self) -> tuple[str, ...]:
        """Return every section identifier in manual order."""
        return tuple(self._sections)

    def get(self, section_id: str) -> Section | None:
        return self._sections.get(section_id)

    def require(self, section_id: str) -> Section:
        """Return the section for ``section_id`` or raise UnknownSectionError."""
        try:
            return self._sections[section_id]
        except KeyError as exc:
            raise UnknownSectionError(section_id) from exc

    def children(self, parent_id: str | None) -> tuple[Section, ...]:
        """Return sections whose parent is ``parent_id`` (``None`` for top level)."""
        return tuple(s for s in self._sections.values() if s.parent_id == parent_id)

    def neighbours(self, section_id: str) -> tuple[Section | None, Section | None]:
        """Return the sections before and after ``section_id`` in reading order."""
        ids = self.ids()
        index = ids.index(self.require(section_id).id)
        previous = self._sections[ids[index - 1]] if index > 0 else None
        following = self._sections[ids[index + 1]] if index + 1 < len(ids) else None
        return previous, following


class NavigationRegistry:
    """Breadcrumb trails keyed by section identifier."""

    def __init__(
        self, paths: typ.Mapping[str, typ.Sequence[str]] | None = None
    ) -> None:
        self._paths: typ.Mapping[str, tuple[str, ...]] = MappingProxyType(
            {key: tuple(labels) for key, labels in (paths or {}).items()}
        )

    def __contains__(self, section_id: object) -> bool:
        return section_id in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def path_for(self, section_id: str) -> tuple[str, ...]:
        """Return the trail for ``section_id``; unknown ids yield an empty trail."""
        return self._paths.get(section_id, ())

    def items(self) -> typ.ItemsView[str, tuple[str, ...]]:
        return self._paths.items()


@dc.dataclass(frozen=True, slots=True)
class Manual:
    """A loaded manual: its sections and navigation trails."""

    key: str
    title: str
    sections: SectionRegistry
    navigation: NavigationRegistry = dc.field(default_factory=NavigationRegistry)

    @property
    def read_time_minutes(self) -> int:
        """Total estimated reading time across leaf sections."""
        return sum(
            section.read_time_minutes
            for section in self.sections
            if not self.sections.children(section.id)
        )


__all__ = ["Manual", "NavigationRegistry", "SectionRegistry"]
