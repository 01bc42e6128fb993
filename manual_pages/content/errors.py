"""Exception hierarchy raised while loading, validating, and rendering content."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .lint import LintIssue


class ContentError(ValueError):
    """Base class for every content problem surfaced by manual_pages."""


class UnknownVariantError(ContentError):
    """Raised when a callout names a variant missing from the registry."""

    def __init__(self, tag: object) -> None:
        self.tag = tag
        super().__init__(f"Unknown callout variant {tag!r}.")


class UnknownEnforcementLevelError(ContentError):
    """Raised when a business rule uses an unrecognised enforcement level."""

    def __init__(self, level: object) -> None:
        self.level = level
        super().__init__(
            f"Unknown enforcement level {level!r}; expected System, Policy, or Advisory."
        )


class UnknownSectionError(ContentError):
    """Raised when a section identifier does not resolve."""

    def __init__(self, section_id: str) -> None:
        self.section_id = section_id
        super().__init__(f"Unknown section '{section_id}'.")


class DuplicateSectionError(ContentError):
    """Raised when two sections share one identifier."""

    def __init__(self, section_id: str) -> None:
        self.section_id = section_id
        super().__init__(f"Section id '{section_id}' is defined more than once.")


class DiagramSyntaxError(ContentError):
    """Raised when a workflow diagram does not match the flowchart grammar.

    Attributes
    ----------
    line : int
        1-based line number of the offending statement.
    column : int
        1-based column where parsing stopped, or ``0`` when unknown.
    reason : str
        Human-readable description without the position prefix.
    """

    def __init__(self, reason: str, *, line: int, column: int = 0) -> None:
        self.reason = reason
        self.line = line
        self.column = column
        position = f"line {line}" if not column else f"line {line}, column {column}"
        super().__init__(f"{position}: {reason}")


class ContentLoadError(ContentError):
    """Raised when a content file is structurally invalid."""


class ContentValidationError(ContentError):
    """Raised when linting finds errors that must block a build."""

    def __init__(self, manual_key: str, issues: typ.Sequence[LintIssue]) -> None:
        self.manual_key = manual_key
        self.issues = tuple(issues)
        noun = "error" if len(self.issues) == 1 else "errors"
        super().__init__(
            f"Manual '{manual_key}' failed validation with {len(self.issues)} {noun}."
        )


__all__ = [
    "ContentError",
    "ContentLoadError",
    "ContentValidationError",
    "DiagramSyntaxError",
    "DuplicateSectionError",
    "UnknownEnforcementLevelError",
    "UnknownSectionError",
    "UnknownVariantError",
]
