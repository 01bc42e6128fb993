"""Build-time validation of a loaded manual.

The renderer never checks that cross-references resolve; this module does,
before any page is written. Errors block the build, warnings are reported.

Example
-------
>>> from manual_pages.content.lint import ContentLinter
>>> issues = ContentLinter(manual).run()  # doctest: +SKIP
>>> [issue.format() for issue in issues if issue.is_error]  # doctest: +SKIP
["error: sec-2-1: related topic 'sec-9-9' does not resolve to a section"]
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

import structlog

from manual_pages.diagram import parse_diagram

from .errors import ContentError, ContentValidationError, DiagramSyntaxError
from .models import (
    KNOWN_FIELD_TYPES,
    BusinessRulesBlock,
    CalloutBlock,
    EnforcementLevel,
    FieldTableBlock,
    MarkdownBlock,
    NavigationPathBlock,
    RelatedTopicsBlock,
    WorkflowDiagramBlock,
    iter_blocks,
)
from .references import iter_section_links
from .variants import DEFAULT_VARIANTS

if typ.TYPE_CHECKING:
    from .models import Block, Section
    from .registry import Manual
    from .variants import VariantRegistry

log = structlog.get_logger(__name__)


class Severity(enum.StrEnum):
    ERROR = "error"
    WARNING = "warning"


@dc.dataclass(frozen=True, slots=True)
class LintIssue:
    """One problem found in manual content.

    Attributes
    ----------
    severity : Severity
        ``error`` blocks a build; ``warning`` is informational.
    section_id : str or None
        Section the problem was found in, if any.
    message : str
        Description of the problem.
    """

    severity: Severity
    section_id: str | None
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def format(self) -> str:
        where = f"{self.section_id}: " if self.section_id else ""
        return f"{self.severity}: {where}{self.message}"


class ContentLinter:
    """Check a manual's closed-world references and block contents."""

    def __init__(
        self, manual: Manual, *, variants: VariantRegistry = DEFAULT_VARIANTS
    ) -> None:
        self.manual = manual
        self.variants = variants

    def run(self) -> list[LintIssue]:
        """Return every issue found, ordered by section then block."""
        issues: list[LintIssue] = []
        issues.extend(self._check_navigation_registry())
        for section in self.manual.sections:
            issues.extend(self._check_section(section))
        errors = sum(1 for issue in issues if issue.is_error)
        log.info(
            "manual_linted",
            manual=self.manual.key,
            errors=errors,
            warnings=len(issues) - errors,
        )
        return issues

    def ensure_valid(self, *, strict: bool = False) -> list[LintIssue]:
        """Run the linter and raise when it finds blocking issues.

        Parameters
        ----------
        strict : bool, optional
            Treat warnings as errors.

        Returns
        -------
        list[LintIssue]
            The (non-blocking) warnings, so callers can report them.

        Raises
        ------
        ContentValidationError
            If any error (or, with ``strict``, any warning) was found.
        """
        issues = self.run()
        blocking = [issue for issue in issues if strict or issue.is_error]
        if blocking:
            raise ContentValidationError(self.manual.key, blocking)
        return issues

    def _check_navigation_registry(self) -> typ.Iterator[LintIssue]:
        for section_id, labels in self.manual.navigation.items():
            if section_id not in self.manual.sections:
                yield _error(
                    None,
                    f"navigation path is registered for unknown section '{section_id}'",
                )
            if not labels:
                yield _warning(section_id, "navigation path is empty")

    def _check_section(self, section: Section) -> typ.Iterator[LintIssue]:
        if not section.blocks and not self.manual.sections.children(section.id):
            yield _warning(section.id, "section has no content blocks")
        for block in iter_blocks(section.blocks):
            yield from self._check_block(section, block)

    def _check_block(self, section: Section, block: Block) -> typ.Iterator[LintIssue]:
        match block:
            case RelatedTopicsBlock(topics=topics):
                for topic in topics:
                    if topic.section_id not in self.manual.sections:
                        yield _error(
                            section.id,
                            f"related topic '{topic.section_id}' does not resolve to a section",
                        )
            case NavigationPathBlock(path=None, section_id=None):
                yield _error(section.id, "navigation block needs a 'path' or a 'section'")
            case NavigationPathBlock(path=None, section_id=target):
                if target not in self.manual.navigation:
                    yield _error(
                        section.id,
                        f"navigation block refers to '{target}', which has no registered path",
                    )
            case WorkflowDiagramBlock(title=title, diagram=diagram):
                try:
                    parse_diagram(diagram)
                except DiagramSyntaxError as exc:
                    yield _error(section.id, f"diagram '{title}' is malformed: {exc}")
            case FieldTableBlock(fields=fields):
                for field in fields:
                    if field.type not in KNOWN_FIELD_TYPES:
                        yield _warning(
                            section.id,
                            f"field '{field.name}' has unrecognised type '{field.type}'",
                        )
            case MarkdownBlock(text=text):
                yield from self._check_prose_links(section, text)
            case CalloutBlock(variant=variant, content=content):
                if variant not in self.variants:
                    yield _error(section.id, f"callout variant '{variant}' is not registered")
                if isinstance(content, str):
                    yield from self._check_prose_links(section, content)
            case BusinessRulesBlock(rules=rules):
                for rule in rules:
                    try:
                        EnforcementLevel.parse(rule.enforcement)
                    except ContentError as exc:
                        yield _error(section.id, f"rule '{rule.rule}': {exc}")
            case _:
                return

    def _check_prose_links(self, section: Section, text: str) -> typ.Iterator[LintIssue]:
        for target in iter_section_links(text):
            if target not in self.manual.sections:
                yield _error(
                    section.id, f"link to 'section:{target}' does not resolve to a section"
                )


def _error(section_id: str | None, message: str) -> LintIssue:
    return LintIssue(Severity.ERROR, section_id, message)


def _warning(section_id: str | None, message: str) -> LintIssue:
    return LintIssue(Severity.WARNING, section_id, message)


__all__ = ["ContentLinter", "LintIssue", "Severity"]
