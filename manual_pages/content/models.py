"""Typed, immutable building blocks of an enablement manual.

Section content files are YAML; :mod:`manual_pages.content.loader` turns them
into the frozen dataclasses below, which the block renderer consumes. Nothing
here is mutated after construction.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from .errors import UnknownEnforcementLevelError
from .variants import CalloutVariant  # noqa: TC001 - dataclass field type

KNOWN_FIELD_TYPES: frozenset[str] = frozenset(
    {
        "Text",
        "Number",
        "Boolean",
        "Enum",
        "UUID",
        "JSON",
        "Array",
        "Timestamp",
        "Select",
        "Date",
        "Decimal",
        "Reference",
    }
)


class EnforcementLevel(enum.StrEnum):
    """How rigidly a documented business rule is enforced."""

    SYSTEM = "System"
    POLICY = "Policy"
    ADVISORY = "Advisory"

    @classmethod
    def parse(cls, value: str | EnforcementLevel) -> EnforcementLevel:
        """Return the level matching ``value`` case-insensitively."""
        if isinstance(value, EnforcementLevel):
            return value
        normalized = str(value).strip().lower()
        for level in cls:
            if level.value.lower() == normalized:
                return level
        raise UnknownEnforcementLevelError(value)


class ContentLevel(enum.StrEnum):
    """Reading depth of a section."""

    OVERVIEW = "overview"
    CONCEPT = "concept"
    PROCEDURE = "procedure"
    REFERENCE = "reference"
    TROUBLESHOOTING = "troubleshooting"


@dc.dataclass(frozen=True, slots=True)
class FieldDefinition:
    """One row of a field reference table."""

    name: str
    required: bool
    type: str
    description: str
    default_value: str | None = None
    validation: str | None = None


@dc.dataclass(frozen=True, slots=True)
class BusinessRule:
    """A documented rule and the level at which it is enforced.

    An unrecognised level is kept as its raw string so the linter can report it.
    """

    rule: str
    enforcement: EnforcementLevel | str
    description: str


@dc.dataclass(frozen=True, slots=True)
class WorkflowStep:
    """A single step of a step-by-step guide; its number is its position."""

    title: str
    description: str
    substeps: tuple[str, ...] = ()
    expected_result: str | None = None


@dc.dataclass(frozen=True, slots=True)
class RelatedTopic:
    """Cross-reference to another section of the same manual."""

    section_id: str
    title: str


@dc.dataclass(frozen=True, slots=True)
class TroubleshootingItem:
    """Known issue with its likely cause and fix."""

    issue: str
    cause: str
    solution: str


@dc.dataclass(frozen=True, slots=True)
class ConfigurationValue:
    """Field/value pair shown inside a configuration example."""

    field: str
    value: str


@dc.dataclass(frozen=True, slots=True)
class ConfigurationExample:
    """Worked configuration scenario."""

    title: str
    context: str
    values: tuple[ConfigurationValue, ...]
    outcome: str


@dc.dataclass(frozen=True, slots=True)
class IndustryContext:
    """Industry framing shown in a section header."""

    frequency: str
    timing: str
    benchmark: str
    compliance: tuple[str, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class MarkdownBlock:
    """Free-form prose rendered through Markdown."""

    text: str


@dc.dataclass(frozen=True, slots=True)
class CalloutBlock:
    """Tinted, icon-prefixed block wrapping prose or nested blocks."""

    variant: CalloutVariant | str = "info"
    content: str | tuple[Block, ...] = ""
    title: str | None = None
    style_override: str | None = None


@dc.dataclass(frozen=True, slots=True)
class FieldTableBlock:
    """Ordered field reference table."""

    fields: tuple[FieldDefinition, ...]
    title: str | None = None


@dc.dataclass(frozen=True, slots=True)
class BusinessRulesBlock:
    """List of business rules with enforcement badges."""

    rules: tuple[BusinessRule, ...]
    title: str | None = None


@dc.dataclass(frozen=True, slots=True)
class StepByStepBlock:
    """Numbered procedure."""

    steps: tuple[WorkflowStep, ...]
    title: str | None = None


@dc.dataclass(frozen=True, slots=True)
class WorkflowDiagramBlock:
    """Flowchart described in the Mermaid-style text syntax."""

    title: str
    diagram: str
    description: str | None = None


@dc.dataclass(frozen=True, slots=True)
class NavigationPathBlock:
    """Breadcrumb given explicitly or looked up by section id."""

    path: tuple[str, ...] | None = None
    section_id: str | None = None


@dc.dataclass(frozen=True, slots=True)
class RelatedTopicsBlock:
    """Links to other sections."""

    topics: tuple[RelatedTopic, ...]
    title: str | None = None


@dc.dataclass(frozen=True, slots=True)
class LearningObjectivesBlock:
    """What the reader should be able to do after the section."""

    objectives: tuple[str, ...]


@dc.dataclass(frozen=True, slots=True)
class TroubleshootingBlock:
    """Issue/cause/solution table."""

    items: tuple[TroubleshootingItem, ...]


@dc.dataclass(frozen=True, slots=True)
class ConfigurationExamplesBlock:
    """Worked configuration examples."""

    examples: tuple[ConfigurationExample, ...]


@dc.dataclass(frozen=True, slots=True)
class ScreenshotBlock:
    """Placeholder for a screenshot that is captured separately."""

    title: str
    description: str


Block: typ.TypeAlias = (
    MarkdownBlock
    | CalloutBlock
    | FieldTableBlock
    | BusinessRulesBlock
    | StepByStepBlock
    | WorkflowDiagramBlock
    | NavigationPathBlock
    | RelatedTopicsBlock
    | LearningObjectivesBlock
    | TroubleshootingBlock
    | ConfigurationExamplesBlock
    | ScreenshotBlock
)


@dc.dataclass(frozen=True, slots=True)
class Section:
    """One page of the manual.

    Attributes
    ----------
    id : str
        Identifier unique within the manual (for example ``"sec-2-1"``).
    title : str
        Heading shown on the page and in navigation.
    number : str
        Display number such as ``"2.1"``; may be empty.
    description : str
        One-line summary used in headers and the index.
    content_level : ContentLevel
        Reading depth of the page.
    read_time_minutes : int
        Estimated reading time.
    audience : tuple[str, ...]
        Target roles.
    industry_context : IndustryContext or None
        Optional industry framing.
    blocks : tuple[Block, ...]
        Ordered content blocks.
    parent_id : str or None
        Identifier of the enclosing part, if any.
    """

    id: str
    title: str
    number: str = ""
    description: str = ""
    content_level: ContentLevel = ContentLevel.OVERVIEW
    read_time_minutes: int = 0
    audience: tuple[str, ...] = ()
    industry_context: IndustryContext | None = None
    blocks: tuple[Block, ...] = ()
    parent_id: str | None = None

    @property
    def display_title(self) -> str:
        """Return the title prefixed with its number when present."""
        return f"{self.number} {self.title}" if self.number else self.title


def iter_blocks(blocks: typ.Iterable[Block]) -> typ.Iterator[Block]:
    """Yield ``blocks`` depth-first, descending into callout content."""
    for block in blocks:
        yield block
        if isinstance(block, CalloutBlock) and not isinstance(block.content, str):
            yield from iter_blocks(block.content)


__all__ = [
    "KNOWN_FIELD_TYPES",
    "Block",
    "BusinessRule",
    "BusinessRulesBlock",
    "CalloutBlock",
    "ConfigurationExample",
    "ConfigurationExamplesBlock",
    "ConfigurationValue",
    "ContentLevel",
    "EnforcementLevel",
    "FieldDefinition",
    "FieldTableBlock",
    "IndustryContext",
    "LearningObjectivesBlock",
    "MarkdownBlock",
    "NavigationPathBlock",
    "RelatedTopic",
    "RelatedTopicsBlock",
    "ScreenshotBlock",
    "Section",
    "StepByStepBlock",
    "TroubleshootingBlock",
    "TroubleshootingItem",
    "WorkflowDiagramBlock",
    "WorkflowStep",
    "iter_blocks",
]
