"""Render manual content blocks into HTML fragments.

:class:`BlockRenderer` is the one place that knows how each block looks. Every
renderer is a pure function of its arguments and the registries injected at
construction: the same input always yields byte-identical HTML.

Calling a renderer method directly fails fast on bad input (for example an
unknown callout variant). :meth:`BlockRenderer.render_block`, used when
composing pages, instead degrades the offending block to a visible
``content-error`` placeholder so the rest of the page still renders.

Examples
--------
>>> from manual_pages.generator.blocks import BlockRenderer
>>> renderer = BlockRenderer()
>>> html = renderer.tip_callout("Save often.", title="Tip")
>>> 'data-variant="tip"' in html
True
"""

from __future__ import annotations

import dataclasses as dc
import functools
import typing as typ
from pathlib import Path
from types import MappingProxyType

import structlog
from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from manual_pages.content.errors import ContentError
from manual_pages.content.models import (
    BusinessRulesBlock,
    CalloutBlock,
    ConfigurationExamplesBlock,
    EnforcementLevel,
    FieldTableBlock,
    LearningObjectivesBlock,
    MarkdownBlock,
    NavigationPathBlock,
    RelatedTopicsBlock,
    ScreenshotBlock,
    StepByStepBlock,
    TroubleshootingBlock,
    WorkflowDiagramBlock,
)
from manual_pages.content.registry import NavigationRegistry
from manual_pages.content.variants import DEFAULT_VARIANTS, CalloutVariant, parse_variant
from manual_pages.diagram import parse_diagram

from .link_rewriter import SectionLinkExtension
from .links import SectionLinkResolver
from .renderer import HtmlContentRenderer

if typ.TYPE_CHECKING:
    from manual_pages.content.models import (
        Block,
        BusinessRule,
        ConfigurationExample,
        FieldDefinition,
        RelatedTopic,
        TroubleshootingItem,
        WorkflowStep,
    )
    from manual_pages.content.variants import VariantRegistry

log = structlog.get_logger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
DEFAULT_SEPARATOR = "›"
EMPTY_CELL = "—"
FIELD_TABLE_HEADERS = ("Field", "Required", "Type", "Description", "Default", "Validation")


@dc.dataclass(frozen=True, slots=True)
class BadgeStyle:
    """Visual treatment of an enforcement badge; higher weight draws more attention."""

    label: str
    css_class: str
    weight: int


ENFORCEMENT_BADGES: typ.Mapping[EnforcementLevel, BadgeStyle] = MappingProxyType(
    {
        EnforcementLevel.SYSTEM: BadgeStyle("System", "badge--system badge-error", 3),
        EnforcementLevel.POLICY: BadgeStyle("Policy", "badge--policy badge-warning", 2),
        EnforcementLevel.ADVISORY: BadgeStyle("Advisory", "badge--advisory badge-ghost", 1),
    }
)


def enforcement_badge(level: EnforcementLevel | str) -> BadgeStyle:
    """Return the badge for ``level``; unknown levels raise UnknownEnforcementLevelError."""
    return ENFORCEMENT_BADGES[EnforcementLevel.parse(level)]


@dc.dataclass(slots=True)
class _StepAnchors:
    """Hand out step-block anchor prefixes in page order."""

    prefix: str
    count: int = 0

    def next(self) -> str:
        self.count += 1
        return self.prefix if self.count == 1 else f"{self.prefix}-{self.count}"


class BlockRenderer:
    """Render content blocks with injected registries and shared templates."""

    def __init__(
        self,
        *,
        variants: VariantRegistry = DEFAULT_VARIANTS,
        navigation: NavigationRegistry | None = None,
        links: SectionLinkResolver | None = None,
        pygments_style: str = "monokai",
        separator: str = DEFAULT_SEPARATOR,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the renderer.

        Parameters
        ----------
        variants : VariantRegistry, optional
            Callout styles; defaults to the built-in registry.
        navigation : NavigationRegistry, optional
            Breadcrumb trails looked up by section id; empty when omitted.
        links : SectionLinkResolver, optional
            Formats related-topic and ``section:`` hrefs.
        pygments_style : str, optional
            Pygments style for fenced code inside prose.
        separator : str, optional
            Breadcrumb separator, ``"›"`` by default.
        templates_dir : Path, optional
            Directory holding ``blocks/*.jinja``; defaults to the package templates.
        """
        self.variants = variants
        self.navigation = navigation or NavigationRegistry()
        self.links = links or SectionLinkResolver()
        self.separator = separator
        self.prose = HtmlContentRenderer(
            pygments_style, link_extension=SectionLinkExtension(self.links)
        )
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or DEFAULT_TEMPLATES_DIR)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )

    def render_blocks(
        self, blocks: typ.Iterable[Block], *, anchor_prefix: str = "steps"
    ) -> Markup:
        """Render ``blocks`` in order, degrading failures to placeholders.

        Step-by-step blocks after the first, including those nested in
        callouts, get ``-2``, ``-3``... appended to ``anchor_prefix`` so step
        anchors stay unique within a page.
        """
        return self._render_sequence(blocks, _StepAnchors(anchor_prefix))

    def render_block(self, block: Block, *, anchor_prefix: str = "steps") -> Markup:
        """Render one block; content errors become a ``content-error`` placeholder."""
        return self._render_degrading(block, _StepAnchors(anchor_prefix))

    def _render_sequence(
        self, blocks: typ.Iterable[Block], anchors: _StepAnchors
    ) -> Markup:
        return Markup("\n").join(
            self._render_degrading(block, anchors) for block in blocks
        )

    def _render_degrading(self, block: Block, anchors: _StepAnchors) -> Markup:
        try:
            return self._dispatch(block, anchors)
        except ContentError as exc:
            kind = type(block).__name__
            log.warning("block_degraded", block=kind, error=str(exc))
            return self._render("content_error", kind=kind, message=str(exc))

    def _dispatch(self, block: Block, anchors: _StepAnchors) -> Markup:  # noqa: PLR0911 - one arm per block type
        match block:
            case MarkdownBlock():
                return self.markdown(block.text)
            case CalloutBlock():
                return self._callout(
                    block.variant,
                    block.content,
                    anchors,
                    title=block.title,
                    style_override=block.style_override,
                )
            case FieldTableBlock():
                return self.field_table(block.fields, title=block.title)
            case BusinessRulesBlock():
                return self.business_rules(block.rules, title=block.title)
            case StepByStepBlock():
                return self.step_by_step(
                    block.steps, title=block.title, anchor_prefix=anchors.next()
                )
            case WorkflowDiagramBlock():
                return self.workflow_diagram(
                    block.title, block.diagram, description=block.description
                )
            case NavigationPathBlock():
                return self.navigation_path(block.path, section_id=block.section_id)
            case RelatedTopicsBlock():
                return self.related_topics(block.topics, title=block.title)
            case LearningObjectivesBlock():
                return self.learning_objectives(block.objectives)
            case TroubleshootingBlock():
                return self.troubleshooting(block.items)
            case ConfigurationExamplesBlock():
                return self.configuration_examples(block.examples)
            case ScreenshotBlock():
                return self.screenshot(block.title, block.description)
            case _:
                typ.assert_never(block)

    def markdown(self, text: str) -> Markup:
        """Render markdown prose, rewriting ``section:`` links."""
        return Markup(self.prose.markdown(text))

    def callout(
        self,
        variant: CalloutVariant | str = CalloutVariant.INFO,
        content: str | typ.Sequence[Block] = "",
        *,
        title: str | None = None,
        style_override: str | None = None,
        anchor_prefix: str = "steps",
    ) -> Markup:
        """Render a tinted, icon-prefixed callout.

        Parameters
        ----------
        variant : CalloutVariant or str, optional
            Semantic tag; defaults to ``info``.
        content : str or Sequence[Block], optional
            Markdown prose, or nested blocks rendered recursively.
        title : str, optional
            Bold heading shown above the content.
        style_override : str, optional
            Extra CSS classes appended to the container.
        anchor_prefix : str, optional
            Prefix for step anchors in nested step-by-step blocks.

        Raises
        ------
        UnknownVariantError
            If ``variant`` is not a registered tag.
        """
        return self._callout(
            variant,
            content,
            _StepAnchors(anchor_prefix),
            title=title,
            style_override=style_override,
        )

    def _callout(
        self,
        variant: CalloutVariant | str,
        content: str | typ.Sequence[Block],
        anchors: _StepAnchors,
        *,
        title: str | None,
        style_override: str | None,
    ) -> Markup:
        tag = parse_variant(variant)
        style = self.variants.resolve(tag)
        if isinstance(content, str):
            body = self.markdown(content)
        else:
            body = self._render_sequence(content, anchors)
        return self._render(
            "callout",
            variant=tag.value,
            style=style,
            title=title,
            body=body,
            style_override=style_override,
        )

    info_callout = functools.partialmethod(callout, CalloutVariant.INFO)
    warning_callout = functools.partialmethod(callout, CalloutVariant.WARNING)
    tip_callout = functools.partialmethod(callout, CalloutVariant.TIP)
    note_callout = functools.partialmethod(callout, CalloutVariant.NOTE)
    prerequisite_callout = functools.partialmethod(callout, CalloutVariant.PREREQUISITE)
    success_callout = functools.partialmethod(callout, CalloutVariant.SUCCESS)
    critical_callout = functools.partialmethod(callout, CalloutVariant.CRITICAL)
    compliance_callout = functools.partialmethod(callout, CalloutVariant.COMPLIANCE)
    industry_callout = functools.partialmethod(callout, CalloutVariant.INDUSTRY)
    integration_callout = functools.partialmethod(callout, CalloutVariant.INTEGRATION)
    security_callout = functools.partialmethod(callout, CalloutVariant.SECURITY)
    future_callout = functools.partialmethod(callout, CalloutVariant.FUTURE)

    def field_table(
        self, fields: typ.Sequence[FieldDefinition], *, title: str | None = None
    ) -> Markup:
        """Render fields as a table, one row per field in the order given."""
        return self._render(
            "field_table",
            title=title,
            headers=FIELD_TABLE_HEADERS,
            fields=list(fields),
            placeholder=EMPTY_CELL,
        )

    def business_rules(
        self, rules: typ.Sequence[BusinessRule], *, title: str | None = None
    ) -> Markup:
        """Render rules with colour-coded enforcement badges."""
        items = [{"rule": rule, "badge": enforcement_badge(rule.enforcement)} for rule in rules]
        return self._render("business_rules", title=title, items=items)

    def step_by_step(
        self,
        steps: typ.Sequence[WorkflowStep],
        *,
        title: str | None = None,
        anchor_prefix: str = "steps",
    ) -> Markup:
        """Render a numbered procedure; numbers come from list position, starting at 1."""
        return self._render(
            "step_by_step", title=title, steps=list(steps), anchor_prefix=anchor_prefix
        )

    def workflow_diagram(
        self, title: str, diagram: str, *, description: str | None = None
    ) -> Markup:
        """Validate ``diagram`` and emit it for client-side layout.

        Raises
        ------
        DiagramSyntaxError
            If ``diagram`` is not a well-formed flowchart.
        """
        graph = parse_diagram(diagram)
        return self._render(
            "workflow_diagram",
            title=title,
            description=description,
            diagram=diagram.strip("\n"),
            graph=graph,
        )

    def navigation_path(
        self,
        path: typ.Sequence[str] | None = None,
        *,
        section_id: str | None = None,
    ) -> Markup:
        """Render a breadcrumb from explicit labels or a registered section path.

        An unregistered ``section_id`` yields an empty trail.
        """
        if path is not None:
            labels = tuple(path)
        elif section_id is not None:
            labels = self.navigation.path_for(section_id)
            if not labels:
                log.warning("navigation_path_missing", section_id=section_id)
        else:
            labels = ()
        return self._render("navigation_path", labels=labels, separator=self.separator)

    def related_topics(
        self, topics: typ.Sequence[RelatedTopic], *, title: str | None = None
    ) -> Markup:
        """Render cross-reference links without checking that targets exist."""
        return self._render(
            "related_topics",
            title=title or "Related Topics",
            links=self.links.resolve(topics),
        )

    def learning_objectives(self, objectives: typ.Sequence[str]) -> Markup:
        return self._render("learning_objectives", objectives=list(objectives))

    def troubleshooting(self, items: typ.Sequence[TroubleshootingItem]) -> Markup:
        return self._render("troubleshooting", items=list(items))

    def configuration_examples(
        self, examples: typ.Sequence[ConfigurationExample]
    ) -> Markup:
        return self._render("configuration_examples", examples=list(examples))

    def screenshot(self, title: str, description: str) -> Markup:
        return self._render("screenshot", title=title, description=description)

    def _render(self, name: str, **context: typ.Any) -> Markup:  # noqa: ANN401 - template context
        template = self.env.get_template(f"blocks/{name}.jinja")
        return Markup(template.render(**context).strip())


__all__ = [
    "DEFAULT_SEPARATOR",
    "ENFORCEMENT_BADGES",
    "FIELD_TABLE_HEADERS",
    "BadgeStyle",
    "BlockRenderer",
    "enforcement_badge",
]
