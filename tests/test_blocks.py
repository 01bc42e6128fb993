"""Tests for the content block renderers.

Each renderer is checked through the HTML it produces, parsed with
BeautifulSoup, so the assertions survive whitespace changes in the templates.
"""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup
from structlog.testing import capture_logs

from manual_pages.content.errors import (
    DiagramSyntaxError,
    UnknownEnforcementLevelError,
    UnknownVariantError,
)
from manual_pages.content.models import (
    BusinessRule,
    CalloutBlock,
    ConfigurationExample,
    ConfigurationExamplesBlock,
    ConfigurationValue,
    EnforcementLevel,
    FieldDefinition,
    LearningObjectivesBlock,
    MarkdownBlock,
    NavigationPathBlock,
    RelatedTopic,
    ScreenshotBlock,
    StepByStepBlock,
    TroubleshootingBlock,
    TroubleshootingItem,
    WorkflowDiagramBlock,
    WorkflowStep,
)
from manual_pages.content.registry import NavigationRegistry
from manual_pages.content.variants import DEFAULT_VARIANTS, CalloutVariant
from manual_pages.generator.blocks import (
    ENFORCEMENT_BADGES,
    FIELD_TABLE_HEADERS,
    BlockRenderer,
    enforcement_badge,
)
from manual_pages.generator.links import SectionLinkResolver

SIMPLE_DIAGRAM = "flowchart TD\n  A[Start] -->|go| B{Done?}\n  B --> C[End]\n"


@pytest.fixture
def renderer() -> BlockRenderer:
    """Return a renderer with a small navigation registry and prefixed links."""
    navigation = NavigationRegistry(
        {"sec-2-1": ["Performance", "Setup", "Appraisals", "Index Settings"]}
    )
    return BlockRenderer(
        navigation=navigation, links=SectionLinkResolver("appraisals-")
    )


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _cells(html: str) -> list[list[str]]:
    rows = _soup(html).select("tbody tr")
    return [[cell.get_text(strip=True) for cell in row.find_all("td")] for row in rows]


class TestFieldTable:
    def test_sla_hours_row(self, renderer: BlockRenderer) -> None:
        field = FieldDefinition(
            name="sla_hours",
            required=False,
            type="Number",
            description="Escalation hours",
            default_value="72",
            validation="1-720",
        )
        html = renderer.field_table([field])
        assert _cells(html) == [
            ["sla_hours", "No", "Number", "Escalation hours", "72", "1-720"]
        ]

    def test_empty_list_renders_headers_only(self, renderer: BlockRenderer) -> None:
        soup = _soup(renderer.field_table([]))
        headers = [th.get_text(strip=True) for th in soup.select("thead th")]
        assert headers == list(FIELD_TABLE_HEADERS)
        assert soup.select("tbody tr") == []

    def test_rows_keep_input_order(self, renderer: BlockRenderer) -> None:
        names = ["zeta", "alpha", "mid"]
        fields = [FieldDefinition(name, True, "Text", "") for name in names]
        assert [row[0] for row in _cells(renderer.field_table(fields))] == names

    def test_required_badge_and_placeholders(self, renderer: BlockRenderer) -> None:
        field = FieldDefinition("employee_id", True, "UUID", "Employee reference")
        row = _cells(renderer.field_table([field], title="Fields"))[0]
        assert row[1] == "Yes"
        assert row[4:] == ["—", "—"]

    def test_title_is_optional(self, renderer: BlockRenderer) -> None:
        assert _soup(renderer.field_table([])).select(".block-title") == []
        titled = _soup(renderer.field_table([], title="Task fields"))
        assert titled.select_one(".block-title").get_text() == "Task fields"


class TestBusinessRules:
    def test_badges_follow_enforcement(self, renderer: BlockRenderer) -> None:
        rules = [
            BusinessRule("Weights sum to 100%", EnforcementLevel.SYSTEM, "Checked on save."),
            BusinessRule("Review probation", EnforcementLevel.ADVISORY, "Optional."),
        ]
        soup = _soup(renderer.business_rules(rules))
        system, advisory = soup.select(".rule .badge")
        assert "badge--system" in system["class"]
        assert "badge--advisory" in advisory["class"]
        assert system["class"] != advisory["class"]
        assert int(system["data-weight"]) > int(advisory["data-weight"])
        assert [badge.get_text() for badge in (system, advisory)] == ["System", "Advisory"]

    def test_badge_lookup_is_a_fixed_three_way_mapping(self) -> None:
        assert set(ENFORCEMENT_BADGES) == set(EnforcementLevel)
        weights = [ENFORCEMENT_BADGES[level].weight for level in EnforcementLevel]
        assert weights == sorted(weights, reverse=True)
        assert len({badge.css_class for badge in ENFORCEMENT_BADGES.values()}) == 3

    def test_badge_lookup_accepts_strings(self) -> None:
        assert enforcement_badge("policy") is ENFORCEMENT_BADGES[EnforcementLevel.POLICY]

    def test_unknown_level_raises(self, renderer: BlockRenderer) -> None:
        rule = BusinessRule("Odd rule", "Mandatory", "Not a real level.")  # type: ignore[arg-type]
        with pytest.raises(UnknownEnforcementLevelError, match="Mandatory"):
            renderer.business_rules([rule])


class TestStepByStep:
    def test_numbers_come_from_position(self, renderer: BlockRenderer) -> None:
        steps = [WorkflowStep("Open", "Open the page"), WorkflowStep("Save", "Save it")]
        inserted = [WorkflowStep("Sign in", "Authenticate"), *steps]

        soup = _soup(renderer.step_by_step(inserted))
        numbers = [li["data-step"] for li in soup.select("li.step")]
        titles = [h.get_text() for h in soup.select(".step-title")]
        assert numbers == ["1", "2", "3"]
        assert titles == ["Sign in", "Open", "Save"]
        assert soup.select_one("li.step")["id"] == "steps-step-1"

    def test_expected_result_is_omitted_when_missing(
        self, renderer: BlockRenderer
    ) -> None:
        steps = [
            WorkflowStep("Open", "Open the page", expected_result="Page displays"),
            WorkflowStep("Review", "Review the defaults"),
        ]
        soup = _soup(renderer.step_by_step(steps))
        first, second = soup.select("li.step")
        assert "Page displays" in first.select_one(".expected-result").get_text()
        assert second.select_one(".expected-result") is None

    def test_substeps_render_as_a_list(self, renderer: BlockRenderer) -> None:
        step = WorkflowStep("Configure", "Pick a method", substeps=("Weighted", "Simple"))
        soup = _soup(renderer.step_by_step([step], anchor_prefix="index"))
        assert [li.get_text() for li in soup.select(".substeps li")] == ["Weighted", "Simple"]
        assert soup.select_one("li.step")["id"] == "index-step-1"

    def test_page_with_two_step_blocks_gets_distinct_anchors(
        self, renderer: BlockRenderer
    ) -> None:
        block = StepByStepBlock(steps=(WorkflowStep("Only", "One step"),))
        soup = _soup(renderer.render_blocks([block, block], anchor_prefix="sec-1"))
        ids = [div["id"] for div in soup.select("div.step-by-step")]
        assert ids == ["sec-1", "sec-1-2"]

    def test_steps_nested_in_callouts_share_the_page_sequence(
        self, renderer: BlockRenderer
    ) -> None:
        steps = StepByStepBlock(steps=(WorkflowStep("Only", "One step"),))
        blocks = [
            CalloutBlock("tip", (steps,)),
            CalloutBlock("note", (MarkdownBlock("Then:"), steps)),
            steps,
        ]
        soup = _soup(renderer.render_blocks(blocks, anchor_prefix="sec-1-steps"))
        assert [div["id"] for div in soup.select("div.step-by-step")] == [
            "sec-1-steps",
            "sec-1-steps-2",
            "sec-1-steps-3",
        ]
        step_ids = [li["id"] for li in soup.select("li.step")]
        assert len(step_ids) == len(set(step_ids)) == 3

    def test_callout_forwards_anchor_prefix(self, renderer: BlockRenderer) -> None:
        steps = StepByStepBlock(steps=(WorkflowStep("Only", "One step"),))
        soup = _soup(renderer.tip_callout((steps, steps), anchor_prefix="tips"))
        assert [li["id"] for li in soup.select("li.step")] == [
            "tips-step-1",
            "tips-2-step-1",
        ]


class TestCallout:
    def test_default_variant_is_info(self, renderer: BlockRenderer) -> None:
        aside = _soup(renderer.callout(content="Read this first.")).aside
        assert aside["data-variant"] == "info"

    def test_style_icon_and_title(self, renderer: BlockRenderer) -> None:
        html = renderer.callout(
            "warning", "Changes apply **immediately**.", title="Careful", style_override="my-4"
        )
        aside = _soup(html).aside
        style = DEFAULT_VARIANTS.resolve("warning")
        assert style.border_accent in aside["class"]
        assert style.background_tone in aside["class"]
        assert "my-4" in aside["class"]
        assert aside.select_one(".callout-icon")["data-icon"] == style.icon
        assert aside.select_one(".callout-title strong").get_text() == "Careful"
        body_strong = [tag.get_text() for tag in aside.select(".callout-body p strong")]
        assert "immediately" in body_strong

    def test_title_is_escaped(self, renderer: BlockRenderer) -> None:
        aside = _soup(renderer.callout("note", "x", title="<b>bold</b>")).aside
        assert aside.select_one(".callout-title").get_text() == "<b>bold</b>"
        assert aside.select_one(".callout-title b") is None

    @pytest.mark.parametrize("variant", list(CalloutVariant))
    def test_wrappers_delegate(self, renderer: BlockRenderer, variant: CalloutVariant) -> None:
        wrapper = getattr(renderer, f"{variant.value}_callout")
        assert wrapper("Body text", title="T") == renderer.callout(variant, "Body text", title="T")

    def test_nested_blocks(self, renderer: BlockRenderer) -> None:
        html = renderer.callout(
            "tip",
            (
                MarkdownBlock("Inner *prose*."),
                CalloutBlock(variant="note", content="Deeper."),
            ),
        )
        outer = _soup(html).aside
        inner = outer.select_one("aside")
        assert inner["data-variant"] == "note"
        assert outer.select_one("em").get_text() == "prose"

    def test_unknown_variant_fails_fast(self, renderer: BlockRenderer) -> None:
        with pytest.raises(UnknownVariantError):
            renderer.callout("bogus", "text")

    def test_render_block_degrades_unknown_variant(self, renderer: BlockRenderer) -> None:
        with capture_logs() as logs:
            html = renderer.render_block(CalloutBlock(variant="bogus", content="x"))
        placeholder = _soup(html).select_one(".content-error")
        assert placeholder is not None
        assert placeholder["data-block"] == "CalloutBlock"
        assert "bogus" in placeholder.get_text()
        assert any(entry["event"] == "block_degraded" for entry in logs)


class TestNavigationPath:
    def test_explicit_path(self, renderer: BlockRenderer) -> None:
        soup = _soup(renderer.navigation_path(["Performance", "Setup", "Index"]))
        labels = [span.get_text() for span in soup.select(".breadcrumb-label")]
        assert labels == ["Performance", "Setup", "Index"]
        separators = soup.select(".breadcrumb-separator")
        assert [sep.get_text() for sep in separators] == ["›", "›"]
        assert soup.select("li")[-1]["aria-current"] == "page"

    def test_registry_lookup(self, renderer: BlockRenderer) -> None:
        soup = _soup(renderer.navigation_path(section_id="sec-2-1"))
        labels = [span.get_text() for span in soup.select(".breadcrumb-label")]
        assert labels == ["Performance", "Setup", "Appraisals", "Index Settings"]

    def test_unregistered_section_yields_empty_trail(self, renderer: BlockRenderer) -> None:
        with capture_logs() as logs:
            soup = _soup(renderer.navigation_path(section_id="sec-9-9"))
        assert soup.select("li") == []
        assert logs[0]["event"] == "navigation_path_missing"
        assert logs[0]["section_id"] == "sec-9-9"

    def test_custom_separator(self) -> None:
        renderer = BlockRenderer(separator="/")
        soup = _soup(renderer.navigation_path(["A", "B"]))
        assert soup.select_one(".breadcrumb-separator").get_text() == "/"

    def test_block_prefers_explicit_path(self, renderer: BlockRenderer) -> None:
        block = NavigationPathBlock(path=("Custom",), section_id="sec-2-1")
        soup = _soup(renderer.render_block(block))
        assert [span.get_text() for span in soup.select(".breadcrumb-label")] == ["Custom"]


class TestRelatedTopics:
    def test_links_use_filename_prefix(self, renderer: BlockRenderer) -> None:
        topics = [RelatedTopic("sec-1-2", "Lifecycle"), RelatedTopic("sec-2-2", "Tasks")]
        soup = _soup(renderer.related_topics(topics))
        links = soup.select("a.xref")
        assert [(a["href"], a.get_text()) for a in links] == [
            ("appraisals-sec-1-2.html", "Lifecycle"),
            ("appraisals-sec-2-2.html", "Tasks"),
        ]
        assert soup.select_one(".block-title").get_text() == "Related Topics"

    def test_targets_are_not_verified_at_render_time(self, renderer: BlockRenderer) -> None:
        soup = _soup(renderer.related_topics([RelatedTopic("sec-missing", "Gone")]))
        assert soup.select_one("a")["href"] == "appraisals-sec-missing.html"

    def test_prose_section_links_are_rewritten(self, renderer: BlockRenderer) -> None:
        html = renderer.markdown(
            "See [index](section:sec-2-1#steps-step-2) or [web](https://example.com)."
        )
        internal, external = _soup(html).select("a")
        assert internal["href"] == "appraisals-sec-2-1.html#steps-step-2"
        assert internal["class"] == ["xref"]
        assert external["href"] == "https://example.com"
        assert not external.has_attr("class")


class TestWorkflowDiagram:
    def test_source_is_emitted_for_mermaid(self, renderer: BlockRenderer) -> None:
        html = renderer.workflow_diagram("Flow", SIMPLE_DIAGRAM, description="How it goes")
        figure = _soup(html).figure
        assert figure.select_one("pre.mermaid").get_text() == SIMPLE_DIAGRAM.strip("\n")
        assert figure["data-nodes"] == "3"
        assert figure["data-edges"] == "2"
        assert figure["data-direction"] == "TD"
        assert figure.select_one(".diagram-description").get_text() == "How it goes"

    def test_malformed_diagram_fails_fast(self, renderer: BlockRenderer) -> None:
        with pytest.raises(DiagramSyntaxError) as excinfo:
            renderer.workflow_diagram("Broken", "flowchart TD\n  A -> B")
        assert excinfo.value.line == 2

    def test_malformed_diagram_degrades_in_page_rendering(
        self, renderer: BlockRenderer
    ) -> None:
        block = WorkflowDiagramBlock(title="Broken", diagram="pie\n  title Pets")
        html = renderer.render_blocks([MarkdownBlock("Before."), block])
        soup = _soup(html)
        assert soup.select_one("p").get_text() == "Before."
        assert "unsupported diagram type" in soup.select_one(".content-error").get_text()


class TestSupplementaryBlocks:
    def test_learning_objectives(self, renderer: BlockRenderer) -> None:
        html = renderer.render_block(LearningObjectivesBlock(("Explain cycles", "Find setup")))
        assert [li.get_text() for li in _soup(html).select("li")] == [
            "Explain cycles",
            "Find setup",
        ]

    def test_troubleshooting(self, renderer: BlockRenderer) -> None:
        item = TroubleshootingItem("No index", "Too few cycles", "Lower the minimum")
        html = renderer.render_block(TroubleshootingBlock((item,)))
        assert _cells(html) == [["No index", "Too few cycles", "Lower the minimum"]]

    def test_configuration_examples(self, renderer: BlockRenderer) -> None:
        example = ConfigurationExample(
            title="Standard",
            context="Balanced",
            values=(ConfigurationValue("Method", "Weighted Average"),),
            outcome="Balanced index.",
        )
        soup = _soup(renderer.render_block(ConfigurationExamplesBlock((example,))))
        assert soup.select_one("dt").get_text() == "Method"
        assert soup.select_one("dd code").get_text() == "Weighted Average"

    def test_screenshot_placeholder(self, renderer: BlockRenderer) -> None:
        html = renderer.render_block(ScreenshotBlock("Form", "The settings form."))
        figure = _soup(html).figure
        assert figure["data-screenshot"] == "Form"


def test_rendering_is_idempotent(renderer: BlockRenderer) -> None:
    blocks = [
        CalloutBlock(
            variant="industry",
            content=(MarkdownBlock("See [x](section:sec-1)."),),
            title="Practice",
        ),
        StepByStepBlock(steps=(WorkflowStep("One", "First", substeps=("a", "b")),)),
        StepByStepBlock(steps=(WorkflowStep("Two", "Second"),)),
        WorkflowDiagramBlock(title="Flow", diagram=SIMPLE_DIAGRAM),
        NavigationPathBlock(section_id="sec-2-1"),
    ]
    first = renderer.render_blocks(blocks)
    second = renderer.render_blocks(blocks)
    assert first == second
    assert BlockRenderer(
        navigation=renderer.navigation, links=renderer.links
    ).render_blocks(blocks) == first
