"""Tests for loading manual content from YAML files."""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest

from manual_pages.content.errors import ContentLoadError, DuplicateSectionError
from manual_pages.content.loader import load_manual
from manual_pages.content.models import (
    BusinessRulesBlock,
    CalloutBlock,
    ContentLevel,
    EnforcementLevel,
    FieldTableBlock,
    MarkdownBlock,
    StepByStepBlock,
)
from manual_pages.content.variants import CalloutVariant

if typ.TYPE_CHECKING:
    from pathlib import Path

    from manual_pages.content.registry import Manual


def _write(directory: Path, name: str, text: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / name).write_text(dedent(text), encoding="utf-8")


def test_sample_manual_sections_in_reading_order(sample_manual: Manual) -> None:
    assert sample_manual.title == "Appraisals Administrator Manual"
    assert sample_manual.sections.ids() == (
        "sec-1",
        "sec-1-1",
        "sec-1-2",
        "sec-2",
        "sec-2-1",
        "sec-2-2",
    )
    parents = {section.id: section.parent_id for section in sample_manual.sections}
    assert parents["sec-1"] is None
    assert parents["sec-1-2"] == "sec-1"
    assert parents["sec-2-2"] == "sec-2"


def test_sample_manual_metadata(sample_manual: Manual) -> None:
    index = sample_manual.sections.require("sec-2-1")
    assert index.title == "Index Settings"
    assert index.read_time_minutes == 12
    assert sample_manual.read_time_minutes == 30
    assert sample_manual.navigation.path_for("sec-2-1") == (
        "Performance",
        "Setup",
        "Appraisals",
        "Index Settings",
    )
    intro = sample_manual.sections.require("sec-1-1")
    assert intro.content_level is ContentLevel.CONCEPT
    assert intro.industry_context is not None
    assert intro.audience == ("HR Administrator", "HR Business Partner")


def test_sample_manual_block_payloads(sample_manual: Manual) -> None:
    tasks = sample_manual.sections.require("sec-2-2")
    table = next(b for b in tasks.blocks if isinstance(b, FieldTableBlock))
    sla = next(f for f in table.fields if f.name == "sla_hours")
    assert (sla.required, sla.type, sla.default_value, sla.validation) == (
        False,
        "Number",
        "72",
        "1-720",
    )

    tip = next(b for b in tasks.blocks if isinstance(b, CalloutBlock))
    assert tip.variant is CalloutVariant.TIP
    assert isinstance(tip.content, tuple)
    assert isinstance(tip.content[0], MarkdownBlock)

    index = sample_manual.sections.require("sec-2-1")
    rules = next(b for b in index.blocks if isinstance(b, BusinessRulesBlock))
    assert [rule.enforcement for rule in rules.rules] == [
        EnforcementLevel.SYSTEM,
        EnforcementLevel.POLICY,
        EnforcementLevel.ADVISORY,
    ]
    steps = next(b for b in index.blocks if isinstance(b, StepByStepBlock))
    assert len(steps.steps) == 4
    assert steps.steps[2].expected_result is None


def test_title_falls_back_to_argument(tmp_path: Path) -> None:
    _write(
        tmp_path,
        "a.yaml",
        """
        sections:
          - id: s1
            title: Only
            blocks:
              - type: callout
                variant: Warning
                content: Mind the gap.
        """,
    )
    manual = load_manual("leave", tmp_path, title="Leave Manual")
    assert manual.title == "Leave Manual"
    (callout,) = manual.sections.require("s1").blocks
    assert callout == CalloutBlock(variant=CalloutVariant.WARNING, content="Mind the gap.")
    assert load_manual("time-off", tmp_path).title == "Time Off"


@pytest.mark.parametrize(
    ("document", "fragment"),
    [
        (
            """
            sections:
              - id: s1
                title: T
                blocks:
                  - type: carousel
            """,
            "unknown block type 'carousel'",
        ),
        (
            """
            sections:
              - id: s1
                title: T
                content_level: draft
            """,
            "a.yaml:s1: 'draft' is not a valid ContentLevel",
        ),
        (
            """
            sections:
              - title: No id
            """,
            "section is missing an 'id'",
        ),
        (
            """
            sections:
              - id: s1
            """,
            "a.yaml:s1: missing required 'title'",
        ),
        (
            """
            - just
            - a list
            """,
            "top-level YAML structure must be a mapping",
        ),
        (
            """
            sections: [
            """,
            "invalid YAML",
        ),
    ],
)
def test_malformed_content_is_rejected(
    tmp_path: Path, document: str, fragment: str
) -> None:
    _write(tmp_path, "a.yaml", document)
    with pytest.raises(ContentLoadError) as excinfo:
        load_manual("m", tmp_path)
    assert fragment in str(excinfo.value)


def test_duplicate_ids_across_files(tmp_path: Path) -> None:
    _write(tmp_path, "00_a.yaml", "sections:\n  - {id: s1, title: A}\n")
    _write(tmp_path, "10_b.yaml", "sections:\n  - {id: s1, title: B}\n")
    with pytest.raises(DuplicateSectionError, match="'s1'"):
        load_manual("m", tmp_path)


def test_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_manual("m", tmp_path / "missing")


def test_unknown_tags_are_kept_for_the_linter(tmp_path: Path) -> None:
    _write(
        tmp_path,
        "a.yaml",
        """
        sections:
          - id: s1
            title: T
            blocks:
              - type: callout
                variant: tipp
                content: x
              - type: business_rules
                rules:
                  - {rule: R, enforcement: Mandatory}
                  - {rule: S, enforcement: policy}
        """,
    )
    callout, rules = load_manual("m", tmp_path).sections.require("s1").blocks
    assert isinstance(callout, CalloutBlock)
    assert callout.variant == "tipp"
    assert isinstance(rules, BusinessRulesBlock)
    assert [rule.enforcement for rule in rules.rules] == [
        "Mandatory",
        EnforcementLevel.POLICY,
    ]
