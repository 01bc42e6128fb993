"""Load manual content YAML files into typed, immutable models.

A manual lives in one directory. Every ``*.yaml`` file in it is read in sorted
filename order, so ``00_overview.yaml`` comes before ``10_setup.yaml``. Each
file may contribute:

``manual``
    Mapping with the manual ``title`` (the first file that sets it wins).
``navigation``
    Mapping of section id to a list of breadcrumb labels.
``sections``
    List of section mappings; a section may nest ``subsections``.

Examples
--------
>>> from pathlib import Path
>>> from manual_pages.content.loader import load_manual
>>> manual = load_manual("appraisals", Path("content/appraisals"))  # doctest: +SKIP
>>> manual.sections.require("sec-1-1").title  # doctest: +SKIP
'Introduction to Appraisals'
"""

from __future__ import annotations

import typing as typ

import structlog
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from manual_pages.config.helpers import _optional_str

from .errors import ContentLoadError, UnknownEnforcementLevelError, UnknownVariantError
from .models import (
    Block,
    BusinessRule,
    BusinessRulesBlock,
    CalloutBlock,
    ConfigurationExample,
    ConfigurationExamplesBlock,
    ConfigurationValue,
    ContentLevel,
    EnforcementLevel,
    FieldDefinition,
    FieldTableBlock,
    IndustryContext,
    LearningObjectivesBlock,
    MarkdownBlock,
    NavigationPathBlock,
    RelatedTopic,
    RelatedTopicsBlock,
    ScreenshotBlock,
    Section,
    StepByStepBlock,
    TroubleshootingBlock,
    TroubleshootingItem,
    WorkflowDiagramBlock,
    WorkflowStep,
)
from .registry import Manual, NavigationRegistry, SectionRegistry
from .variants import CalloutVariant, parse_variant

if typ.TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger(__name__)

Payload = typ.Mapping[str, typ.Any]


def load_manual(key: str, content_dir: Path, *, title: str | None = None) -> Manual:
    """Read every content file in ``content_dir`` and build a :class:`Manual`.

    Parameters
    ----------
    key : str
        Manual identifier from the site configuration.
    content_dir : Path
        Directory holding the manual's ``*.yaml`` content files.
    title : str, optional
        Title used when no content file declares one.

    Returns
    -------
    Manual
        Sections in reading order plus the navigation registry.

    Raises
    ------
    FileNotFoundError
        If ``content_dir`` does not exist.
    ContentLoadError
        If a file is not valid YAML or does not match the content schema.
    DuplicateSectionError
        If two sections share an identifier.
    """
    if not content_dir.is_dir():
        msg = f"Content directory '{content_dir}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    sections: list[Section] = []
    navigation: dict[str, list[str]] = {}
    manual_title = None
    files = sorted(content_dir.glob("*.yaml"))
    for path in files:
        try:
            with path.open("r", encoding="utf-8") as handle:
                loaded = loader.load(handle) or {}
        except YAMLError as exc:
            msg = f"{path.name}: invalid YAML: {exc}"
            raise ContentLoadError(msg) from exc
        if not isinstance(loaded, dict):
            msg = f"{path.name}: top-level YAML structure must be a mapping."
            raise ContentLoadError(msg)

        manual_raw = loaded.get("manual") or {}
        if manual_title is None and manual_raw.get("title"):
            manual_title = str(manual_raw["title"])

        for section_id, labels in (loaded.get("navigation") or {}).items():
            if not isinstance(labels, list):
                msg = f"{path.name}: navigation for '{section_id}' must be a list."
                raise ContentLoadError(msg)
            navigation[str(section_id)] = [str(label) for label in labels]

        for payload in loaded.get("sections") or []:
            sections.extend(_build_sections(payload, source=path.name, parent_id=None))
        log.debug("content_file_loaded", manual=key, file=path.name)

    registry = SectionRegistry(sections)
    log.info("manual_loaded", manual=key, files=len(files), sections=len(registry))
    return Manual(
        key=key,
        title=manual_title or title or key.replace("-", " ").title(),
        sections=registry,
        navigation=NavigationRegistry(navigation),
    )


def _build_sections(
    payload: Payload, *, source: str, parent_id: str | None
) -> list[Section]:
    """Flatten a section and its ``subsections`` into reading order."""
    if not isinstance(payload, dict):
        msg = f"{source}: each section must be a mapping."
        raise ContentLoadError(msg)
    section_id = payload.get("id")
    if not section_id:
        msg = f"{source}: section is missing an 'id'."
        raise ContentLoadError(msg)
    where = f"{source}:{section_id}"
    title = _require(payload, "title", where)
    try:
        section = Section(
            id=str(section_id),
            title=str(title),
            number=str(payload.get("number", "")),
            description=str(payload.get("description", "")),
            content_level=ContentLevel(payload.get("content_level", "overview")),
            read_time_minutes=int(payload.get("read_time", 0) or 0),
            audience=_strings(payload.get("audience")),
            industry_context=_build_industry_context(payload.get("industry_context")),
            blocks=tuple(_build_block(raw, where) for raw in payload.get("blocks") or []),
            parent_id=parent_id,
        )
    except ContentLoadError:
        raise
    except (ValueError, TypeError) as exc:
        # An unknown content level or a non-numeric read time.
        msg = f"{where}: {exc}"
        raise ContentLoadError(msg) from exc

    flattened = [section]
    for child in payload.get("subsections") or []:
        flattened.extend(_build_sections(child, source=source, parent_id=section.id))
    return flattened


def _build_industry_context(payload: Payload | None) -> IndustryContext | None:
    if not payload:
        return None
    return IndustryContext(
        frequency=str(payload.get("frequency", "")),
        timing=str(payload.get("timing", "")),
        benchmark=str(payload.get("benchmark", "")),
        compliance=_strings(payload.get("compliance")),
    )


def _build_block(payload: Payload, where: str) -> Block:  # noqa: C901, PLR0911 - flat dispatch
    """Convert one ``blocks`` entry into its typed block."""
    if not isinstance(payload, dict):
        msg = f"{where}: each block must be a mapping."
        raise ContentLoadError(msg)
    kind = payload.get("type")
    match kind:
        case "markdown":
            return MarkdownBlock(text=str(_require(payload, "text", where)))
        case "callout":
            return _build_callout(payload, where)
        case "field_table":
            return FieldTableBlock(
                fields=tuple(_build_field(raw, where) for raw in payload.get("fields") or []),
                title=_optional_str(payload.get("title")),
            )
        case "business_rules":
            return BusinessRulesBlock(
                rules=tuple(
                    BusinessRule(
                        rule=str(_require(raw, "rule", where)),
                        enforcement=_enforcement(_require(raw, "enforcement", where)),
                        description=str(raw.get("description", "")),
                    )
                    for raw in payload.get("rules") or []
                ),
                title=_optional_str(payload.get("title")),
            )
        case "steps":
            return StepByStepBlock(
                steps=tuple(_build_step(raw, where) for raw in payload.get("steps") or []),
                title=_optional_str(payload.get("title")),
            )
        case "diagram":
            return WorkflowDiagramBlock(
                title=str(_require(payload, "title", where)),
                diagram=str(_require(payload, "diagram", where)),
                description=_optional_str(payload.get("description")),
            )
        case "navigation":
            path = payload.get("path")
            return NavigationPathBlock(
                path=_strings(path) if path is not None else None,
                section_id=_optional_str(payload.get("section")),
            )
        case "related_topics":
            return RelatedTopicsBlock(
                topics=tuple(
                    RelatedTopic(
                        section_id=str(_require(raw, "section", where)),
                        title=str(_require(raw, "title", where)),
                    )
                    for raw in payload.get("topics") or []
                ),
                title=_optional_str(payload.get("title")),
            )
        case "learning_objectives":
            return LearningObjectivesBlock(objectives=_strings(payload.get("objectives")))
        case "troubleshooting":
            return TroubleshootingBlock(
                items=tuple(
                    TroubleshootingItem(
                        issue=str(_require(raw, "issue", where)),
                        cause=str(raw.get("cause", "")),
                        solution=str(raw.get("solution", "")),
                    )
                    for raw in payload.get("items") or []
                )
            )
        case "configuration_examples":
            return ConfigurationExamplesBlock(
                examples=tuple(
                    _build_configuration_example(raw, where)
                    for raw in payload.get("examples") or []
                )
            )
        case "screenshot":
            return ScreenshotBlock(
                title=str(_require(payload, "title", where)),
                description=str(payload.get("description", "")),
            )
        case _:
            msg = f"{where}: unknown block type {kind!r}."
            raise ContentLoadError(msg)


def _build_callout(payload: Payload, where: str) -> CalloutBlock:
    nested = payload.get("blocks")
    content: str | tuple[Block, ...]
    if nested is not None:
        content = tuple(_build_block(raw, where) for raw in nested)
    else:
        content = str(payload.get("content", ""))
    return CalloutBlock(
        variant=_variant(payload.get("variant", "info")),
        content=content,
        title=_optional_str(payload.get("title")),
        style_override=_optional_str(payload.get("class")),
    )


def _build_field(payload: Payload, where: str) -> FieldDefinition:
    return FieldDefinition(
        name=str(_require(payload, "name", where)),
        required=bool(payload.get("required", False)),
        type=str(payload.get("type", "Text")),
        description=str(payload.get("description", "")),
        default_value=_optional_str(payload.get("default")),
        validation=_optional_str(payload.get("validation")),
    )


def _build_step(payload: Payload, where: str) -> WorkflowStep:
    return WorkflowStep(
        title=str(_require(payload, "title", where)),
        description=str(payload.get("description", "")),
        substeps=_strings(payload.get("substeps")),
        expected_result=_optional_str(payload.get("expected_result")),
    )


def _build_configuration_example(payload: Payload, where: str) -> ConfigurationExample:
    values = tuple(
        ConfigurationValue(field=str(raw.get("field", "")), value=str(raw.get("value", "")))
        for raw in payload.get("values") or []
    )
    return ConfigurationExample(
        title=str(_require(payload, "title", where)),
        context=str(payload.get("context", "")),
        values=values,
        outcome=str(payload.get("outcome", "")),
    )


def _require(payload: Payload, key: str, where: str) -> typ.Any:  # noqa: ANN401 - raw YAML value
    if not isinstance(payload, dict):
        msg = f"{where}: expected a mapping with '{key}'."
        raise ContentLoadError(msg)
    value = payload.get(key)
    if value is None or value == "":
        msg = f"{where}: missing required '{key}'."
        raise ContentLoadError(msg)
    return value


def _variant(value: object) -> CalloutVariant | str:
    """Return the matching variant, or the raw tag for the linter to report."""
    try:
        return parse_variant(str(value))
    except UnknownVariantError:
        return str(value)


def _enforcement(value: object) -> EnforcementLevel | str:
    """Return the matching level, or the raw value for the linter to report."""
    try:
        return EnforcementLevel.parse(str(value))
    except UnknownEnforcementLevelError:
        return str(value)


def _strings(value: object | None) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list):
        return tuple(str(item) for item in value)
    msg = f"expected a list of strings, got {type(value).__name__}"
    raise TypeError(msg)


__all__ = ["load_manual"]
