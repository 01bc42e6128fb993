"""Shared fixtures for the manual_pages test suite."""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import pytest
import structlog

from manual_pages.config import ManualConfig, ThemeConfig
from manual_pages.content.loader import load_manual
from manual_pages.content.models import Section
from manual_pages.content.registry import Manual, NavigationRegistry, SectionRegistry

if typ.TYPE_CHECKING:
    from manual_pages.content.models import Block

REPO_ROOT = Path(__file__).resolve().parents[1]
SAMPLE_CONTENT_DIR = REPO_ROOT / "content" / "appraisals"


@pytest.fixture
def sample_manual() -> Manual:
    """Return the appraisals manual shipped with the repository."""
    return load_manual("appraisals", SAMPLE_CONTENT_DIR)


@pytest.fixture
def manual_config(tmp_path: Path) -> ManualConfig:
    """Return a manual config writing into a per-test output directory."""
    return ManualConfig(
        key="appraisals",
        label="Appraisals Administrator Manual",
        content_dir=SAMPLE_CONTENT_DIR,
        description="Configure appraisal cycles.",
        page_title_suffix="Enablement Manual",
        filename_prefix="appraisals-",
        output_dir=tmp_path / "public" / "manuals",
        pygments_style="monokai",
        breadcrumb_separator="›",
        footer_note="Reviewed each cycle.",
        theme=ThemeConfig(),
    )


class ManualFactory(typ.Protocol):
    def __call__(
        self,
        *sections: Section,
        navigation: typ.Mapping[str, typ.Sequence[str]] | None = None,
    ) -> Manual: ...


class SectionFactory(typ.Protocol):
    def __call__(
        self, section_id: str, *blocks: Block, parent_id: str | None = None
    ) -> Section: ...


@pytest.fixture
def make_manual() -> ManualFactory:
    """Return a helper assembling an in-memory manual from sections."""

    def _make(
        *sections: Section,
        navigation: typ.Mapping[str, typ.Sequence[str]] | None = None,
    ) -> Manual:
        return Manual(
            key="test",
            title="Test Manual",
            sections=SectionRegistry(sections),
            navigation=NavigationRegistry(navigation),
        )

    return _make


@pytest.fixture
def make_section() -> SectionFactory:
    """Return a helper building a section titled after its identifier."""

    def _make(
        section_id: str, *blocks: Block, parent_id: str | None = None
    ) -> Section:
        return Section(
            id=section_id,
            title=section_id.replace("-", " ").title(),
            blocks=tuple(blocks),
            parent_id=parent_id,
        )

    return _make


@pytest.fixture
def reset_logging() -> typ.Iterator[None]:
    """Undo ``configure_logging`` so later tests keep structlog defaults."""
    yield
    logging.getLogger().handlers.clear()
    logging.getLogger("manual_pages").setLevel(logging.NOTSET)
    structlog.reset_defaults()
