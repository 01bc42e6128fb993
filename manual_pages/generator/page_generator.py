"""High-level orchestration for manual page generation.

This module turns a loaded :class:`~manual_pages.content.Manual` into one HTML
page per section. :class:`ManualPageGenerator` lints the manual first (a
dangling reference aborts the build before anything is written), renders every
section's blocks with :class:`~manual_pages.generator.blocks.BlockRenderer`,
and writes the pages plus a metadata file that the manual index reads.

Example
-------
>>> from pathlib import Path
>>> from manual_pages.config import load_site_config
>>> from manual_pages.content.loader import load_manual
>>> from manual_pages.generator import ManualPageGenerator
>>> config = load_site_config(Path("config/manuals.yaml"))  # doctest: +SKIP
>>> manual_config = config.get_manual("appraisals")  # doctest: +SKIP
>>> manual = load_manual(manual_config.key, manual_config.content_dir)  # doctest: +SKIP
>>> ManualPageGenerator(manual_config, manual).run()  # doctest: +SKIP
[PosixPath('public/sec-1.html'), ...]
"""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path

import structlog
from jinja2 import Environment, FileSystemLoader

from manual_pages._constants import PAGE_META_TEMPLATE
from manual_pages.content.lint import ContentLinter
from manual_pages.content.variants import DEFAULT_VARIANTS

from .blocks import DEFAULT_TEMPLATES_DIR, BlockRenderer
from .links import SectionLinkResolver
from .models import PageLink, SectionModel

if typ.TYPE_CHECKING:
    from manual_pages.config import ManualConfig
    from manual_pages.content.models import Section
    from manual_pages.content.registry import Manual
    from markupsafe import Markup

    from manual_pages.content.variants import VariantRegistry

log = structlog.get_logger(__name__)


class ManualPageGenerator:
    """Render a manual's sections into themed HTML files."""

    def __init__(
        self,
        manual_config: ManualConfig,
        manual: Manual,
        *,
        variants: VariantRegistry = DEFAULT_VARIANTS,
        templates_dir: Path | None = None,
        output_dir: Path | None = None,
    ) -> None:
        """Initialize the generator with configuration and loaded content.

        Parameters
        ----------
        manual_config : ManualConfig
            Output, theming and rendering options for the manual.
        manual : Manual
            Loaded sections and navigation registry.
        variants : VariantRegistry, optional
            Callout styles; defaults to the built-in registry.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package templates.
        output_dir : Path, optional
            Override for the HTML output directory; defaults to the config output.
        """
        self.config = manual_config
        self.manual = manual
        self.variants = variants
        self.output_dir = output_dir or manual_config.output_dir
        self.templates_dir = templates_dir or DEFAULT_TEMPLATES_DIR
        self.links = SectionLinkResolver(manual_config.filename_prefix)
        self.blocks = BlockRenderer(
            variants=variants,
            navigation=manual.navigation,
            links=self.links,
            pygments_style=manual_config.pygments_style,
            separator=manual_config.breadcrumb_separator,
            templates_dir=self.templates_dir,
        )
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template("section_page.jinja")

    def run(self) -> list[Path]:
        """Lint the manual, then write every section page to disk.

        Returns
        -------
        list[Path]
            Paths to the generated HTML documents, in reading order.

        Raises
        ------
        ContentValidationError
            If the linter reports any error; no page is written.
        RuntimeError
            If the manual has no sections.
        """
        issues = ContentLinter(self.manual, variants=self.variants).ensure_valid()
        for issue in issues:
            log.warning("lint_warning", manual=self.manual.key, issue=issue.format())
        if not len(self.manual.sections):
            msg = f"Manual '{self.manual.key}' has no sections."
            raise RuntimeError(msg)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        models = [self._build_section_model(section) for section in self.manual.sections]
        nav_groups = self._build_nav_groups()

        written: list[Path] = []
        for model in models:
            html = self.template.render(**self._page_context(model, nav_groups))
            output_path = self.output_dir / self.links.filename_for(model.id)
            output_path.write_text(html, encoding="utf-8")
            log.debug("page_written", manual=self.manual.key, path=str(output_path))
            written.append(output_path)
        self._write_metadata(written[0].name)
        log.info("manual_built", manual=self.manual.key, pages=len(written))
        return written

    def render_section(self, section: Section) -> str:
        """Return the full HTML page for one section without writing it."""
        model = self._build_section_model(section)
        return self.template.render(**self._page_context(model, self._build_nav_groups()))

    def _page_context(
        self, model: SectionModel, nav_groups: list[dict[str, typ.Any]]
    ) -> dict[str, typ.Any]:
        return {
            "section": model,
            "manual": self.manual,
            "manual_config": self.config,
            "nav_groups": nav_groups,
            "theme": self.config.theme,
            "pygments_css": self.blocks.prose.stylesheet,
            "html_title": self._format_page_title(model),
            "footer_note": self.config.footer_note,
        }

    def _build_section_model(self, section: Section) -> SectionModel:
        """Construct a SectionModel with rendered blocks and header metadata."""
        sections = self.manual.sections
        previous, following = sections.neighbours(section.id)
        context = section.industry_context
        return SectionModel(
            id=section.id,
            title=section.display_title,
            short_title=section.title,
            description=section.description,
            content_level=section.content_level.value,
            read_time_minutes=section.read_time_minutes,
            audience=list(section.audience),
            industry_context=(
                {
                    "frequency": context.frequency,
                    "timing": context.timing,
                    "benchmark": context.benchmark,
                    "compliance": list(context.compliance),
                }
                if context
                else None
            ),
            breadcrumb_html=self._breadcrumb(section),
            body_html=self.blocks.render_blocks(
                section.blocks, anchor_prefix=f"{section.id}-steps"
            ),
            children=[self._page_link(child) for child in sections.children(section.id)],
            previous=self._page_link(previous) if previous else None,
            next=self._page_link(following) if following else None,
        )

    def _breadcrumb(self, section: Section) -> Markup:
        """Render the registered trail, or one derived from the section hierarchy."""
        if section.id in self.manual.navigation:
            return self.blocks.navigation_path(section_id=section.id)
        return self.blocks.navigation_path(self._fallback_trail(section))

    def _fallback_trail(self, section: Section) -> tuple[str, ...]:
        trail: list[str] = []
        current: Section | None = section
        while current is not None:
            trail.append(current.title)
            parent_id = current.parent_id
            current = self.manual.sections.get(parent_id) if parent_id else None
        trail.append(self.manual.title)
        return tuple(reversed(trail))

    def _build_nav_groups(self) -> list[dict[str, typ.Any]]:
        """Build sidebar navigation groups: one per top-level part."""
        groups: list[dict[str, typ.Any]] = []
        for part in self.manual.sections.children(None):
            entries: list[dict[str, typ.Any]] = [
                {
                    "label": part.display_title,
                    "href": self.links.filename_for(part.id),
                    "section_id": part.id,
                    "is_primary": True,
                }
            ]
            entries.extend(
                {
                    "label": child.display_title,
                    "href": self.links.filename_for(child.id),
                    "section_id": child.id,
                    "is_primary": False,
                }
                for child in self._descendants(part.id)
            )
            groups.append(
                {"label": part.display_title, "section_id": part.id, "entries": entries}
            )
        return groups

    def _descendants(self, parent_id: str) -> typ.Iterator[Section]:
        for child in self.manual.sections.children(parent_id):
            yield child
            yield from self._descendants(child.id)

    def _page_link(self, section: Section) -> PageLink:
        return PageLink(label=section.display_title, href=self.links.filename_for(section.id))

    def _format_page_title(self, model: SectionModel) -> str:
        """Compose the HTML title using site name, section, and configured suffix."""
        site_name = self.config.theme.site_name
        suffix = self.config.page_title_suffix
        return f"{site_name} — {model.short_title} | {suffix}"

    def _write_metadata(self, first_filename: str) -> None:
        """Persist the metadata JSON the manual index reads."""
        metadata = {
            "first_file": first_filename,
            "title": self.manual.title,
            "read_time_minutes": self.manual.read_time_minutes,
            "sections": [
                {
                    "id": section.id,
                    "number": section.number,
                    "title": section.title,
                    "parent_id": section.parent_id,
                    "read_time_minutes": section.read_time_minutes,
                    "file": self.links.filename_for(section.id),
                }
                for section in self.manual.sections
            ],
        }
        path = self.output_dir / PAGE_META_TEMPLATE.format(key=self.config.key)
        path.write_text(json.dumps(metadata, ensure_ascii=False), encoding="utf-8")


__all__ = ["ManualPageGenerator"]
