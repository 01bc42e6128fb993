"""Cyclopts CLI entrypoint for building and checking enablement manuals.

The ``manual`` console script loads ``config/manuals.yaml``, reads each
manual's YAML content, validates it and renders static HTML. ``manual lint``
runs the validation alone (use it in CI before publishing), and
``manual check-diagram`` validates a standalone flowchart file while it is
being drafted.

Examples
--------
Build every configured manual:

>>> from manual_pages.cli import main
>>> main()  # doctest: +SKIP

Lint a single manual, treating warnings as errors:

>>> from manual_pages.cli import app
>>> app(["lint", "--manual", "appraisals", "--strict"])  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import DEFAULT_CONFIG_PATH
from .config import configure_logging, load_site_config
from .content.errors import ContentError, ContentValidationError, DiagramSyntaxError
from .content.lint import ContentLinter
from .content.loader import load_manual
from .diagram import parse_diagram
from .generator import ManualPageGenerator
from .manual_index import ManualIndexBuilder

if typ.TYPE_CHECKING:
    from .config import ManualConfig, SiteConfig
    from .content.registry import Manual

DEFAULT_CONFIG = Path(DEFAULT_CONFIG_PATH)

app = App(name="manual", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

ManualOption = typ.Annotated[
    str | None, Parameter(help="Manual identifier", env_var="INPUT_MANUAL")
]
ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
]
VerboseOption = typ.Annotated[
    bool, Parameter(help="Log debug output", env_var="INPUT_VERBOSE")
]
LogJsonOption = typ.Annotated[
    bool, Parameter(help="Log JSON lines to stderr", env_var="INPUT_LOG_JSON")
]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _select_manuals(site_config: SiteConfig, manual: str | None) -> list[ManualConfig]:
    if manual:
        return [site_config.get_manual(manual)]
    return list(site_config.manuals.values())


def _load_content(manual_config: ManualConfig) -> Manual:
    return load_manual(
        manual_config.key, manual_config.content_dir, title=manual_config.label
    )


@app.command(help="Validate manual content and render it to static HTML.")
def build(
    *,
    manual: ManualOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="INPUT_OUTPUT_DIR"),
    ] = None,
    verbose: VerboseOption = False,
    log_json: LogJsonOption = False,
) -> None:
    """Build HTML pages for the requested manuals and refresh the index.

    Parameters
    ----------
    manual : str or None, optional
        Specific manual key to build; when ``None`` (default) all manuals are
        built.
    config : Path, optional
        Path to the ``manuals.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).
    output_dir : Path or None, optional
        Override output directory; only valid when building one manual.
    verbose : bool, optional
        Emit debug logging.
    log_json : bool, optional
        Emit logs as JSON lines.

    Raises
    ------
    ValueError
        If ``output_dir`` is supplied when more than one manual is built.
    SystemExit
        With status 1 when a manual fails to load or validate.
    """
    configure_logging(verbose=verbose, log_json=log_json)
    site_config = load_site_config(config)
    targets = _select_manuals(site_config, manual)
    if len(targets) > 1 and output_dir:
        msg = "Cannot override output_dir when building multiple manuals."
        raise ValueError(msg)

    if output_dir:
        # The index reads metadata from each manual's output_dir.
        targets = [dc.replace(targets[0], output_dir=output_dir)]
        site_config = dc.replace(
            site_config, manuals={**site_config.manuals, targets[0].key: targets[0]}
        )

    for manual_config in targets:
        try:
            content = _load_content(manual_config)
        except ContentError as exc:
            print(f"{manual_config.key}: error: {exc}")
            raise SystemExit(1) from exc
        generator = ManualPageGenerator(manual_config, content)
        try:
            written = generator.run()
        except ContentValidationError as exc:
            print(str(exc))
            for issue in exc.issues:
                print(f"  {issue.format()}")
            raise SystemExit(1) from exc
        for path in written:
            print(f"wrote {_format_path(path)}")
    index_path = ManualIndexBuilder(site_config).run()
    print(f"wrote {_format_path(index_path)}")


@app.command(help="Check cross-references, diagrams and variants without writing pages.")
def lint(
    *,
    manual: ManualOption = None,
    config: ConfigOption = DEFAULT_CONFIG,
    strict: typ.Annotated[
        bool, Parameter(help="Treat warnings as errors", env_var="INPUT_STRICT")
    ] = False,
    verbose: VerboseOption = False,
    log_json: LogJsonOption = False,
) -> None:
    """Report content issues for the requested manuals.

    Every issue is printed as ``<severity>: <section>: <message>``.

    Raises
    ------
    SystemExit
        With status 1 when any error (or, with ``strict``, any warning) is found.
    """
    configure_logging(verbose=verbose, log_json=log_json)
    site_config = load_site_config(config)
    failed = False
    for manual_config in _select_manuals(site_config, manual):
        try:
            content = _load_content(manual_config)
        except ContentError as exc:
            print(f"{manual_config.key}: error: {exc}")
            failed = True
            continue
        issues = ContentLinter(content).run()
        for issue in issues:
            print(f"{manual_config.key}: {issue.format()}")
        if any(strict or issue.is_error for issue in issues):
            failed = True
        else:
            print(f"{manual_config.key}: ok ({len(content.sections)} sections)")
    if failed:
        raise SystemExit(1)


@app.command(help="Validate a standalone workflow diagram file.")
def check_diagram(
    path: Path,
    /,
    *,
    verbose: VerboseOption = False,
) -> None:
    """Parse the flowchart in ``path`` and print a summary.

    Raises
    ------
    SystemExit
        With status 1 when the diagram is malformed.
    """
    configure_logging(verbose=verbose)
    source = path.read_text(encoding="utf-8")
    try:
        graph = parse_diagram(source)
    except DiagramSyntaxError as exc:
        print(f"{_format_path(path)}:{exc}")
        raise SystemExit(1) from exc
    print(
        f"{_format_path(path)}: ok ({len(graph.nodes)} nodes, "
        f"{len(graph.edges)} edges, {len(graph.subgraphs)} subgraphs)"
    )


def main() -> None:
    """Invoke the Cyclopts application that powers the ``manual`` command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
