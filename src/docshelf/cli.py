"""CLI interface for Docshelf.

Command-line tool for previewing, checking and building documentation sites.
"""

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from docshelf.config import Config
from docshelf.core.checker import CheckReport, Severity, check_site
from docshelf.core.nav_file import NavFileError
from docshelf.core.navigation import NavItem, build_navigation

CONFIG_HELP = "Path to configuration file (default: auto-discover docshelf.toml)"
SOURCE_DIR_HELP = "Documentation source directory (overrides config)"


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (debug logging, link warnings)",
)
@click.version_option(package_name="docshelf")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Docshelf - static documentation sites from Markdown."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def config_option(func):  # type: ignore[no-untyped-def]
    return click.option(
        "--config",
        "-c",
        "config_path",
        type=click.Path(exists=True, path_type=Path, dir_okay=False),
        default=None,
        help=CONFIG_HELP,
    )(func)


def source_dir_option(func):  # type: ignore[no-untyped-def]
    return click.option(
        "--source-dir",
        "-s",
        type=click.Path(exists=True, path_type=Path, file_okay=False),
        default=None,
        help=SOURCE_DIR_HELP,
    )(func)


@cli.command()
@config_option
@source_dir_option
@click.option("--host", default=None, help="Host to bind to (overrides config)")
@click.option("--port", "-p", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
@click.option(
    "--cache/--no-cache",
    default=None,
    help="Enable/disable caching (overrides config, default: enabled)",
)
@click.pass_context
def serve(
    ctx: click.Context,
    config_path: Path | None,
    source_dir: Path | None,
    host: str | None,
    port: int | None,
    live_reload: bool | None,
    cache: bool | None,
) -> None:
    """Start the documentation preview server."""
    from docshelf.project import Project
    from docshelf.server import run_server

    config = _load_config(
        config_path,
        host=host,
        port=port,
        source_dir=source_dir,
        cache_enabled=cache,
        live_reload_enabled=live_reload,
    )

    try:
        Project.from_config(config).site_loader.load(use_cache=False)
    except NavFileError as e:
        _fail(str(e))

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Source directory: {config.docs.source_dir}")
    if config.site.nav_file is not None:
        click.echo(f"Navigation file: {config.site.nav_file}")
    if config.docs.cache_enabled:
        click.echo(f"Cache directory: {config.docs.cache_dir}")
    else:
        click.echo("Cache: disabled")
    click.echo(f"Live reload: {'enabled' if config.live_reload.enabled else 'disabled'}")

    run_server(config, verbose=ctx.obj["verbose"])


@cli.command()
@config_option
@source_dir_option
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Output directory (overrides config)",
)
@click.option("--clean", is_flag=True, help="Remove the output directory before building")
@click.option("--strict", is_flag=True, help="Abort when checks report errors or warnings")
@click.option("--no-check", "skip_check", is_flag=True, help="Skip documentation checks")
def build(
    config_path: Path | None,
    source_dir: Path | None,
    output_dir: Path | None,
    clean: bool,
    strict: bool,
    skip_check: bool,
) -> None:
    """Build the static site."""
    from docshelf.core.export import SiteExporter
    from docshelf.core.templates import PageTemplates
    from docshelf.project import Project

    config = _load_config(config_path, source_dir=source_dir, output_dir=output_dir)
    project = Project.from_config(config, cache_pages=False)

    try:
        if not skip_check:
            report = check_site(
                config.docs.source_dir,
                project.load_nav_entries(),
                nav_source=config.site.nav_file,
            )
            _print_report(report)
            if report.has_failures(strict=strict):
                _fail("build aborted, fix the issues above or run without --strict")

        site = project.site_loader.load(use_cache=False)
        templates = PageTemplates(site_title=config.site.title, base_url=config.site.base_url)
        exporter = SiteExporter(site, project.renderer, templates, config.docs.output_dir)
        result = exporter.export(clean=clean)
    except (NavFileError, ValueError) as e:
        _fail(str(e))

    for warning in result.warnings:
        click.echo(click.style(f"Warning: {warning}", fg="yellow"), err=True)

    click.echo(
        click.style(
            f"Built {len(result.pages)} pages into {config.docs.output_dir}",
            fg="green",
            bold=True,
        )
    )


@cli.command()
@config_option
@source_dir_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Report format",
)
@click.option("--strict", is_flag=True, help="Fail on warnings as well as errors")
def check(
    config_path: Path | None,
    source_dir: Path | None,
    output_format: str,
    strict: bool,
) -> None:
    """Check navigation entries and document links."""
    from docshelf.project import Project

    config = _load_config(config_path, source_dir=source_dir)
    project = Project.from_config(config)

    try:
        entries = project.load_nav_entries()
    except NavFileError as e:
        _fail(str(e))

    report = check_site(config.docs.source_dir, entries, nav_source=config.site.nav_file)

    if output_format == "json":
        click.echo(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_report(report)

    if report.has_failures(strict=strict):
        sys.exit(1)


@cli.command()
@config_option
@source_dir_option
@click.option("--json", "as_json", is_flag=True, help="Print the tree as JSON")
def nav(config_path: Path | None, source_dir: Path | None, as_json: bool) -> None:
    """Print the navigation tree."""
    from docshelf.project import Project

    config = _load_config(config_path, source_dir=source_dir)
    project = Project.from_config(config)

    try:
        site = project.site_loader.load(use_cache=False)
    except NavFileError as e:
        _fail(str(e))

    tree = build_navigation(site)
    if as_json:
        click.echo(json.dumps(tree.to_dict(), indent=2, ensure_ascii=False))
        return

    if site.home is not None:
        click.echo(f"{site.home.title}  /")
    for item in tree.items:
        _echo_nav_item(item, 0)


def _echo_nav_item(item: NavItem, depth: int) -> None:
    indent = "  " * depth
    if item.path is None:
        click.echo(f"{indent}{click.style(item.title, bold=True)}")
    else:
        click.echo(f"{indent}{item.title}  {item.path}")
    for child in item.children:
        _echo_nav_item(child, depth + 1)


def _load_config(config_path: Path | None, **overrides: object) -> Config:
    """Load configuration with CLI overrides or exit with an error.

    The effective source directory must exist.

    Args:
        config_path: Explicit config file, None to auto-discover
        **overrides: Keyword arguments for Config.with_overrides

    Returns:
        Effective configuration
    """
    try:
        config = Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    config = config.with_overrides(**overrides)  # type: ignore[arg-type]
    if not config.docs.source_dir.is_dir():
        _fail(f"Source directory not found: {config.docs.source_dir}")
    return config


def _print_report(report: CheckReport) -> None:
    """Print check issues followed by a summary line."""
    for issue in report.issues:
        color = "red" if issue.severity == Severity.ERROR else "yellow"
        location = issue.location()
        prefix = f"{location}: " if location else ""
        label = click.style(f"{issue.severity}[{issue.code}]", fg=color)
        click.echo(f"{prefix}{label} {issue.message}")

    summary = f"{len(report.errors)} errors, {len(report.warnings)} warnings"
    if report.ok:
        click.echo(click.style(f"Check passed: {summary}", fg="green"))
    else:
        click.echo(click.style(f"Check failed: {summary}", fg="red"), err=True)


def _fail(message: str) -> NoReturn:
    """Print an error message and exit with status 1."""
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
