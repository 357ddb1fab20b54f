"""Command-line interface for PageSift."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
import structlog
from rich.console import Console
from rich.panel import Panel

from pagesift import __version__
from pagesift.config.config import MonitoringConfig
from pagesift.container import DependencyContainer
from pagesift.observability import configure_logging
from pagesift.pipeline import CleanOptions
from pagesift.protocols import PageResult

console = Console()
logger = structlog.get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True), help="Configuration file path")
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: str) -> None:
    """PageSift - turns web pages into clean, summarized Markdown."""
    ctx.ensure_object(dict)
    ctx.obj.setdefault("config_path", Path(config) if config else None)
    configure_logging(MonitoringConfig(log_level=log_level))


def _pair_urls(files: Tuple[str, ...], urls: Tuple[str, ...]) -> List[Tuple[str, str]]:
    if urls and len(urls) != len(files):
        raise click.UsageError("--url must be given once per file, or not at all")
    pages = []
    for index, name in enumerate(files):
        path = Path(name)
        url = urls[index] if urls else path.resolve().as_uri()
        pages.append((url, path.read_text(encoding="utf-8", errors="replace")))
    return pages


def _show(result: PageResult, raw: bool) -> None:
    if raw:
        click.echo(result.content)
        if result.error:
            click.echo(f"error: {result.error}", err=True)
        return

    if result.error:
        console.print(Panel(f"[red]{result.error}[/red]", title=result.url, border_style="red"))
        return
    body = result.content or "[dim]No readable content[/dim]"
    subtitle = f"{result.elapsed_seconds:.2f}s"
    if result.warnings:
        subtitle += " | " + ", ".join(result.warnings)
    console.print(Panel(body, title=result.url, subtitle=subtitle, border_style="green"))


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--url", "urls", multiple=True, help="Source URL for each file, in order")
@click.option("--frontmatter", is_flag=True, help="Prefix each result with a frontmatter block")
@click.option("--no-summarize", is_flag=True, help="Keep quality-gated chunks without summarizing")
@click.option("--raw", is_flag=True, help="Print plain Markdown instead of panels")
@click.option("--concurrency", default=4, show_default=True, help="Pages cleaned at once")
@click.pass_context
def clean(
    ctx: click.Context,
    files: Tuple[str, ...],
    urls: Tuple[str, ...],
    frontmatter: bool,
    no_summarize: bool,
    raw: bool,
    concurrency: int,
) -> None:
    """Clean local HTML FILES into Markdown."""
    pages = _pair_urls(files, urls)
    options = CleanOptions(include_frontmatter=frontmatter, summarize=not no_summarize)
    container = ctx.obj.get("container") or DependencyContainer(ctx.obj.get("config_path"))

    async def run() -> List[PageResult]:
        pipeline = await container.get_pipeline()
        return await pipeline.clean_many(pages, concurrency=concurrency, options=options)

    results = asyncio.run(run())
    for result in results:
        _show(result, raw)

    failed = sum(1 for result in results if not result.ok)
    if failed:
        if not raw:
            console.print(f"[yellow]{failed} of {len(results)} pages failed[/yellow]")
        sys.exit(1)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
