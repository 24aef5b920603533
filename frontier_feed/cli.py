"""
Command-line interface for Frontier Feed.

Uses Typer to expose the page loaders as commands. Supports loading .env
files for provider credentials (NEWS_KEY, UNSPLASH_KEY, YOUTUBE_KEY).
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Awaitable, Callable

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
import typer

from .config import AppConfig, load_config
from .endpoints import DirectEndpoints, resolve_endpoints
from .enrichment import EnrichmentPipeline
from .fetch.errors import ConfigurationError
from .logging_utils import setup_logging
from .refresh import AutoRefresher
from .runner import (
    PageResult,
    load_category_page,
    load_front_page,
    load_region_page,
    load_search_page,
    load_source_page,
    render_fetch_stats,
)
from .service import ContentService

app = typer.Typer(add_completion=False, help="Financial news content core.")
console = Console()

PageLoader = Callable[[ContentService, EnrichmentPipeline], Awaitable[PageResult]]

ConfigOption = typer.Option(None, "--config", "-c", exists=True, help="YAML config file.")
HostOption = typer.Option(None, "--host", help="Host to resolve endpoints for.")
VideoOption = typer.Option(None, "--video/--no-video", help="Attach a related video to each article.")
JsonOption = typer.Option(False, "--json", help="Print articles as JSON lines.")
LogLevelOption = typer.Option(None, "--log-level", help="Logging level.")
PageSizeOption = typer.Option(None, "--page-size", "-n", min=1, max=100, help="Articles per lookup.")


@app.command()
def headlines(
    category: str | None = typer.Argument(None, help="Category, e.g. business or technology."),
    page_size: int | None = PageSizeOption,
    config: Path | None = ConfigOption,
    host: str | None = HostOption,
    video: bool | None = VideoOption,
    as_json: bool = JsonOption,
    log_level: str | None = LogLevelOption,
):
    """Show top headlines for a category."""
    cfg = _prepare(config, host, log_level)
    _run_page(
        cfg,
        lambda service, pipeline: load_category_page(service, pipeline, category, page_size, video),
        as_json,
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Free-text search query."),
    page_size: int | None = PageSizeOption,
    page: int = typer.Option(1, "--page", min=1),
    config: Path | None = ConfigOption,
    host: str | None = HostOption,
    video: bool | None = VideoOption,
    as_json: bool = JsonOption,
    log_level: str | None = LogLevelOption,
):
    """Search articles, newest first."""
    cfg = _prepare(config, host, log_level)
    _run_page(
        cfg,
        lambda service, pipeline: load_search_page(service, pipeline, query, page_size, page, video),
        as_json,
    )


@app.command()
def source(
    source_id: str = typer.Argument(..., help="Provider source id, e.g. bloomberg."),
    page_size: int | None = PageSizeOption,
    config: Path | None = ConfigOption,
    host: str | None = HostOption,
    video: bool | None = VideoOption,
    as_json: bool = JsonOption,
    log_level: str | None = LogLevelOption,
):
    """Show the latest articles from one publication."""
    cfg = _prepare(config, host, log_level)
    _run_page(
        cfg,
        lambda service, pipeline: load_source_page(service, pipeline, source_id, page_size, video),
        as_json,
    )


@app.command()
def region(
    name: str = typer.Argument(..., help="australia, africa, americas, asia or europe."),
    page_size: int | None = PageSizeOption,
    page: int = typer.Option(1, "--page", min=1),
    config: Path | None = ConfigOption,
    host: str | None = HostOption,
    video: bool | None = VideoOption,
    as_json: bool = JsonOption,
    log_level: str | None = LogLevelOption,
):
    """Show regional finance news and the region's video strip."""
    cfg = _prepare(config, host, log_level)
    _run_page(
        cfg,
        lambda service, pipeline: load_region_page(service, pipeline, name, page_size, page, video),
        as_json,
    )


@app.command("front-page")
def front_page(
    page_size: int | None = PageSizeOption,
    config: Path | None = ConfigOption,
    host: str | None = HostOption,
    video: bool | None = VideoOption,
    as_json: bool = JsonOption,
    log_level: str | None = LogLevelOption,
    watch: bool = typer.Option(False, "--watch", help="Reload on the cache refresh interval."),
    cycles: int = typer.Option(0, "--cycles", min=0, help="Stop watching after N refreshes (0 = forever)."),
):
    """Show the merged, deduplicated front page."""
    cfg = _prepare(config, host, log_level)

    def loader(service, pipeline):
        return load_front_page(service, pipeline, page_size=page_size, include_video=video)

    if watch or cfg.cache.auto_refresh:
        _guard(lambda: asyncio.run(_watch(cfg, loader, as_json, cycles)))
    else:
        _run_page(cfg, loader, as_json)


@app.command()
def endpoints(
    config: Path | None = ConfigOption,
    host: str | None = HostOption,
):
    """Show how provider endpoints resolve for a host. Credentials are never printed."""
    cfg = _prepare(config, host, None)
    resolved = resolve_endpoints(cfg)

    table = Table(title=f"Endpoints ({resolved.mode} mode, host={cfg.environment.host})")
    table.add_column("Name")
    table.add_column("URL")
    table.add_column("Credential")
    if isinstance(resolved, DirectEndpoints):
        for name in ("news", "images", "videos"):
            endpoint = getattr(resolved, name)
            table.add_row(name, endpoint.base_url, "set" if endpoint.credential else "missing")
        table.add_row("random image", resolved.random_image_url, "-")
    else:
        table.add_row("proxy", resolved.base_url, "-")
        table.add_row("regional", resolved.regional_url, "-")
        table.add_row("image redirect", resolved.image_redirect_url, "-")
    console.print(table)


def _prepare(config: Path | None, host: str | None, log_level: str | None) -> AppConfig:
    load_dotenv()
    cfg = load_config(str(config) if config else None)
    if host:
        cfg.environment.host = host
    if log_level:
        cfg.logging.level = log_level
    setup_logging(cfg.logging, Path.cwd())
    return cfg


def _run_page(cfg: AppConfig, loader: PageLoader, as_json: bool) -> None:
    async def _main() -> None:
        async with ContentService(cfg) as service:
            pipeline = EnrichmentPipeline(service)
            _print_page(await loader(service, pipeline), as_json)

    _guard(lambda: asyncio.run(_main()))


async def _watch(cfg: AppConfig, loader: PageLoader, as_json: bool, cycles: int) -> None:
    async with ContentService(cfg) as service:
        pipeline = EnrichmentPipeline(service)
        done = asyncio.Event()

        async def reload() -> None:
            _print_page(await loader(service, pipeline), as_json)
            if cycles and refresher.refreshes >= cycles:
                done.set()

        refresher = AutoRefresher(service, on_refresh=reload)
        _print_page(await loader(service, pipeline), as_json)
        refresher.start()
        try:
            await done.wait()
        finally:
            await refresher.stop()


def _guard(action: Callable[[], None]) -> None:
    try:
        action()
    except ConfigurationError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc


def _print_page(page: PageResult, as_json: bool) -> None:
    if as_json:
        for article in page.articles:
            typer.echo(json.dumps(article.to_dict(), ensure_ascii=False))
        for video in page.videos:
            typer.echo(json.dumps({"video": video.video_id, "title": video.title, "url": video.watch_url}))
        return

    if page.is_fallback:
        kinds = ", ".join(sorted({failure.kind for failure in page.failures}))
        console.print(f"[yellow]Showing fallback content ({kinds})[/yellow]")

    table = Table(show_lines=False)
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Title")
    table.add_column("Source")
    table.add_column("Topic", style="cyan")
    table.add_column("Published", no_wrap=True)
    for item in page.articles:
        table.add_row(
            item.id,
            item.article.title,
            item.article.source_name or "",
            item.topic,
            item.article.published_at or "",
        )
    console.print(table)

    if page.videos:
        console.print("[bold]Videos[/bold]")
        for video in page.videos:
            console.print(f"  {video.title} - {video.watch_url}")

    render_fetch_stats(page.stats, console)


if __name__ == "__main__":
    app()
