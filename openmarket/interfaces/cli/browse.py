"""Feed browsing CLI for OpenMarket."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field

import click
from rich.console import Console

from openmarket.app.config import ConfigError
from openmarket.app.events import WireSink, attach_event_sink
from openmarket.infrastructure.observability import format_prometheus, get_feed_stats
from openmarket.interfaces.cli.context import FeedCommandContext, build_feed_context
from openmarket.interfaces.cli.render import ConsolePresenter
from openmarket.services.feed import (FeedBrowser, FeedStore,
                                      IncrementalCollectionModel,
                                      PresentationAdapter, PresentationMode)


@dataclass
class BrowseResult:
    pages_requested: int
    items_loaded: int
    has_more: bool
    errors: list[str] = field(default_factory=list)


async def run_browse(
    command_context: FeedCommandContext,
    *,
    max_pages: int,
    mode: PresentationMode,
    presenter: PresentationAdapter,
    event_sink: WireSink | None = None,
) -> BrowseResult:
    """Open the feed, then keep scrolling to the end until done.

    Stops after ``max_pages`` pages were requested, when the server reports
    the last page, or on the first error (failed pages are not retried).
    """
    errors: list[str] = []
    async with command_context.api_client() as client:
        store = FeedStore(client, page_size=command_context.settings.page_size)
        store.error_occurred.subscribe(errors.append)
        if event_sink is not None:
            attach_event_sink(store, event_sink)
        browser = FeedBrowser(
            store, presenter, collection=IncrementalCollectionModel(mode)
        )

        browser.activate()
        await store.wait_idle()
        while not errors and store.has_more and store.next_page_number <= max_pages:
            if browser.reached_end() is None:
                break
            await store.wait_idle()

        result = BrowseResult(
            pages_requested=store.next_page_number - 1,
            items_loaded=len(store.items),
            has_more=store.has_more,
            errors=errors,
        )
        browser.close()
    return result


def _echo_json(wire: dict) -> None:
    click.echo(json.dumps(wire))


@click.command(name="browse")
@click.option(
    "--pages",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Maximum number of listing pages to load.",
)
@click.option(
    "--layout",
    type=click.Choice([mode.value for mode in PresentationMode], case_sensitive=False),
    default=PresentationMode.LIST.value,
    show_default=True,
    help="Render the products as a list or as a grid.",
)
@click.option(
    "--page-size",
    type=click.IntRange(min=1),
    default=None,
    help="Items per page. Overrides the configured value.",
)
@click.option("--base-url", default=None, help="Base URL of the open-market API.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=str),
    default=None,
    help="Optional JSON settings file.",
)
@click.option("--json-output", is_flag=True, help="Print feed events as JSON lines.")
@click.option("--stats", is_flag=True, help="Print fetch statistics when done.")
@click.option(
    "--stats-format",
    type=click.Choice(["json", "prometheus"], case_sensitive=False),
    default="json",
    show_default=True,
    help="Format of the statistics printed by --stats.",
)
@click.pass_context
def browse(
    ctx: click.Context,
    pages: int,
    layout: str,
    page_size: int | None,
    base_url: str | None,
    config_path: str | None,
    json_output: bool,
    stats: bool,
    stats_format: str,
) -> None:
    """Load the marketplace feed page by page and print it."""

    console = Console()
    try:
        command_context = build_feed_context(
            config_path=config_path, base_url=base_url, page_size=page_size
        )
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        ctx.exit(2)

    presenter = ConsolePresenter(console)
    sink: WireSink | None = None
    if json_output:
        sink = _echo_json

    result = asyncio.run(
        run_browse(
            command_context,
            max_pages=pages,
            mode=PresentationMode.from_string(layout),
            presenter=presenter,
            event_sink=sink,
        )
    )

    if not json_output:
        presenter.show()
        for error in result.errors:
            console.print(f"[red]Error while loading products: {error}[/red]")
        more = "more available" if result.has_more else "end of feed"
        console.print(f"{result.pages_requested} page(s) requested ({more}).")
    if stats:
        if stats_format.lower() == "prometheus":
            click.echo(format_prometheus())
        else:
            click.echo(json.dumps(get_feed_stats(), indent=2))
    if result.errors:
        ctx.exit(1)
