"""Product detail CLI for OpenMarket."""

from __future__ import annotations

import asyncio
import json

import click
from rich.console import Console
from rich.panel import Panel

from openmarket.app.config import ConfigError
from openmarket.app.events import ItemSummary
from openmarket.domain.models import Item, ItemId
from openmarket.interfaces.cli.context import FeedCommandContext, build_feed_context
from openmarket.interfaces.cli.render import format_item_line
from openmarket.services import ProductDetailLoader


async def fetch_detail(
    command_context: FeedCommandContext, item_id: ItemId
) -> tuple[Item | None, list[str]]:
    errors: list[str] = []
    async with command_context.api_client() as client:
        loader = ProductDetailLoader(client)
        loader.error_occurred.subscribe(errors.append)
        item = await loader.load(item_id)
    return item, errors


@click.command(name="detail")
@click.argument("item_id", type=int)
@click.option("--base-url", default=None, help="Base URL of the open-market API.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=str),
    default=None,
    help="Optional JSON settings file.",
)
@click.option("--json-output", is_flag=True, help="Output the product as JSON.")
@click.pass_context
def detail(
    ctx: click.Context,
    item_id: int,
    base_url: str | None,
    config_path: str | None,
    json_output: bool,
) -> None:
    """Show a single product."""

    console = Console()
    try:
        command_context = build_feed_context(config_path=config_path, base_url=base_url)
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        ctx.exit(2)

    item, errors = asyncio.run(fetch_detail(command_context, item_id))
    if item is None:
        for error in errors:
            console.print(f"[red]Error while loading product {item_id}: {error}[/red]")
        ctx.exit(1)

    if json_output:
        payload = ItemSummary.from_item(item).model_dump(mode="json")
        payload["description"] = item.description
        click.echo(json.dumps(payload, indent=2))
        return

    body = format_item_line(item)
    if item.description:
        body = f"{body}\n\n{item.description}"
    console.print(Panel(body, title=item.name))
