"""Console presentation of feed snapshots."""

from __future__ import annotations

from rich.columns import Columns
from rich.console import Console, RenderableType
from rich.panel import Panel
from rich.table import Table

from openmarket.domain.models import Item
from openmarket.services.feed import PresentationMode, Snapshot


def format_item_line(item: Item) -> str:
    discount = f" | -{item.discount_rate}%" if item.discount_rate else ""
    return f"- [{item.id}] {item.name} | {item.price_label}{discount} | {item.stock_label}"


def build_list_view(snapshot: Snapshot) -> Table:
    table = Table(show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Id", justify="right")
    table.add_column("Name")
    table.add_column("Price", justify="right")
    table.add_column("Stock", justify="right")
    for row, item in enumerate(snapshot):
        price = item.price_label
        if item.is_discounted:
            price = f"[red]{price}[/red]"
        stock = item.stock_label
        if item.is_sold_out:
            stock = f"[yellow]{stock}[/yellow]"
        table.add_row(str(row), str(item.id), item.name, price, stock)
    return table


def _grid_cell(item: Item) -> Panel:
    lines = [f"[bold]{item.name}[/bold]", item.price_label, item.stock_label]
    if item.discount_rate:
        lines.append(f"[red]-{item.discount_rate}%[/red]")
    return Panel("\n".join(lines), title=str(item.id), width=28)


def build_grid_view(snapshot: Snapshot) -> Columns:
    return Columns([_grid_cell(item) for item in snapshot], equal=True)


class ConsolePresenter:
    """Presentation adapter that keeps the latest snapshot for printing.

    The same snapshot renders as a table in list mode or as panels in grid
    mode; switching never needs new data.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.snapshot = Snapshot()
        self.mode = PresentationMode.LIST
        self.render_count = 0

    def render(self, snapshot: Snapshot, mode: PresentationMode) -> None:
        self.snapshot = snapshot
        self.mode = mode
        self.render_count += 1

    def renderable(self) -> RenderableType:
        if self.mode == PresentationMode.GRID:
            return build_grid_view(self.snapshot)
        return build_list_view(self.snapshot)

    def show(self) -> None:
        if not len(self.snapshot):
            self.console.print("[yellow]No products loaded.[/yellow]")
            return
        self.console.print(f"Showing {len(self.snapshot)} product(s):")
        self.console.print(self.renderable())
