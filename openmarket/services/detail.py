"""Product detail loading for the detail screen."""

from __future__ import annotations

from typing import Protocol

from openmarket.domain.models import Item, ItemId
from openmarket.infrastructure.http import FetchError
from openmarket.infrastructure.observability import get_logger

from .feed import EventStream


class ItemFetcher(Protocol):
    async def fetch_item(self, item_id: ItemId) -> Item:
        ...


class ProductDetailLoader:
    """Load a single product and broadcast the result.

    Failures are reported on ``error_occurred`` exactly like feed failures,
    so the same alert presenter can serve both screens.
    """

    def __init__(self, fetcher: ItemFetcher) -> None:
        self._fetcher = fetcher
        self._logger = get_logger(__name__)
        self.detail_loaded: EventStream[Item] = EventStream("detail_loaded")
        self.error_occurred: EventStream[str] = EventStream("error_occurred")
        self.current: Item | None = None

    async def load(self, item_id: ItemId) -> Item | None:
        """Fetch ``item_id``; returns the item, or None if the fetch failed."""
        try:
            item = await self._fetcher.fetch_item(item_id)
        except FetchError as exc:
            self._logger.warning("Loading product %s failed: %s", item_id, exc)
            self.error_occurred.emit(str(exc))
            return None
        self.current = item
        self.detail_loaded.emit(item)
        return item


__all__ = ["ItemFetcher", "ProductDetailLoader"]
