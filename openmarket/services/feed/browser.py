"""Feed browser: wires the store, gate and collection to a presentation.

This is the view-model of the main marketplace screen. The presentation
layer reports lifecycle, scroll and selection events here and receives
snapshots to render; it never talks to the store directly.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol

from openmarket.domain.models import FIRST_PAGE_NUMBER, Item, ItemId
from openmarket.infrastructure.observability import get_logger

from .collection import IncrementalCollectionModel, PresentationMode, Snapshot
from .gate import PrefetchGate
from .store import FeedStore
from .streams import Subscription

Navigator = Callable[[ItemId], None]


class PresentationAdapter(Protocol):
    """The rendering surface; consumes snapshots in one of two layouts."""

    def render(self, snapshot: Snapshot, mode: PresentationMode) -> None:
        ...


class FeedBrowser:
    """Coordinate one visit of the feed screen."""

    def __init__(
        self,
        store: FeedStore,
        presenter: PresentationAdapter,
        *,
        gate: PrefetchGate | None = None,
        collection: IncrementalCollectionModel | None = None,
        navigator: Navigator | None = None,
    ) -> None:
        self._store = store
        self._presenter = presenter
        self._gate = gate if gate is not None else PrefetchGate(store)
        self._collection = (
            collection if collection is not None else IncrementalCollectionModel()
        )
        self._logger = get_logger(__name__)
        self._subscriptions: list[Subscription] = [
            store.items_added.subscribe(self._on_items_added),
        ]
        if navigator is not None:
            self._subscriptions.append(store.item_selected.subscribe(navigator))

    @property
    def store(self) -> FeedStore:
        return self._store

    @property
    def mode(self) -> PresentationMode:
        return self._collection.mode

    def snapshot(self) -> Snapshot:
        return self._collection.current_snapshot()

    def activate(self) -> asyncio.Task[None] | None:
        """Load the first page when the screen becomes visible.

        Does nothing if the feed already holds or is loading pages, so
        re-appearing without a dismiss does not refetch.
        """
        if self._store.next_page_number != FIRST_PAGE_NUMBER:
            return None
        return self._store.request_page(FIRST_PAGE_NUMBER)

    def dismiss(self) -> None:
        """Reset the feed so the next visit starts a clean sequence."""
        self._store.reset()
        snapshot = self._collection.clear()
        self._presenter.render(snapshot, self.mode)

    def scrolled_to(self, last_visible_index: int) -> int | None:
        return self._gate.on_visible_range_end(last_visible_index)

    def prefetch(self, indices: list[int]) -> int | None:
        return self._gate.on_prefetch(indices)

    def reached_end(self) -> int | None:
        """Report that the end of the loaded rows is about to show.

        The gate is given the first row of the page after the last requested
        one, so short pages (or pages thinned by duplicate removal) do not
        stall the feed.
        """
        first_unrequested_row = self._gate.requested_up_to * self._gate.page_size
        return self._gate.on_visible_range_end(first_unrequested_row)

    def select(self, index: int) -> ItemId:
        """Emit the id of the item at ``index`` for navigation."""
        item: Item = self.snapshot().item_at(index)
        self._store.select_item(item.id)
        return item.id

    def switch_mode(self, mode: PresentationMode) -> Snapshot:
        """Re-render the current snapshot in another layout without refetching."""
        snapshot = self._collection.set_mode(mode)
        self._logger.debug("Switched presentation to %s", mode.value)
        self._presenter.render(snapshot, mode)
        return snapshot

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()

    def _on_items_added(self, items: tuple[Item, ...]) -> None:
        snapshot = self._collection.apply_append(items)
        self._presenter.render(snapshot, self.mode)


__all__ = ["FeedBrowser", "Navigator", "PresentationAdapter"]
