"""Feed store: the single owner of paginated feed state.

The store triggers page fetches, merges their results into an append-only,
duplicate-free item sequence and broadcasts every change on four output
streams. All state mutation happens on the asyncio event loop the store is
first used from; fetch coroutines resume on that loop before they touch any
state, so no locking is needed.

A ``reset()`` does not cancel requests already in flight. Each request is
tagged with the generation current at issue time, and a response that
arrives after the generation moved on is dropped without touching state or
emitting anything.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Protocol

from openmarket.domain.models import FIRST_PAGE_NUMBER, Item, ItemId, Page
from openmarket.infrastructure.http import DEFAULT_PAGE_SIZE, FetchError
from openmarket.infrastructure.observability import (
    get_logger,
    log_context,
    log_exception,
    record_feed_merge,
    record_stale_discard,
)

from .streams import EventStream


class PageFetcher(Protocol):
    """Anything that can fetch one listing page asynchronously."""

    async def fetch_page(self, page_number: int) -> Page:
        ...


@dataclass
class FeedState:
    """Mutable state owned exclusively by one FeedStore."""

    items: list[Item] = field(default_factory=list)
    item_ids: set[ItemId] = field(default_factory=set)
    next_page_number: int = FIRST_PAGE_NUMBER
    is_loading: bool = False
    last_error: str | None = None
    has_more: bool = True
    generation: int = 0
    in_flight: dict[int, "asyncio.Task[None]"] = field(default_factory=dict)


class FeedStore:
    """Single authority for triggering fetches and holding feed state.

    Output streams:
        items_added: the items a merged page appended (delta only).
        loading_changed: the new ``is_loading`` value on every transition.
        error_occurred: a human-readable message per failed fetch.
        item_selected: item ids reported by the UI, passed through.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._fetcher = fetcher
        self.page_size = page_size
        self._state = FeedState()
        self._loop: asyncio.AbstractEventLoop | None = None
        # Strong references so pending fetches are not garbage collected,
        # including ones orphaned by reset().
        self._tasks: set[asyncio.Task[None]] = set()
        self._logger = get_logger(__name__)

        self.items_added: EventStream[tuple[Item, ...]] = EventStream("items_added")
        self.loading_changed: EventStream[bool] = EventStream("loading_changed")
        self.error_occurred: EventStream[str] = EventStream("error_occurred")
        self.item_selected: EventStream[ItemId] = EventStream("item_selected")

    # -------------------- read-only state --------------------
    @property
    def items(self) -> tuple[Item, ...]:
        return tuple(self._state.items)

    @property
    def next_page_number(self) -> int:
        return self._state.next_page_number

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def last_error(self) -> str | None:
        return self._state.last_error

    @property
    def has_more(self) -> bool:
        """False once a merged page reported that no further page exists."""
        return self._state.has_more

    @property
    def generation(self) -> int:
        return self._state.generation

    @property
    def in_flight(self) -> frozenset[int]:
        return frozenset(self._state.in_flight)

    # -------------------- operations --------------------
    def request_page(self, page_number: int) -> asyncio.Task[None] | None:
        """Start fetching ``page_number`` without waiting for it.

        Returns the scheduled task, or ``None`` when a fetch for the same
        page is already in flight (the call is then a no-op).

        Raises:
            ValueError: If ``page_number`` is below the first page.
            RuntimeError: If called outside the store's event loop.
        """
        if page_number < FIRST_PAGE_NUMBER:
            raise ValueError(
                f"page_number must be >= {FIRST_PAGE_NUMBER}, got {page_number}"
            )
        loop = self._owner_loop()
        state = self._state
        if page_number in state.in_flight:
            self._logger.debug(
                "Page %d is already in flight; ignoring request", page_number
            )
            return None

        if page_number >= state.next_page_number:
            state.next_page_number = page_number + 1
        task = loop.create_task(
            self._fetch(page_number, state.generation),
            name=f"openmarket-feed-page-{page_number}",
        )
        state.in_flight[page_number] = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        with log_context(page=page_number, generation=state.generation):
            self._logger.info("Requested page")
        self._set_loading(True)
        return task

    def reset(self) -> None:
        """Clear all items and counters and start a new generation.

        Fetches still in flight keep running; their results are discarded
        when they arrive.
        """
        previous = self._state
        self._state = FeedState(generation=previous.generation + 1)
        with log_context(generation=self._state.generation):
            self._logger.info(
                "Feed reset with %d request(s) still in flight",
                len(previous.in_flight),
            )
        if previous.is_loading:
            self.loading_changed.emit(False)

    def select_item(self, item_id: ItemId) -> None:
        self.item_selected.emit(item_id)

    async def wait_idle(self) -> None:
        """Wait until no fetch of the current generation is in flight."""
        while True:
            pending = [
                task for task in self._state.in_flight.values() if not task.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # -------------------- fetch cycle --------------------
    def _owner_loop(self) -> asyncio.AbstractEventLoop:
        loop = asyncio.get_running_loop()
        if self._loop is None or self._loop.is_closed():
            self._loop = loop
        elif self._loop is not loop:
            raise RuntimeError("FeedStore is bound to a different event loop")
        return loop

    async def _fetch(self, page_number: int, generation: int) -> None:
        with log_context(page=page_number, generation=generation):
            try:
                page = await self._fetcher.fetch_page(page_number)
            except FetchError as exc:
                self._finish_failure(page_number, generation, str(exc))
            except asyncio.CancelledError:
                self._finish_cancelled(page_number, generation)
                raise
            except Exception as exc:
                log_exception(
                    self._logger, f"Unexpected error while fetching page {page_number}", exc
                )
                self._finish_failure(
                    page_number,
                    generation,
                    f"Could not load page {page_number}: {exc}",
                )
            else:
                self._finish_success(page, page_number, generation)

    def _is_stale(self, generation: int) -> bool:
        return generation != self._state.generation

    def _finish_success(self, page: Page, page_number: int, generation: int) -> None:
        if self._is_stale(generation):
            self._logger.info("Discarding page that arrived after a reset")
            record_stale_discard("success")
            return

        state = self._state
        state.in_flight.pop(page_number, None)
        appended: list[Item] = []
        for item in page.items:
            if item.id in state.item_ids:
                continue
            state.item_ids.add(item.id)
            appended.append(item)
        state.items.extend(appended)
        if page.is_last:
            state.has_more = False

        dropped = len(page.items) - len(appended)
        if dropped:
            self._logger.debug("Dropped %d item(s) already in the feed", dropped)
        record_feed_merge(len(appended), dropped)
        self._logger.info("Merged %d item(s)", len(appended))

        self.items_added.emit(tuple(appended))
        self._sync_loading()

    def _finish_failure(self, page_number: int, generation: int, message: str) -> None:
        if self._is_stale(generation):
            self._logger.info("Discarding failure that arrived after a reset")
            record_stale_discard("failure")
            return

        state = self._state
        state.in_flight.pop(page_number, None)
        state.last_error = message
        self.error_occurred.emit(message)
        self._sync_loading()

    def _finish_cancelled(self, page_number: int, generation: int) -> None:
        if self._is_stale(generation):
            return
        self._state.in_flight.pop(page_number, None)
        self._sync_loading()

    def _sync_loading(self) -> None:
        self._set_loading(bool(self._state.in_flight))

    def _set_loading(self, value: bool) -> None:
        if self._state.is_loading == value:
            return
        self._state.is_loading = value
        self.loading_changed.emit(value)


__all__ = ["FeedState", "FeedStore", "PageFetcher"]
