"""Scroll-driven gate deciding when the next page should be requested."""

from __future__ import annotations

from collections.abc import Sequence

from openmarket.infrastructure.observability import get_logger

from .store import FeedStore


class PrefetchGate:
    """Request the next page exactly once per page-boundary crossing.

    The gate maps a reported row index to the page that row belongs to and
    asks the store for that page only when it is the store's next page
    number. The store advances that counter as soon as the request is
    initiated, so repeated scroll callbacks for the same boundary are
    no-ops while the fetch is still running. This is a throttle on the
    value of the page number, not on time.

    A page whose fetch failed is never requested again by the gate: the
    counter has already moved past it.
    """

    def __init__(self, store: FeedStore, *, page_size: int | None = None) -> None:
        self._store = store
        self.page_size = store.page_size if page_size is None else page_size
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        self._logger = get_logger(__name__)

    @property
    def requested_up_to(self) -> int:
        """The highest page number already requested (0 if none)."""
        return self._store.next_page_number - 1

    def page_for_index(self, index: int) -> int:
        return index // self.page_size + 1

    def on_visible_range_end(self, last_visible_index: int) -> int | None:
        """Handle the last visible (or about-to-be-visible) row index.

        Returns the page number that was requested, or ``None``.

        Raises:
            ValueError: If the index is negative.
        """
        if last_visible_index < 0:
            raise ValueError(f"row index must be >= 0, got {last_visible_index}")

        current_page = self.page_for_index(last_visible_index)
        if current_page != self._store.next_page_number:
            return None
        if not self._store.has_more:
            self._logger.debug(
                "Not requesting page %d: the feed reported its last page",
                current_page,
            )
            return None

        self._store.request_page(current_page)
        return current_page

    def on_prefetch(self, indices: Sequence[int]) -> int | None:
        """Handle a batch of prefetch row indices; only the last one counts."""
        if not indices:
            return None
        return self.on_visible_range_end(indices[-1])


__all__ = ["PrefetchGate"]
