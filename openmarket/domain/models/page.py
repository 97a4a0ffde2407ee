"""Page domain model: one batch of listings from a paginated fetch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .item import Item

FIRST_PAGE_NUMBER = 1


@dataclass(frozen=True)
class Page:
    """An ordered, immutable batch of items plus pagination metadata."""

    page_number: int
    items: tuple[Item, ...] = ()
    items_per_page: int | None = None
    total_count: int | None = None
    last_page: int | None = None
    has_next: bool | None = None
    has_prev: bool = False

    def __post_init__(self) -> None:
        if self.page_number < FIRST_PAGE_NUMBER:
            raise ValueError(
                f"page_number must be >= {FIRST_PAGE_NUMBER}, got {self.page_number}"
            )
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    @property
    def total_pages(self) -> int | None:
        """Return the total-pages hint, if the server sent one."""
        return self.last_page

    @property
    def is_last(self) -> bool:
        """Check if the server reported that no page follows this one."""
        if self.has_next is not None:
            return not self.has_next
        if self.last_page is not None:
            return self.page_number >= self.last_page
        return False


__all__ = ["FIRST_PAGE_NUMBER", "Page"]
