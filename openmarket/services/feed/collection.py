"""Incremental collection model backing the list and grid presentations."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from openmarket.domain.models import Item, ItemId

MAIN_SECTION = "main"


class PresentationMode(str, Enum):
    """The two layouts the same snapshot can be rendered in."""

    LIST = "list"
    GRID = "grid"

    @classmethod
    def from_string(cls, value: str | None) -> "PresentationMode":
        """Convert a string to a PresentationMode, defaulting to LIST."""
        if not value:
            return cls.LIST
        normalized = value.lower().strip()
        if normalized == cls.GRID.value:
            return cls.GRID
        return cls.LIST


@dataclass(frozen=True)
class Snapshot:
    """Immutable point-in-time view of the accumulated items.

    ``version`` increases with every change so renderers can skip snapshots
    they have already applied.
    """

    items: tuple[Item, ...] = ()
    version: int = 0
    section: str = MAIN_SECTION

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    @property
    def item_ids(self) -> tuple[ItemId, ...]:
        return tuple(item.id for item in self.items)

    def index_of(self, item_id: ItemId) -> int | None:
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return None

    def item_at(self, index: int) -> Item:
        """Return the item at ``index``; raises IndexError when out of range."""
        if index < 0 or index >= len(self.items):
            raise IndexError(f"no item at row {index} (snapshot has {len(self.items)})")
        return self.items[index]


class IncrementalCollectionModel:
    """Accumulate appended items into diff-ready snapshots.

    Switching presentation mode never touches the data: the current
    snapshot is returned as-is and previously placed items keep their rows.
    """

    def __init__(self, mode: PresentationMode = PresentationMode.LIST) -> None:
        self.mode = mode
        self._items: list[Item] = []
        self._ids: set[ItemId] = set()
        self._snapshot = Snapshot()

    def __len__(self) -> int:
        return len(self._items)

    def apply_append(self, new_items: Iterable[Item]) -> Snapshot:
        """Append items whose ids are not present yet and publish a snapshot."""
        appended = False
        for item in new_items:
            if item.id in self._ids:
                continue
            self._ids.add(item.id)
            self._items.append(item)
            appended = True
        if appended:
            self._publish()
        return self._snapshot

    def current_snapshot(self) -> Snapshot:
        return self._snapshot

    def clear(self) -> Snapshot:
        self._items.clear()
        self._ids.clear()
        self._publish()
        return self._snapshot

    def set_mode(self, mode: PresentationMode) -> Snapshot:
        """Switch presentation; returns the unchanged current snapshot."""
        self.mode = mode
        return self._snapshot

    def _publish(self) -> None:
        self._snapshot = Snapshot(
            items=tuple(self._items),
            version=self._snapshot.version + 1,
        )


__all__ = [
    "IncrementalCollectionModel",
    "MAIN_SECTION",
    "PresentationMode",
    "Snapshot",
]
