"""Shared fixtures for the OpenMarket tests."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Callable

import pytest

from openmarket.domain.models import Item, Page


def build_items(ids) -> tuple[Item, ...]:
    return tuple(
        Item(id=item_id, name=f"Product {item_id}", price=1000.0 * item_id)
        for item_id in ids
    )


class ControlledFetcher:
    """Page fetcher whose responses are released by the test.

    Every ``fetch_page`` call parks on a future; ``resolve`` and ``fail``
    complete the oldest pending call for a page, so tests decide the order
    in which responses arrive.
    """

    def __init__(self) -> None:
        self.calls: list[int] = []
        self._pending: dict[int, list[asyncio.Future]] = defaultdict(list)

    async def fetch_page(self, page_number: int) -> Page:
        self.calls.append(page_number)
        future = asyncio.get_running_loop().create_future()
        self._pending[page_number].append(future)
        return await future

    def pending(self) -> list[int]:
        return sorted(number for number, futures in self._pending.items() if futures)

    def resolve(self, page_number: int, page: Page) -> None:
        self._pending[page_number].pop(0).set_result(page)

    def fail(self, page_number: int, exc: BaseException) -> None:
        self._pending[page_number].pop(0).set_exception(exc)


class StoreRecorder:
    """Collect every value a store emits, in emission order."""

    def __init__(self, store) -> None:
        self.events: list[tuple[str, object]] = []
        store.items_added.subscribe(lambda v: self.events.append(("items_added", v)))
        store.loading_changed.subscribe(
            lambda v: self.events.append(("loading_changed", v))
        )
        store.error_occurred.subscribe(
            lambda v: self.events.append(("error_occurred", v))
        )
        store.item_selected.subscribe(
            lambda v: self.events.append(("item_selected", v))
        )

    def of(self, kind: str) -> list:
        return [value for name, value in self.events if name == kind]


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run up to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def make_items() -> Callable[..., tuple[Item, ...]]:
    return build_items


@pytest.fixture
def make_page() -> Callable[..., Page]:
    def factory(page_number: int, ids, *, has_next: bool | None = True) -> Page:
        return Page(page_number=page_number, items=build_items(ids), has_next=has_next)

    return factory


@pytest.fixture
def fetcher() -> ControlledFetcher:
    return ControlledFetcher()


@pytest.fixture
def recorder_for() -> Callable[..., StoreRecorder]:
    return StoreRecorder


@pytest.fixture
def settle_loop() -> Callable[..., object]:
    return settle
