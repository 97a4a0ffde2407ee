"""Tests for the scroll-driven prefetch gate."""

from __future__ import annotations

import asyncio

import pytest

from openmarket.infrastructure.http import TransportError
from openmarket.services.feed import FeedStore, PrefetchGate


def test_page_for_index_uses_page_size(fetcher) -> None:
    gate = PrefetchGate(FeedStore(fetcher, page_size=20))

    assert gate.page_for_index(0) == 1
    assert gate.page_for_index(19) == 1
    assert gate.page_for_index(20) == 2
    assert gate.page_for_index(39) == 2


@pytest.mark.parametrize("page_size", [0, -5])
def test_gate_rejects_non_positive_page_size(fetcher, page_size) -> None:
    with pytest.raises(ValueError):
        PrefetchGate(FeedStore(fetcher), page_size=page_size)


def test_gate_defaults_to_store_page_size(fetcher) -> None:
    assert PrefetchGate(FeedStore(fetcher, page_size=7)).page_size == 7


def test_negative_index_is_rejected(fetcher) -> None:
    gate = PrefetchGate(FeedStore(fetcher))
    with pytest.raises(ValueError):
        gate.on_visible_range_end(-1)


def test_scrolling_through_two_pages_then_failing(
    fetcher, make_page, recorder_for, settle_loop
) -> None:
    """Page 1 loads from the first screen; page 2 fails in transport."""

    async def run() -> None:
        store = FeedStore(fetcher, page_size=20)
        gate = PrefetchGate(store)
        recorder = recorder_for(store)

        assert gate.on_visible_range_end(19) == 1
        await settle_loop()
        fetcher.resolve(1, make_page(1, range(1, 21)))
        await store.wait_idle()
        assert len(store.items) == 20

        assert gate.on_visible_range_end(39) == 2
        await settle_loop()
        fetcher.fail(2, TransportError("Service not reachable"))
        await store.wait_idle()

        assert fetcher.calls == [1, 2]
        assert len(store.items) == 20
        assert recorder.of("error_occurred") == ["Service not reachable"]
        assert recorder.of("loading_changed") == [True, False, True, False]
        assert not store.is_loading

    asyncio.run(run())


def test_repeated_callbacks_for_one_boundary_request_once(fetcher, make_page, settle_loop) -> None:
    async def run() -> None:
        store = FeedStore(fetcher, page_size=20)
        gate = PrefetchGate(store)
        store.request_page(1)
        await settle_loop()
        fetcher.resolve(1, make_page(1, range(1, 21)))
        await store.wait_idle()

        results = [gate.on_visible_range_end(index) for index in (20, 25, 39, 20)]
        await settle_loop()

        assert results == [2, None, None, None]
        assert fetcher.calls == [1, 2]

    asyncio.run(run())


def test_rows_of_already_requested_pages_do_nothing(fetcher, settle_loop) -> None:
    async def run() -> None:
        store = FeedStore(fetcher, page_size=10)
        gate = PrefetchGate(store)
        store.request_page(1)

        assert gate.on_visible_range_end(5) is None
        await settle_loop()
        assert fetcher.calls == [1]

    asyncio.run(run())


def test_rows_beyond_the_next_page_do_nothing(fetcher) -> None:
    async def run() -> None:
        store = FeedStore(fetcher, page_size=10)
        gate = PrefetchGate(store)

        assert gate.on_visible_range_end(45) is None
        assert store.next_page_number == 1

    asyncio.run(run())


def test_failed_page_is_not_requested_again_by_scrolling(
    fetcher, make_page, settle_loop
) -> None:
    """Known gap: once page 2 fails the feed cannot get past it by scrolling."""

    async def run() -> None:
        store = FeedStore(fetcher, page_size=10)
        gate = PrefetchGate(store)
        gate.on_visible_range_end(0)
        await settle_loop()
        fetcher.resolve(1, make_page(1, range(1, 11)))
        await store.wait_idle()

        gate.on_visible_range_end(10)
        await settle_loop()
        fetcher.fail(2, TransportError("Service not reachable"))
        await store.wait_idle()

        assert gate.on_visible_range_end(10) is None
        assert gate.on_visible_range_end(19) is None
        await settle_loop()
        assert fetcher.calls == [1, 2]
        assert store.next_page_number == 3

    asyncio.run(run())


def test_gate_stops_after_last_page(fetcher, make_page, settle_loop) -> None:
    async def run() -> None:
        store = FeedStore(fetcher, page_size=10)
        gate = PrefetchGate(store)
        gate.on_visible_range_end(0)
        await settle_loop()
        fetcher.resolve(1, make_page(1, range(1, 11), has_next=False))
        await store.wait_idle()

        assert gate.on_visible_range_end(10) is None
        assert fetcher.calls == [1]

    asyncio.run(run())


def test_prefetch_batch_uses_last_index(fetcher, settle_loop) -> None:
    async def run() -> None:
        store = FeedStore(fetcher, page_size=10)
        gate = PrefetchGate(store)

        assert gate.on_prefetch([]) is None
        assert gate.on_prefetch([3, 4, 5]) == 1
        assert gate.requested_up_to == 1
        await settle_loop()
        assert fetcher.calls == [1]

    asyncio.run(run())
