"""Tests for the open-market API client."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from openmarket.domain.models import Currency
from openmarket.infrastructure.http import (DecodeError, FetchError,
                                            MarketApiClient, ServerError,
                                            TransportError)
from openmarket.infrastructure.observability import get_feed_stats

BASE_URL = "https://market.test"


def _item(item_id: int, **overrides) -> dict:
    data = {
        "id": item_id,
        "vendor_id": 3,
        "name": f"Product {item_id}",
        "thumbnail": f"https://img.test/{item_id}.png",
        "currency": "KRW",
        "price": 1000.0 * item_id,
        "bargain_price": 1000.0 * item_id,
        "discounted_price": 0.0,
        "stock": 5,
        "created_at": "2022-08-01T00:00:00",
        "issued_at": "2022-08-01T00:00:00",
    }
    data.update(overrides)
    return data


def _page(page_no: int, ids, *, last_page: int = 3) -> dict:
    return {
        "pageNo": page_no,
        "itemsPerPage": len(ids),
        "totalCount": 30,
        "offset": 0,
        "limit": len(ids),
        "lastPage": last_page,
        "hasNext": page_no < last_page,
        "hasPrev": page_no > 1,
        "pages": [_item(item_id) for item_id in ids],
    }


def _run(handler, call, **client_kwargs):
    async def run():
        transport = httpx.MockTransport(handler)
        async with MarketApiClient(BASE_URL, transport=transport, **client_kwargs) as client:
            return await call(client)

    return asyncio.run(run())


class TestFetchPage:
    def test_decodes_page(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=_page(2, [11, 12, 13]))

        page = _run(handler, lambda client: client.fetch_page(2), page_size=3)

        assert page.page_number == 2
        assert [item.id for item in page] == [11, 12, 13]
        assert page.items[0].currency == Currency.KRW
        assert page.items[0].created_at is not None
        assert page.has_next is True
        assert page.last_page == 3
        assert not page.is_last

        request = requests[0]
        assert request.url.path == "/api/products"
        assert request.url.params["page_no"] == "2"
        assert request.url.params["items_per_page"] == "3"
        assert request.headers["User-Agent"].startswith("openmarket/")

    def test_last_page_is_flagged(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_page(3, [21], last_page=3))

        page = _run(handler, lambda client: client.fetch_page(3))

        assert page.is_last

    def test_server_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="maintenance")

        with pytest.raises(ServerError) as excinfo:
            _run(handler, lambda client: client.fetch_page(1))

        assert excinfo.value.status_code == 503
        assert excinfo.value.kind == "server"
        assert excinfo.value.page_number == 1
        assert "503" in str(excinfo.value)

    def test_connection_failure_is_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as excinfo:
            _run(handler, lambda client: client.fetch_page(1))

        assert excinfo.value.kind == "transport"
        assert "Service not reachable" in str(excinfo.value)

    def test_timeout_is_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(TransportError, match="timed out"):
            _run(handler, lambda client: client.fetch_page(1))

    def test_invalid_json_is_decode_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(DecodeError) as excinfo:
            _run(handler, lambda client: client.fetch_page(1))

        assert excinfo.value.kind == "decode"

    def test_schema_mismatch_is_decode_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"pages": [{"name": "no id"}]})

        with pytest.raises(DecodeError):
            _run(handler, lambda client: client.fetch_page(1))

    def test_duplicate_ids_within_page_are_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_page(1, [5, 5]))

        with pytest.raises(DecodeError, match="duplicate item id 5"):
            _run(handler, lambda client: client.fetch_page(1))

    def test_page_zero_is_rejected_before_any_request(self):
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=_page(1, [1]))

        with pytest.raises(ValueError):
            _run(handler, lambda client: client.fetch_page(0))
        assert calls == []

    def test_failures_are_fetch_errors(self):
        for error_type in (TransportError, ServerError, DecodeError):
            assert issubclass(error_type, FetchError)

    def test_fetches_are_counted_by_outcome(self):
        before = get_feed_stats()["page_fetches"]
        responses = iter([
            httpx.Response(200, json=_page(1, [1])),
            httpx.Response(500),
        ])

        def handler(request: httpx.Request) -> httpx.Response:
            return next(responses)

        async def call(client):
            await client.fetch_page(1)
            with pytest.raises(ServerError):
                await client.fetch_page(2)

        _run(handler, call)

        after = get_feed_stats()["page_fetches"]
        assert after["success"] == before["success"] + 1
        assert after["server"] == before["server"] + 1


class TestFetchItem:
    def test_decodes_item_with_description(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/products/42"
            return httpx.Response(200, json=_item(42, description="Solid oak", currency="USD"))

        item = _run(handler, lambda client: client.fetch_item(42))

        assert item.id == 42
        assert item.description == "Solid oak"
        assert item.currency == Currency.USD

    def test_missing_item_is_server_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"code": 404})

        with pytest.raises(ServerError) as excinfo:
            _run(handler, lambda client: client.fetch_item(404))

        assert excinfo.value.status_code == 404


class TestClientLifecycle:
    def test_page_size_must_be_positive(self):
        with pytest.raises(ValueError):
            MarketApiClient(BASE_URL, page_size=0)

    def test_base_url_trailing_slash_is_stripped(self):
        client = MarketApiClient(f"{BASE_URL}/")
        assert client.base_url == BASE_URL

    def test_custom_user_agent(self):
        client = MarketApiClient(BASE_URL, user_agent="tests/1.0")
        assert client.headers["User-Agent"] == "tests/1.0"

    def test_context_manager_closes_client(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_page(1, [1]))

        async def run() -> MarketApiClient:
            client = MarketApiClient(BASE_URL, transport=httpx.MockTransport(handler))
            async with client:
                assert client._client is not None
            return client

        client = asyncio.run(run())
        assert client._client is None
