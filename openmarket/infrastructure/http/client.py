"""Async client for the open-market product API.

This module centralises HTTP access to the marketplace. A single request is
made per call: failures are classified into transport, server and decode
errors and raised to the caller once, without retries. The client keeps one
:class:`httpx.AsyncClient` for its lifetime so connections are reused across
page fetches.

Usage:
    async with MarketApiClient(page_size=20) as client:
        page = await client.fetch_page(1)
        item = await client.fetch_item(page.items[0].id)
"""

from __future__ import annotations

import os
from typing import Any

import httpx
from pydantic import ValidationError

from openmarket.domain.models import FIRST_PAGE_NUMBER, Item, ItemId, Page
from openmarket.infrastructure.observability.logging import get_logger
from openmarket.infrastructure.observability.metrics import (
    PAGE_FETCH_DURATION,
    Timer,
    record_item_fetch,
    record_page_fetch,
)

from .payloads import ItemPayload, PagePayload

logger = get_logger(__name__)

# Default service URL (can be overridden via environment variable)
DEFAULT_BASE_URL = os.environ.get(
    "OPENMARKET_API_URL", "https://openmarket.yagom-academy.kr")
DEFAULT_PAGE_SIZE = 20
PRODUCTS_PATH = "/api/products"


class FetchError(Exception):
    """Base class for a failed fetch; ``str(exc)`` is the user-facing message."""

    kind = "unknown"

    def __init__(self, message: str, *, page_number: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.page_number = page_number


class TransportError(FetchError):
    """Raised when the server could not be reached or the request timed out."""

    kind = "transport"


class ServerError(FetchError):
    """Raised when the server answers with a non-success status."""

    kind = "server"

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        page_number: int | None = None,
    ) -> None:
        super().__init__(message, page_number=page_number)
        self.status_code = status_code


class DecodeError(FetchError):
    """Raised when the payload is not JSON or does not match the schema."""

    kind = "decode"


class MarketApiClient:
    """Async client for listing pages and single products.

    Attributes:
        base_url: The base URL of the open-market API.
        page_size: Items requested per page.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        user_agent: str = "",  # Empty string triggers dynamic version lookup
    ) -> None:
        from openmarket import __version__

        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.timeout = timeout
        self.headers = {"User-Agent": user_agent or f"openmarket/{__version__}"}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "MarketApiClient":
        """Enter async context, creating HTTP client."""
        await self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context, closing HTTP client."""
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_page(self, page_number: int) -> Page:
        """Fetch one page of listings.

        Args:
            page_number: 1-based page number.

        Returns:
            The decoded Page.

        Raises:
            ValueError: If ``page_number`` is below the first page.
            FetchError: If the request fails for any reason.
        """
        if page_number < FIRST_PAGE_NUMBER:
            raise ValueError(
                f"page_number must be >= {FIRST_PAGE_NUMBER}, got {page_number}"
            )
        params = {"page_no": page_number, "items_per_page": self.page_size}
        try:
            with Timer(PAGE_FETCH_DURATION, help_text="Page fetch duration in seconds"):
                data = await self._get_json(
                    PRODUCTS_PATH, params=params, page_number=page_number
                )
                try:
                    page = PagePayload.model_validate(data).to_domain()
                except (ValidationError, ValueError) as exc:
                    raise DecodeError(
                        f"Page {page_number} did not match the expected schema: {exc}",
                        page_number=page_number,
                    ) from exc
        except FetchError as exc:
            record_page_fetch(exc.kind)
            logger.warning("Fetching page %d failed (%s): %s",
                           page_number, exc.kind, exc)
            raise
        record_page_fetch("success")
        logger.debug("Fetched page %d with %d items", page_number, len(page))
        return page

    async def fetch_item(self, item_id: ItemId) -> Item:
        """Fetch a single product for the detail screen.

        Raises:
            FetchError: If the request fails for any reason.
        """
        try:
            data = await self._get_json(f"{PRODUCTS_PATH}/{item_id}")
            try:
                item = ItemPayload.model_validate(data).to_domain()
            except ValidationError as exc:
                raise DecodeError(
                    f"Product {item_id} did not match the expected schema: {exc}"
                ) from exc
        except FetchError as exc:
            record_item_fetch(exc.kind)
            logger.warning("Fetching product %s failed (%s): %s",
                           item_id, exc.kind, exc)
            raise
        record_item_fetch("success")
        return item

    async def _get_json(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        page_number: int | None = None,
    ) -> Any:
        client = await self._get_client()
        try:
            response = await client.get(path, params=params)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Request to {self.base_url}{path} timed out",
                page_number=page_number,
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                f"Service not reachable at {self.base_url}: {exc}",
                page_number=page_number,
            ) from exc

        if not response.is_success:
            raise ServerError(
                f"Server responded with status {response.status_code} for {path}",
                status_code=response.status_code,
                page_number=page_number,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(
                f"Response from {path} is not valid JSON",
                page_number=page_number,
            ) from exc


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_PAGE_SIZE",
    "DecodeError",
    "FetchError",
    "MarketApiClient",
    "ServerError",
    "TransportError",
]
