"""HTTP adapters for OpenMarket.

This package provides the async client that fetches listing pages and single
products from the open-market API, plus the payload models it decodes with.
"""

from .client import (
    DEFAULT_BASE_URL,
    DEFAULT_PAGE_SIZE,
    DecodeError,
    FetchError,
    MarketApiClient,
    ServerError,
    TransportError,
)
from .payloads import ItemPayload, PagePayload

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_PAGE_SIZE",
    "DecodeError",
    "FetchError",
    "ItemPayload",
    "MarketApiClient",
    "PagePayload",
    "ServerError",
    "TransportError",
]
