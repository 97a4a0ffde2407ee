"""Shared helpers for composing CLI command contexts.

This module centralises common CLI wiring such as resolving settings and
building the API client with the project defaults applied.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from openmarket.app.config import FeedSettings, load_settings
from openmarket.infrastructure.http import MarketApiClient


@dataclass(frozen=True)
class FeedCommandContext:
    """Container for resolved settings and HTTP wiring."""

    settings: FeedSettings
    transport: httpx.AsyncBaseTransport | None = None

    def api_client(self) -> MarketApiClient:
        """Build an API client; use it as an async context manager."""
        return MarketApiClient(
            self.settings.base_url,
            page_size=self.settings.page_size,
            timeout=self.settings.timeout_seconds,
            transport=self.transport,
        )


def build_feed_context(
    *,
    config_path: str | None = None,
    base_url: str | None = None,
    page_size: int | None = None,
) -> FeedCommandContext:
    """Resolve settings from env, an optional JSON file and CLI overrides.

    Raises:
        ConfigError: If any source holds invalid values.
    """
    settings = load_settings(config_path).merged(
        base_url=base_url, page_size=page_size
    )
    return FeedCommandContext(settings=settings)
