"""Configuration utilities for OpenMarket.

Settings come from three places, later ones winning: built-in defaults,
environment variables, and an optional JSON file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from openmarket.domain.models import FIRST_PAGE_NUMBER
from openmarket.infrastructure.http import DEFAULT_BASE_URL, DEFAULT_PAGE_SIZE

ENV_PREFIX = "OPENMARKET_"


class ConfigError(Exception):
    """Raised when configuration cannot be read or holds invalid values."""


class FeedSettings(BaseModel):
    """Settings for the feed and the API client."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: str = DEFAULT_BASE_URL
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    first_page_number: int = Field(default=FIRST_PAGE_NUMBER, ge=1, le=1)
    timeout_seconds: float = Field(default=30.0, gt=0)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "FeedSettings":
        """Build settings from ``OPENMARKET_*`` environment variables."""
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        if env.get(f"{ENV_PREFIX}API_URL"):
            values["base_url"] = env[f"{ENV_PREFIX}API_URL"]
        if env.get(f"{ENV_PREFIX}PAGE_SIZE"):
            values["page_size"] = env[f"{ENV_PREFIX}PAGE_SIZE"]
        if env.get(f"{ENV_PREFIX}TIMEOUT"):
            values["timeout_seconds"] = env[f"{ENV_PREFIX}TIMEOUT"]
        return _validate(values, source="environment")

    def merged(self, **overrides: Any) -> "FeedSettings":
        """Return a copy with the non-None overrides applied."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return _validate(values, source="overrides")


def _validate(values: Dict[str, Any], *, source: str) -> FeedSettings:
    try:
        return FeedSettings.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings from {source}: {exc}") from exc


def load_config(path: str | Path) -> Dict[str, Any]:
    """Load configuration from a JSON file.

    Args:
        path: Path to the JSON configuration file.

    Returns:
        A dictionary of configuration values.

    Raises:
        ConfigError: If the file is missing, unreadable or not a JSON object.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def load_settings(
    path: str | Path | None = None,
    environ: dict[str, str] | None = None,
) -> FeedSettings:
    """Load settings from the environment, then overlay a JSON file if given."""
    settings = FeedSettings.from_env(environ)
    if path is None:
        return settings
    values = settings.model_dump()
    values.update(load_config(path))
    return _validate(values, source=str(path))


__all__ = [
    "ConfigError",
    "FeedSettings",
    "load_config",
    "load_settings",
]
