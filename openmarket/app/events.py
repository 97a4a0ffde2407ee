"""Feed event message types for OpenMarket.

This module defines the standardized message format used when feed stream
events leave the process (for example the CLI's JSON output). All messages
follow a consistent structure with a `type` field and typed payloads.

Message Format (v1):
    {
        "version": "1",
        "type": "<event_type>",
        "timestamp": "<ISO8601>",
        "payload": { ... }
    }

Event Types:
    - items_added: A page was merged; payload lists the appended items
    - loading_changed: The store's loading flag flipped
    - error_occurred: A fetch failed
    - item_selected: The user picked an item

Usage:
    from openmarket.app.events import attach_event_sink

    subscriptions = attach_event_sink(store, lambda wire: print(json.dumps(wire)))
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Union

from pydantic import BaseModel, Field

from openmarket.domain.models import Item
from openmarket.services.feed import FeedStore, Subscription

# ---------------------------------------------------------------------------
# Message version
# ---------------------------------------------------------------------------

MESSAGE_FORMAT_VERSION = "1"

WireSink = Callable[[dict[str, Any]], None]


# ---------------------------------------------------------------------------
# Base message structure
# ---------------------------------------------------------------------------


class WireMessage(BaseModel):
    """Wire format for all feed event messages."""

    version: str = MESSAGE_FORMAT_VERSION
    type: str
    timestamp: str
    payload: dict[str, Any]


class BaseMessage(BaseModel):
    """Base class for all feed event payloads."""

    def to_wire(self) -> dict[str, Any]:
        """Convert to wire format dictionary."""
        return WireMessage(
            version=MESSAGE_FORMAT_VERSION,
            type=self._message_type,
            timestamp=datetime.now(timezone.utc).isoformat(),
            payload=self.model_dump(mode="json", exclude_none=True),
        ).model_dump()

    @property
    def _message_type(self) -> str:
        """Return the message type identifier."""
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Feed messages
# ---------------------------------------------------------------------------


class ItemSummary(BaseModel):
    """The listing fields a client needs to draw one row or cell."""

    id: Union[int, str]
    name: str
    price: float
    currency: str
    thumbnail: str | None = None
    bargain_price: float | None = None
    discounted_price: float | None = None
    stock: int | None = None

    @classmethod
    def from_item(cls, item: Item) -> "ItemSummary":
        return cls(
            id=item.id,
            name=item.name,
            price=item.price,
            currency=item.currency.value,
            thumbnail=item.thumbnail,
            bargain_price=item.bargain_price,
            discounted_price=item.discounted_price,
            stock=item.stock,
        )


class ItemsAddedMessage(BaseMessage):
    """Sent when a page is merged into the feed."""

    count: int = 0
    items: list[ItemSummary] = Field(default_factory=list)

    @classmethod
    def from_items(cls, items: tuple[Item, ...]) -> "ItemsAddedMessage":
        return cls(
            count=len(items),
            items=[ItemSummary.from_item(item) for item in items],
        )

    @property
    def _message_type(self) -> str:
        return "items_added"


class LoadingChangedMessage(BaseMessage):
    """Sent when the loading flag changes."""

    is_loading: bool

    @property
    def _message_type(self) -> str:
        return "loading_changed"


class ErrorOccurredMessage(BaseMessage):
    """Sent when a page fetch fails."""

    message: str

    @property
    def _message_type(self) -> str:
        return "error_occurred"


class ItemSelectedMessage(BaseMessage):
    """Sent when the user selects an item."""

    item_id: Union[int, str]

    @property
    def _message_type(self) -> str:
        return "item_selected"


def attach_event_sink(store: FeedStore, sink: WireSink) -> list[Subscription]:
    """Forward all four store streams to ``sink`` as wire messages.

    Returns the subscriptions so the caller can cancel them.
    """
    return [
        store.items_added.subscribe(
            lambda items: sink(ItemsAddedMessage.from_items(items).to_wire())
        ),
        store.loading_changed.subscribe(
            lambda value: sink(LoadingChangedMessage(is_loading=value).to_wire())
        ),
        store.error_occurred.subscribe(
            lambda message: sink(ErrorOccurredMessage(message=message).to_wire())
        ),
        store.item_selected.subscribe(
            lambda item_id: sink(ItemSelectedMessage(item_id=item_id).to_wire())
        ),
    ]


# ---------------------------------------------------------------------------
# Message parsing
# ---------------------------------------------------------------------------


MESSAGE_TYPE_MAP: dict[str, type[BaseMessage]] = {
    "items_added": ItemsAddedMessage,
    "loading_changed": LoadingChangedMessage,
    "error_occurred": ErrorOccurredMessage,
    "item_selected": ItemSelectedMessage,
}


def parse_message(data: dict[str, Any]) -> BaseMessage | None:
    """Parse a wire-format message into a typed message object.

    Returns:
        Typed message object, or None if the type is unknown or the payload
        does not validate.
    """
    msg_type = data.get("type")
    payload = data.get("payload", {})
    if msg_type not in MESSAGE_TYPE_MAP:
        return None
    try:
        return MESSAGE_TYPE_MAP[msg_type].model_validate(payload)
    except ValueError:
        return None
