"""Push-based output streams for the feed store.

An :class:`EventStream` fans each emitted value out to every current
subscriber, in subscription order. Nothing is replayed: a subscriber only
sees values emitted after it subscribed.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from openmarket.infrastructure.observability import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


class Subscription(Generic[T]):
    """Handle returned by :meth:`EventStream.subscribe`."""

    def __init__(self, stream: "EventStream[T]", callback: Callable[[T], None]) -> None:
        self._stream = stream
        self.callback = callback

    @property
    def active(self) -> bool:
        return self._stream._has(self)

    def cancel(self) -> None:
        """Stop receiving values. Cancelling twice is harmless."""
        self._stream._remove(self)


class EventStream(Generic[T]):
    """Multi-subscriber stream with no replay of past values."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscriptions: list[Subscription[T]] = []

    def __repr__(self) -> str:
        return f"EventStream({self.name!r}, subscribers={len(self._subscriptions)})"

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: Callable[[T], None]) -> Subscription[T]:
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def emit(self, value: T) -> None:
        """Deliver ``value`` to every subscriber.

        A subscriber that raises is logged and skipped; the remaining
        subscribers still receive the value.
        """
        # Copy so callbacks may subscribe or cancel while we iterate.
        for subscription in list(self._subscriptions):
            try:
                subscription.callback(value)
            except Exception:  # isolate subscriber errors
                logger.exception("Subscriber to %s stream failed", self.name)

    def _has(self, subscription: Subscription[T]) -> bool:
        return any(sub is subscription for sub in self._subscriptions)

    def _remove(self, subscription: Subscription[T]) -> None:
        self._subscriptions = [
            sub for sub in self._subscriptions if sub is not subscription
        ]


__all__ = ["EventStream", "Subscription"]
