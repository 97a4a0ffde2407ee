"""Item domain model with listing business logic."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union

ItemId = Union[int, str]


class Currency(str, Enum):
    """Enumeration of currencies the marketplace quotes prices in."""

    KRW = "KRW"
    USD = "USD"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_string(cls, value: str | None) -> "Currency":
        """Convert a string to a Currency, defaulting to UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        normalized = value.upper().strip()
        if normalized in ("KRW", "WON", "₩"):
            return cls.KRW
        if normalized in ("USD", "DOLLAR", "$"):
            return cls.USD
        return cls.UNKNOWN


@dataclass(frozen=True)
class Item:
    """Domain model representing a single product listing.

    Identity is ``id``; every other field is display data. Items are never
    re-fetched by the feed, only appended, so two Items with the same id are
    treated as the same listing regardless of their other fields.
    """

    id: ItemId
    name: str
    price: float = 0.0
    thumbnail: str | None = None
    currency: Currency = Currency.KRW
    bargain_price: float | None = None
    discounted_price: float | None = None
    stock: int | None = None
    vendor_id: int | None = None
    created_at: datetime | None = None
    issued_at: datetime | None = None
    description: str | None = None

    @property
    def is_discounted(self) -> bool:
        """Check if the listing carries a discount."""
        return bool(self.discounted_price) and self.discounted_price > 0

    @property
    def effective_price(self) -> float:
        """Return the bargain price if known, otherwise price minus discount."""
        if self.bargain_price is not None:
            return self.bargain_price
        return self.price - (self.discounted_price or 0.0)

    @property
    def discount_rate(self) -> int | None:
        """Return the discount as a rounded percentage of the list price."""
        if not self.is_discounted or self.price <= 0:
            return None
        return round(self.discounted_price / self.price * 100)

    @property
    def is_sold_out(self) -> bool:
        return self.stock == 0

    def format_amount(self, amount: float) -> str:
        if self.currency == Currency.USD:
            return f"USD {amount:,.2f}"
        return f"{self.currency.value} {amount:,.0f}"

    @property
    def price_label(self) -> str:
        """Return the display price, showing the list price when discounted."""
        if self.is_discounted:
            return (
                f"{self.format_amount(self.price)} -> "
                f"{self.format_amount(self.effective_price)}"
            )
        return self.format_amount(self.price)

    @property
    def stock_label(self) -> str:
        if self.stock is None:
            return "-"
        if self.is_sold_out:
            return "Sold out"
        return f"Stock: {self.stock}"


__all__ = ["Currency", "Item", "ItemId"]
