"""Pydantic models for the open-market API payloads.

The HTTP client hands raw JSON to these models; validation failures surface
as pydantic ``ValidationError`` and are translated to decode errors by the
client.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from openmarket.domain.models import Currency, Item, Page


# --- Item DTOs ---
class ItemPayload(BaseModel):
    """A single product as returned by the list and detail endpoints."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    vendor_id: int | None = None
    description: str | None = None
    thumbnail: str | None = None
    currency: str | None = None
    price: float = Field(ge=0)
    bargain_price: float | None = None
    discounted_price: float | None = None
    stock: int | None = None
    created_at: datetime | None = None
    issued_at: datetime | None = None

    def to_domain(self) -> Item:
        return Item(
            id=self.id,
            name=self.name,
            price=self.price,
            thumbnail=self.thumbnail,
            currency=Currency.from_string(self.currency),
            bargain_price=self.bargain_price,
            discounted_price=self.discounted_price,
            stock=self.stock,
            vendor_id=self.vendor_id,
            created_at=self.created_at,
            issued_at=self.issued_at,
            description=self.description,
        )


# --- Page DTOs ---
class PagePayload(BaseModel):
    """The paginated list envelope; ``pages`` holds the items of this page."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    page_no: int = Field(alias="pageNo", ge=1)
    items_per_page: int | None = Field(default=None, alias="itemsPerPage")
    total_count: int | None = Field(default=None, alias="totalCount")
    last_page: int | None = Field(default=None, alias="lastPage")
    has_next: bool | None = Field(default=None, alias="hasNext")
    has_prev: bool = Field(default=False, alias="hasPrev")
    pages: list[ItemPayload] = Field(default_factory=list)

    @model_validator(mode="after")
    def _ids_unique_within_page(self) -> "PagePayload":
        seen: set[int] = set()
        for item in self.pages:
            if item.id in seen:
                raise ValueError(f"duplicate item id {item.id} in page {self.page_no}")
            seen.add(item.id)
        return self

    def to_domain(self) -> Page:
        return Page(
            page_number=self.page_no,
            items=tuple(item.to_domain() for item in self.pages),
            items_per_page=self.items_per_page,
            total_count=self.total_count,
            last_page=self.last_page,
            has_next=self.has_next,
            has_prev=self.has_prev,
        )


__all__ = ["ItemPayload", "PagePayload"]
