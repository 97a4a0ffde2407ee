from __future__ import annotations

import pytest
from pydantic import ValidationError

from openmarket.domain.models import Currency
from openmarket.infrastructure.http import ItemPayload, PagePayload


def test_item_payload_ignores_unknown_fields() -> None:
    payload = ItemPayload.model_validate(
        {"id": 1, "name": "Bag", "price": 5000, "shipping_method": "PARCEL"}
    )

    item = payload.to_domain()
    assert item.id == 1
    assert item.price == 5000.0
    assert item.currency == Currency.UNKNOWN


def test_item_payload_rejects_negative_price() -> None:
    with pytest.raises(ValidationError):
        ItemPayload.model_validate({"id": 1, "name": "Bag", "price": -1})


def test_page_payload_accepts_field_names() -> None:
    payload = PagePayload.model_validate({"page_no": 4, "has_next": False})

    page = payload.to_domain()
    assert page.page_number == 4
    assert page.items == ()
    assert page.is_last


def test_page_payload_rejects_page_zero() -> None:
    with pytest.raises(ValidationError):
        PagePayload.model_validate({"pageNo": 0, "pages": []})
