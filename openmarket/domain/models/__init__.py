"""Domain models package.

This package contains domain model classes for OpenMarket.
"""

from .item import Currency, Item, ItemId
from .page import FIRST_PAGE_NUMBER, Page

__all__ = ["Currency", "FIRST_PAGE_NUMBER", "Item", "ItemId", "Page"]
