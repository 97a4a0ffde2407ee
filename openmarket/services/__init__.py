"""Service layer for OpenMarket.

Subpackages and modules:
  - ``feed`` – paginated feed store, prefetch gate and collection model.
  - ``detail`` – single product loading for the detail screen.
"""

from .detail import ItemFetcher, ProductDetailLoader

__all__ = ["ItemFetcher", "ProductDetailLoader"]
