"""Domain layer facade for OpenMarket.

This package groups the pure listing models that do not concern
infrastructure or interface details.
"""

from . import models

__all__ = ["models"]
