"""CLI interface facades for OpenMarket.

This package is the canonical home for all Click commands.
"""

from .__main__ import cli
from .browse import browse
from .detail import detail

__all__ = [
    "browse",
    "cli",
    "detail",
]
