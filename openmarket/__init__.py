"""
OpenMarket package initializer.

This package provides a paginated marketplace feed: it loads product listings
page by page from the open-market API, keeps them in a duplicate-free ordered
collection and renders them as a list or a grid.

The package exposes a ``__version__`` attribute indicating the installed
version of OpenMarket. The version is read from pyproject.toml via
importlib.metadata – this is the single source of truth.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("openmarket")
except PackageNotFoundError:
    # Package is not installed (running from source without pip install -e .)
    __version__ = "0.0.0.dev"

__all__: list[str] = ["__version__"]
