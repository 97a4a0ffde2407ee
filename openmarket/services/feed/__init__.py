"""Paginated feed services.

This package provides the official API for loading the marketplace feed.
All feed functionality should be imported from this package, not directly
from submodules.

Public API:
  - FeedStore – owns feed state, triggers fetches, broadcasts changes
  - PageFetcher – protocol the store fetches pages through
  - EventStream / Subscription – push-based output streams
  - PrefetchGate – turns scroll positions into next-page requests
  - IncrementalCollectionModel / Snapshot – ordered, duplicate-free snapshots
  - PresentationMode – list or grid layout
  - FeedBrowser / PresentationAdapter – screen-level wiring
"""

from .browser import FeedBrowser, Navigator, PresentationAdapter
from .collection import (MAIN_SECTION, IncrementalCollectionModel,
                         PresentationMode, Snapshot)
from .gate import PrefetchGate
from .store import FeedState, FeedStore, PageFetcher
from .streams import EventStream, Subscription

__all__ = [
    # === State & Fetching
    "FeedState",
    "FeedStore",
    "PageFetcher",
    # === Streams
    "EventStream",
    "Subscription",
    # === Scroll Gate
    "PrefetchGate",
    # === Collection & Presentation
    "IncrementalCollectionModel",
    "MAIN_SECTION",
    "PresentationMode",
    "Snapshot",
    "FeedBrowser",
    "Navigator",
    "PresentationAdapter",
]
