"""Simple in-process metrics collection for OpenMarket.

This module provides lightweight counters and histograms for tracking
feed health without external dependencies. Metrics are stored in memory and
can be printed by the CLI or logged periodically.
"""

from __future__ import annotations

import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Mapping

LabelKey = tuple[tuple[str, str | None], ...]


def _labels_to_key(labels: Mapping[str, str | None] | None) -> LabelKey:
    if labels is None:
        return ()
    return tuple(sorted(labels.items()))


# ---------------------------------------------------------------------------
# Metric storage
# ---------------------------------------------------------------------------


@dataclass
class Counter:
    """A monotonically increasing counter."""

    name: str
    help_text: str = ""
    _values: dict[LabelKey, float] = field(
        default_factory=lambda: defaultdict(float)
    )
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def inc(
        self, value: float = 1.0, labels: Mapping[str, str | None] | None = None
    ) -> None:
        """Increment the counter by the given value."""
        key = _labels_to_key(labels)
        with self._lock:
            self._values[key] += value

    def get(self, labels: Mapping[str, str | None] | None = None) -> float:
        """Get the current counter value."""
        key = _labels_to_key(labels)
        with self._lock:
            return self._values.get(key, 0.0)


@dataclass
class Histogram:
    """A histogram keeping raw observations for sum/count/avg summaries."""

    name: str
    help_text: str = ""
    _observations: dict[LabelKey, list[float]] = field(
        default_factory=lambda: defaultdict(list)
    )
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def observe(
        self, value: float, labels: Mapping[str, str | None] | None = None
    ) -> None:
        """Record an observation."""
        key = _labels_to_key(labels)
        with self._lock:
            self._observations[key].append(value)

    def get_stats(
        self, labels: Mapping[str, str | None] | None = None
    ) -> dict[str, float]:
        """Get summary statistics for the histogram."""
        key = _labels_to_key(labels)
        with self._lock:
            values = self._observations.get(key, [])
            if not values:
                return {"count": 0, "sum": 0.0, "avg": 0.0}
            return {
                "count": len(values),
                "sum": sum(values),
                "avg": sum(values) / len(values),
            }


# ---------------------------------------------------------------------------
# Global metric registry
# ---------------------------------------------------------------------------


class MetricRegistry:
    """Global registry for all metrics."""

    def __init__(self) -> None:
        self._counters: dict[str, Counter] = {}
        self._histograms: dict[str, Histogram] = {}
        self._lock = threading.Lock()

    def counter(self, name: str, help_text: str = "") -> Counter:
        """Get or create a counter."""
        with self._lock:
            if name not in self._counters:
                self._counters[name] = Counter(name=name, help_text=help_text)
            return self._counters[name]

    def histogram(self, name: str, help_text: str = "") -> Histogram:
        """Get or create a histogram."""
        with self._lock:
            if name not in self._histograms:
                self._histograms[name] = Histogram(name=name, help_text=help_text)
            return self._histograms[name]

    def all_counters(self) -> dict[str, Counter]:
        with self._lock:
            return dict(self._counters)

    def all_histograms(self) -> dict[str, Histogram]:
        with self._lock:
            return dict(self._histograms)


# Default global registry
_registry = MetricRegistry()


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------


def increment_counter(
    name: str,
    value: float = 1.0,
    labels: Mapping[str, str | None] | None = None,
    help_text: str = "",
) -> None:
    """Increment a counter by name.

    Creates the counter if it doesn't exist.
    """
    _registry.counter(name, help_text).inc(value, labels)


def observe_histogram(
    name: str,
    value: float,
    labels: Mapping[str, str | None] | None = None,
    help_text: str = "",
) -> None:
    """Record an observation in a histogram.

    Creates the histogram if it doesn't exist.
    """
    _registry.histogram(name, help_text).observe(value, labels)


class Timer:
    """Context manager for timing operations and recording to a histogram."""

    def __init__(
        self,
        histogram_name: str,
        labels: Mapping[str, str | None] | None = None,
        help_text: str = "",
    ) -> None:
        self.histogram_name = histogram_name
        self.labels = labels
        self.help_text = help_text
        self._start: float = 0.0
        self.duration: float = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *args: object) -> None:
        self.duration = time.perf_counter() - self._start
        observe_histogram(
            self.histogram_name, self.duration, self.labels, self.help_text
        )


# ---------------------------------------------------------------------------
# Predefined metrics for OpenMarket
# ---------------------------------------------------------------------------

# HTTP fetch metrics
PAGE_FETCHES = "page_fetches_total"
PAGE_FETCH_DURATION = "page_fetch_duration_seconds"
ITEM_FETCHES = "item_fetches_total"

# Feed store metrics
FEED_ITEMS_MERGED = "feed_items_merged_total"
FEED_DUPLICATES_DROPPED = "feed_duplicates_dropped_total"
FEED_STALE_DISCARDS = "feed_stale_responses_total"


def record_page_fetch(status: str) -> None:
    """Record a page fetch with its outcome ('success' or a FetchError kind)."""
    increment_counter(
        PAGE_FETCHES,
        labels={"status": status},
        help_text="Total listing page fetches",
    )


def record_item_fetch(status: str) -> None:
    """Record a single product fetch with its outcome."""
    increment_counter(
        ITEM_FETCHES,
        labels={"status": status},
        help_text="Total product detail fetches",
    )


def record_feed_merge(appended: int, dropped: int) -> None:
    """Record how many items a page merge appended and dropped as duplicates."""
    increment_counter(
        FEED_ITEMS_MERGED,
        value=float(appended),
        help_text="Total items appended to the feed",
    )
    if dropped > 0:
        increment_counter(
            FEED_DUPLICATES_DROPPED,
            value=float(dropped),
            help_text="Total items dropped because their id was already loaded",
        )


def record_stale_discard(outcome: str) -> None:
    """Record a response discarded because the feed was reset meanwhile."""
    increment_counter(
        FEED_STALE_DISCARDS,
        labels={"outcome": outcome},
        help_text="Total responses discarded after a feed reset",
    )


def get_feed_stats() -> dict[str, object]:
    """Get summary statistics for the feed.

    Returns a dictionary suitable for CLI display.
    """
    fetches = _registry.counter(PAGE_FETCHES)
    return {
        "page_fetches": {
            "success": fetches.get({"status": "success"}),
            "transport": fetches.get({"status": "transport"}),
            "server": fetches.get({"status": "server"}),
            "decode": fetches.get({"status": "decode"}),
        },
        "page_fetch_duration": _registry.histogram(PAGE_FETCH_DURATION).get_stats(),
        "items_merged": _registry.counter(FEED_ITEMS_MERGED).get(),
        "duplicates_dropped": _registry.counter(FEED_DUPLICATES_DROPPED).get(),
        "stale_discards": {
            "success": _registry.counter(FEED_STALE_DISCARDS).get({"outcome": "success"}),
            "failure": _registry.counter(FEED_STALE_DISCARDS).get({"outcome": "failure"}),
        },
    }


# ---------------------------------------------------------------------------
# Export utilities
# ---------------------------------------------------------------------------


def format_prometheus() -> str:
    """Format metrics in Prometheus text exposition format."""
    lines: list[str] = []

    for name, counter in _registry.all_counters().items():
        if counter.help_text:
            lines.append(f"# HELP {name} {counter.help_text}")
        lines.append(f"# TYPE {name} counter")
        for key, value in counter._values.items():
            if key:
                label_str = ",".join(f'{k}="{v}"' for k, v in key)
                lines.append(f"{name}{{{label_str}}} {value}")
            else:
                lines.append(f"{name} {value}")

    for name, histogram in _registry.all_histograms().items():
        if histogram.help_text:
            lines.append(f"# HELP {name} {histogram.help_text}")
        lines.append(f"# TYPE {name} histogram")
        for key in histogram._observations:
            stats = histogram.get_stats(dict(key) if key else None)
            if key:
                label_str = ",".join(f'{k}="{v}"' for k, v in key)
                lines.append(f"{name}_count{{{label_str}}} {stats['count']}")
                lines.append(f"{name}_sum{{{label_str}}} {stats['sum']}")
            else:
                lines.append(f"{name}_count {stats['count']}")
                lines.append(f"{name}_sum {stats['sum']}")

    return "\n".join(lines)
