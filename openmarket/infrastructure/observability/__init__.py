"""Observability and logging facades."""

from .logging import (
    configure_logging,
    get_logger,
    log_context,
    log_exception,
)
from .metrics import (
    Timer,
    format_prometheus,
    get_feed_stats,
    increment_counter,
    observe_histogram,
    record_feed_merge,
    record_item_fetch,
    record_page_fetch,
    record_stale_discard,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "log_context",
    "log_exception",
    # Metrics
    "Timer",
    "format_prometheus",
    "get_feed_stats",
    "increment_counter",
    "observe_histogram",
    "record_feed_merge",
    "record_item_fetch",
    "record_page_fetch",
    "record_stale_discard",
]
