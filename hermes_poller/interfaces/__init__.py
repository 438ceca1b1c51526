"""Protocol interfaces for the price poller."""
from .feed_source import FeedSource
from .reporter import Reporter

__all__ = ["FeedSource", "Reporter"]
