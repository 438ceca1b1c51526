"""Pyth Hermes price service access."""
from .catalog import FeedCatalog
from .client import HermesClient
from .parser import normalize_feed_id

__all__ = ["FeedCatalog", "HermesClient", "normalize_feed_id"]
