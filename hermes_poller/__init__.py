"""Resilient Pyth Hermes price poller."""
from .decoder import decode
from .hermes import FeedCatalog, HermesClient
from .models import (
    CycleReport,
    FeedDescriptor,
    NormalizedPrice,
    PollError,
    RawPriceRecord,
    TrackedFeed,
)
from .services import PollingScheduler

__version__ = "0.1.0"

__all__ = [
    "CycleReport",
    "FeedCatalog",
    "FeedDescriptor",
    "HermesClient",
    "NormalizedPrice",
    "PollError",
    "PollingScheduler",
    "RawPriceRecord",
    "TrackedFeed",
    "decode",
]
