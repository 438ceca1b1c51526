"""Feed source protocol — latest-price abstraction."""
from typing import Iterable, Protocol

from ..models import RawPriceRecord


class FeedSource(Protocol):
    """Abstract interface for fetching raw price records by feed id."""

    async def fetch_prices(self, feed_ids: Iterable[str]) -> dict[str, RawPriceRecord]: ...
