"""Feed discovery over the Hermes catalog endpoint."""
from __future__ import annotations

import logging

from ..models import FeedDescriptor
from .client import PRICE_FEEDS_PATH, HermesClient
from .parser import match_asset_type, match_query, parse_feed_descriptors

logger = logging.getLogger(__name__)


class FeedCatalog:
    """List and search the feeds Hermes exposes.

    Every call re-fetches the catalog; nothing is cached between calls.
    Results keep the order the service returned them in.
    """

    def __init__(self, client: HermesClient) -> None:
        self._client = client

    async def list_feeds(self) -> list[FeedDescriptor]:
        data = await self._client.get_json(PRICE_FEEDS_PATH)
        feeds = parse_feed_descriptors(data)
        logger.debug("Fetched %d feed descriptors", len(feeds))
        return feeds

    async def search(self, substring: str) -> list[FeedDescriptor]:
        """Feeds whose symbol or base asset contains ``substring`` (any case)."""
        return match_query(await self.list_feeds(), substring)

    async def filter_by_asset_type(self, asset_type: str) -> list[FeedDescriptor]:
        return match_asset_type(await self.list_feeds(), asset_type)
