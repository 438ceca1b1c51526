"""Pyth Hermes HTTP client."""
from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any, Iterable

import aiohttp
import certifi

from ..config import HermesConfig
from ..errors import HttpStatusError, NetworkError, ResponseDecodeError
from ..models import RawPriceRecord
from .parser import parse_price_records

logger = logging.getLogger(__name__)

LATEST_PRICE_FEEDS_PATH = "/api/latest_price_feeds"
PRICE_FEEDS_PATH = "/v2/price_feeds"


class HermesClient:
    """Query latest prices from Pyth Hermes over a pooled HTTP session.

    The session is created by :meth:`open` or on first use, and shared by
    every request until :meth:`close` is called.
    """

    def __init__(self, config: HermesConfig) -> None:
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout_seconds
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HermesClient:
        self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def open(self) -> None:
        """Create the HTTP session now instead of on the first request."""
        self._get_session()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            connector = aiohttp.TCPConnector(ssl=ssl_context)
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def get_json(
        self, path: str, params: list[tuple[str, str]] | None = None
    ) -> Any:
        """GET ``path`` and return the decoded JSON body.

        Raises:
            NetworkError: connection failure or timeout.
            HttpStatusError: non-200 response.
            ResponseDecodeError: body is not JSON.
        """
        url = f"{self.base_url}{path}"
        session = self._get_session()

        try:
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    logger.debug("Hermes %s returned HTTP %s", path, response.status)
                    raise HttpStatusError(response.status)
                try:
                    return await response.json()
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise ResponseDecodeError(f"Invalid JSON from {path}: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Request to {url} failed: {str(e) or type(e).__name__}") from e

    async def fetch_prices(self, feed_ids: Iterable[str]) -> dict[str, RawPriceRecord]:
        """Fetch the latest price records for ``feed_ids`` in one request.

        Returns records keyed by normalized feed id. Feeds the service does
        not return are absent from the mapping.
        """
        ids = sorted(set(feed_ids))
        if not ids:
            return {}

        params = [("ids[]", fid) for fid in ids]
        data = await self.get_json(LATEST_PRICE_FEEDS_PATH, params)
        records = parse_price_records(data)

        logger.debug("Fetched %d/%d price records from Hermes", len(records), len(ids))
        return records
