"""Fixed-interval polling of tracked feeds with per-feed fault isolation."""
from __future__ import annotations

import asyncio
import contextlib
import logging
import math
from datetime import datetime, timezone
from typing import Any, Awaitable, Sequence

from ..config import AppConfig
from ..decoder import decode
from ..errors import ConfigurationError, FeedNotFoundError, PriceFeedError
from ..hermes.parser import normalize_feed_id
from ..interfaces.feed_source import FeedSource
from ..interfaces.reporter import Reporter
from ..models import CycleReport, PollError, PollOutcome, TrackedFeed

logger = logging.getLogger(__name__)


class PollingScheduler:
    """Poll every tracked feed once per interval until stopped.

    Each cycle fetches all feeds concurrently, decodes them, and reports one
    outcome per feed in configured order. A failing feed becomes a
    :class:`PollError` and never affects the other feeds or later cycles.

    Cycles run at a fixed rate: cycle ``n + 1`` is due one interval after
    cycle ``n`` was due. A cycle that overruns its slot is followed
    immediately by the next one, and the schedule is re-anchored there.
    """

    def __init__(
        self,
        client: FeedSource,
        feeds: Sequence[TrackedFeed],
        reporter: Reporter,
        interval_seconds: float = 1.0,
    ) -> None:
        if not feeds:
            raise ConfigurationError("At least one feed must be tracked")
        if not math.isfinite(interval_seconds) or interval_seconds <= 0:
            raise ConfigurationError("Polling interval must be a positive number")

        self._client = client
        self._feeds = tuple(feeds)
        self._reporter = reporter
        self.interval = interval_seconds
        self._stop = asyncio.Event()
        self._cycles = 0

    @classmethod
    def from_config(
        cls, config: AppConfig, client: FeedSource, reporter: Reporter
    ) -> PollingScheduler:
        return cls(client, config.feeds, reporter, config.poller.interval_seconds)

    @property
    def feeds(self) -> tuple[TrackedFeed, ...]:
        return self._feeds

    @property
    def cycles(self) -> int:
        """Number of cycles started so far."""
        return self._cycles

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        """Interrupt the in-flight fetch or sleep and end :meth:`run_forever`."""
        if not self._stop.is_set():
            logger.info("Stop requested")
        self._stop.set()

    # ------------------------------------------------------------------
    # Per-feed work
    # ------------------------------------------------------------------

    async def _poll_feed(self, feed: TrackedFeed) -> PollOutcome:
        try:
            records = await self._client.fetch_prices({feed.feed_id})
            record = records.get(normalize_feed_id(feed.feed_id))
            if record is None:
                raise FeedNotFoundError(feed.feed_id)
            return decode(record, label=feed.label)
        except PriceFeedError as e:
            logger.warning("Feed %s failed: %s", feed.label, e)
            return PollError(label=feed.label, feed_id=feed.feed_id, cause=e)
        except Exception as e:
            # A bug in one feed's path must not discard the other feeds' results.
            logger.exception("Unexpected error polling feed %s", feed.label)
            return PollError(label=feed.label, feed_id=feed.feed_id, cause=e)

    async def _poll_all(self) -> list[PollOutcome]:
        # gather keeps results in argument order
        return await asyncio.gather(*(self._poll_feed(feed) for feed in self._feeds))

    async def _until_stopped(self, aw: Awaitable[Any]) -> tuple[bool, Any]:
        """Await ``aw`` unless stop() fires first.

        Returns ``(True, result)`` on completion, ``(False, None)`` if the
        work was abandoned.
        """
        work = asyncio.ensure_future(aw)
        stopper = asyncio.ensure_future(self._stop.wait())
        try:
            done, _ = await asyncio.wait(
                {work, stopper}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            stopper.cancel()

        if work in done:
            return True, work.result()

        work.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await work
        return False, None

    def _emit(self, method: str, *args: Any) -> None:
        try:
            getattr(self._reporter, method)(*args)
        except Exception:
            logger.exception("Reporter %s failed", method)

    # ------------------------------------------------------------------
    # Cycles
    # ------------------------------------------------------------------

    async def run_cycle(self) -> CycleReport:
        """Fetch, decode and report every tracked feed once."""
        self._cycles += 1
        number = self._cycles
        started_at = datetime.now(timezone.utc)
        self._emit("cycle_started", number, started_at)

        completed, outcomes = await self._until_stopped(self._poll_all())
        if not completed:
            logger.info("Cycle %d abandoned", number)
            return CycleReport(number=number, started_at=started_at)

        for outcome in outcomes:
            if isinstance(outcome, PollError):
                self._emit("report_error", outcome)
            else:
                self._emit("report_price", outcome)

        return CycleReport(number=number, started_at=started_at, outcomes=tuple(outcomes))

    async def _sleep(self, delay: float) -> None:
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    async def run_forever(self) -> None:
        """Run cycles until :meth:`stop` is called or the task is cancelled."""
        loop = asyncio.get_running_loop()
        logger.info(
            "Polling %d feed(s) every %.3gs", len(self._feeds), self.interval
        )

        next_start = loop.time()
        while not self._stop.is_set():
            try:
                await self.run_cycle()
            except Exception:
                logger.exception("Error in polling cycle %d", self._cycles)

            if self._stop.is_set():
                break

            next_start += self.interval
            delay = next_start - loop.time()
            if delay <= 0:
                logger.warning("Cycle %d overran interval by %.3fs", self._cycles, -delay)
                next_start = loop.time()
                continue

            await self._sleep(delay)

        logger.info("Polling stopped after %d cycle(s)", self._cycles)
