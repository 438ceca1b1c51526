"""Console reporter — price lines to stdout, failures to stderr."""
from __future__ import annotations

import sys
from datetime import datetime, timezone
from typing import TextIO

from ..models import FeedDescriptor, NormalizedPrice, PollError


def format_price(price: NormalizedPrice) -> str:
    return f"{price.label}: ${price.value:.2f}"


def format_error(error: PollError) -> str:
    return f"{error.label}: ERROR {error.cause}"


def format_publish_time(publish_time: int) -> str:
    return datetime.fromtimestamp(publish_time, tz=timezone.utc).strftime(
        "%Y-%m-%d %H:%M:%S UTC"
    )


def format_descriptor(descriptor: FeedDescriptor) -> str:
    return f"{descriptor.symbol:<32} {descriptor.asset_type:<12} 0x{descriptor.id}"


class ConsoleReporter:
    """Write one line per feed per cycle under a timestamped header.

    With ``verbose=True`` each price is followed by its feed id, confidence
    interval and publish time.
    """

    def __init__(
        self,
        out: TextIO | None = None,
        err: TextIO | None = None,
        verbose: bool = False,
    ) -> None:
        self._out = out
        self._err = err
        self.verbose = verbose

    # Resolved lazily so pytest's capsys replacement of sys.stdout is honoured.
    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err or sys.stderr

    def cycle_started(self, number: int, started_at: datetime) -> None:
        stamp = started_at.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        print(f"\n=== {stamp} UTC ===", file=self.out, flush=True)

    def report_price(self, price: NormalizedPrice) -> None:
        print(format_price(price), file=self.out, flush=True)
        if self.verbose:
            print(f"  Asset ID: 0x{price.feed_id}", file=self.out)
            print(f"  Confidence: {price.confidence}", file=self.out)
            print(
                f"  Publish Time: {format_publish_time(price.publish_time)}",
                file=self.out,
                flush=True,
            )

    def report_error(self, error: PollError) -> None:
        print(format_error(error), file=self.err, flush=True)

    def report_catalog(self, descriptors: list[FeedDescriptor]) -> None:
        for descriptor in descriptors:
            print(format_descriptor(descriptor), file=self.out)
        print(f"{len(descriptors)} feed(s)", file=self.out, flush=True)
