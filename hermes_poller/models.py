"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union


@dataclass(frozen=True)
class RawPriceRecord:
    """One feed's quote as delivered by Hermes, before scaling."""

    feed_id: str
    mantissa: str
    exponent: int
    confidence: str
    publish_time: int


@dataclass(frozen=True)
class NormalizedPrice:
    """Decoded price: ``value = mantissa * 10**exponent``."""

    feed_id: str
    label: str
    value: float
    confidence: str
    publish_time: int


@dataclass(frozen=True)
class FeedDescriptor:
    """Catalog metadata for a single feed."""

    id: str
    symbol: str
    asset_type: str = ""
    base: str = ""
    quote_currency: str = ""
    description: str = ""


@dataclass(frozen=True)
class TrackedFeed:
    label: str
    feed_id: str


@dataclass(frozen=True)
class PollError:
    """Failed outcome for one feed in one cycle."""

    label: str
    feed_id: str
    cause: Exception


PollOutcome = Union[NormalizedPrice, PollError]


@dataclass(frozen=True)
class CycleReport:
    """All outcomes of one polling cycle, in configured feed order."""

    number: int
    started_at: datetime
    outcomes: tuple[PollOutcome, ...] = ()

    @property
    def prices(self) -> tuple[NormalizedPrice, ...]:
        return tuple(o for o in self.outcomes if isinstance(o, NormalizedPrice))

    @property
    def errors(self) -> tuple[PollError, ...]:
        return tuple(o for o in self.outcomes if isinstance(o, PollError))
