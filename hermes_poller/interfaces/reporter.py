"""Reporter protocol: where cycle outcomes are emitted."""
from datetime import datetime
from typing import Protocol

from ..models import NormalizedPrice, PollError


class Reporter(Protocol):
    """Abstract interface for emitting polling results."""

    def cycle_started(self, number: int, started_at: datetime) -> None: ...

    def report_price(self, price: NormalizedPrice) -> None: ...

    def report_error(self, error: PollError) -> None: ...
