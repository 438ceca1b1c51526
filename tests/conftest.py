"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from datetime import datetime
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from hermes_poller.config import AppConfig, HermesConfig, PollerConfig
from hermes_poller.models import NormalizedPrice, PollError, RawPriceRecord, TrackedFeed

BTC_ID = "e62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43"
ETH_ID = "ff61491a931112ddf1bd8147cd1b641375f79f5825126d665480874634fd0ace"
SOL_ID = "ef0d8b6fda2ceba41da15d4095d1da392a0d2f8ed0c6c7bc0f4cfac8c280b56d"


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_hermes_config() -> HermesConfig:
    return HermesConfig(base_url="https://hermes.example.com", timeout_seconds=5)


@pytest.fixture()
def sample_feeds() -> tuple[TrackedFeed, ...]:
    return (
        TrackedFeed(label="BTC/USD", feed_id=f"0x{BTC_ID}"),
        TrackedFeed(label="ETH/USD", feed_id=f"0x{ETH_ID}"),
        TrackedFeed(label="SOL/USD", feed_id=f"0x{SOL_ID}"),
    )


@pytest.fixture()
def sample_app_config(
    sample_hermes_config: HermesConfig, sample_feeds: tuple[TrackedFeed, ...]
) -> AppConfig:
    return AppConfig(
        hermes=sample_hermes_config,
        poller=PollerConfig(interval_seconds=0.05),
        feeds=sample_feeds,
    )


SAMPLE_YAML = textwrap.dedent("""\
    hermes:
      base_url: "https://hermes.example.com/"
      timeout_seconds: 3
    poller:
      interval_seconds: 2.5
    feeds:
      - label: BTC/USD
        feed_id: "0xaaa"
      - label: ETH/USD
        feed_id: "0xbbb"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Hermes payloads
# ---------------------------------------------------------------------------


def make_price_item(
    feed_id: str,
    price: str = "6500000000000",
    expo: int = -8,
    conf: str = "3500000000",
    publish_time: int = 1_700_000_000,
) -> dict[str, Any]:
    """One element of a ``latest_price_feeds`` response."""
    body = {"price": price, "conf": conf, "expo": expo, "publish_time": publish_time}
    return {"id": feed_id, "price": body, "ema_price": dict(body)}


def make_catalog_item(feed_id: str, symbol: str, asset_type: str, base: str) -> dict[str, Any]:
    return {
        "id": feed_id,
        "attributes": {
            "symbol": symbol,
            "asset_type": asset_type,
            "base": base,
            "quote_currency": "USD",
            "description": f"{base.upper()} / US DOLLAR",
        },
    }


@pytest.fixture()
def sample_catalog() -> list[dict[str, Any]]:
    return [
        make_catalog_item(BTC_ID, "Crypto.BTC/USD", "Crypto", "BTC"),
        make_catalog_item("d1", "Crypto.DOGE/USD", "Crypto", "DOGE"),
        make_catalog_item("e1", "FX.EUR/USD", "FX", "EUR"),
        make_catalog_item("a1", "Equity.US.AAPL/USD", "Equity", "AAPL"),
    ]


def mock_session(
    data: Any = None,
    status: int = 200,
    get_error: Exception | None = None,
    json_error: Exception | None = None,
) -> AsyncMock:
    """Create a mock aiohttp session whose ``get`` yields the given response."""
    mock_response = AsyncMock()
    mock_response.status = status
    if json_error:
        mock_response.json = AsyncMock(side_effect=json_error)
    else:
        mock_response.json = AsyncMock(return_value=data)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    session = AsyncMock()
    session.closed = False
    if get_error:
        session.get = MagicMock(side_effect=get_error)
    else:
        session.get = MagicMock(return_value=mock_response)
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)
    return session


# ---------------------------------------------------------------------------
# Scheduler collaborators
# ---------------------------------------------------------------------------


def raw_record(feed_id: str, mantissa: str = "6500000000000", exponent: int = -8) -> RawPriceRecord:
    return RawPriceRecord(
        feed_id=feed_id,
        mantissa=mantissa,
        exponent=exponent,
        confidence="100",
        publish_time=1_700_000_000,
    )


class RecordingReporter:
    """Reporter that keeps every emitted event in order."""

    def __init__(self, on_cycle_done: Callable[[int], None] | None = None) -> None:
        self.events: list[tuple[str, Any]] = []
        self.cycle_numbers: list[int] = []
        self._on_cycle_done = on_cycle_done
        self._pending = 0
        self._expected = 0

    def expect(self, feeds_per_cycle: int) -> None:
        self._expected = feeds_per_cycle

    def cycle_started(self, number: int, started_at: datetime) -> None:
        self.cycle_numbers.append(number)
        self.events.append(("cycle", number))
        self._pending = self._expected

    def _outcome(self) -> None:
        self._pending -= 1
        if self._pending == 0 and self._on_cycle_done is not None:
            self._on_cycle_done(self.cycle_numbers[-1])

    def report_price(self, price: NormalizedPrice) -> None:
        self.events.append(("price", price.label))
        self._outcome()

    def report_error(self, error: PollError) -> None:
        self.events.append(("error", error.label))
        self._outcome()

    @property
    def labels(self) -> list[str]:
        return [label for kind, label in self.events if kind != "cycle"]


# ---------------------------------------------------------------------------
# Helper fixtures (tests/ is not a package, so helpers are shared this way)
# ---------------------------------------------------------------------------


@pytest.fixture()
def price_item() -> Callable[..., dict[str, Any]]:
    return make_price_item


@pytest.fixture()
def session_factory() -> Callable[..., AsyncMock]:
    return mock_session


@pytest.fixture()
def record_factory() -> Callable[..., RawPriceRecord]:
    return raw_record


@pytest.fixture()
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture()
def feed_ids() -> dict[str, str]:
    return {"BTC": BTC_ID, "ETH": ETH_ID, "SOL": SOL_ID}


@pytest.fixture()
def reporter_cls() -> type[RecordingReporter]:
    return RecordingReporter
