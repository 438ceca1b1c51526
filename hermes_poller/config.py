"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError
from .models import TrackedFeed

logger = logging.getLogger(__name__)

DEFAULT_FEEDS: tuple[TrackedFeed, ...] = (
    TrackedFeed(
        label="BTC/USD",
        feed_id="0xe62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43",
    ),
    TrackedFeed(
        label="ETH/USD",
        feed_id="0xff61491a931112ddf1bd8147cd1b641375f79f5825126d665480874634fd0ace",
    ),
    TrackedFeed(
        label="SOL/USD",
        feed_id="0xef0d8b6fda2ceba41da15d4095d1da392a0d2f8ed0c6c7bc0f4cfac8c280b56d",
    ),
)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HermesConfig:
    base_url: str = "https://hermes.pyth.network"
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class PollerConfig:
    interval_seconds: float = 1.0


@dataclass(frozen=True)
class AppConfig:
    hermes: HermesConfig = field(default_factory=HermesConfig)
    poller: PollerConfig = field(default_factory=PollerConfig)
    feeds: tuple[TrackedFeed, ...] = DEFAULT_FEEDS


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _section(raw: dict[str, Any], name: str, kind: type) -> Any:
    """Return a top-level section; an empty (null) section counts as absent."""
    value = raw.get(name)
    if value is None:
        return kind()
    if not isinstance(value, kind):
        raise ConfigurationError(
            f"'{name}' must be a {'mapping' if kind is dict else 'list'}, "
            f"got {type(value).__name__}"
        )
    return value


def _as_float(raw: dict[str, Any], key: str, default: float) -> float:
    value = raw.get(key, default)
    if isinstance(value, bool):
        raise ConfigurationError(f"'{key}' must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"'{key}' must be a number, got {value!r}") from e


def _build_hermes(raw: dict[str, Any]) -> HermesConfig:
    return HermesConfig(
        base_url=str(raw.get("base_url", HermesConfig.base_url)).rstrip("/"),
        timeout_seconds=_as_float(raw, "timeout_seconds", HermesConfig.timeout_seconds),
    )


def _build_poller(raw: dict[str, Any]) -> PollerConfig:
    return PollerConfig(
        interval_seconds=_as_float(raw, "interval_seconds", PollerConfig.interval_seconds),
    )


def _build_feeds(raw: list[dict[str, Any]]) -> tuple[TrackedFeed, ...]:
    feeds: list[TrackedFeed] = []
    for f in raw:
        if not isinstance(f, dict):
            raise ConfigurationError(
                f"Each feed must be a mapping with label and feed_id, got {f!r}"
            )
        feeds.append(
            TrackedFeed(
                label=str(f.get("label", "")),
                feed_id=str(f.get("feed_id", "")),
            )
        )
    return tuple(feeds)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def default_config_path() -> Path:
    """``config.yaml`` in the project root (one level up from this package)."""
    return Path(__file__).resolve().parent.parent / "config.yaml"


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. When omitted, the project-root
            ``config.yaml`` is used if present, otherwise built-in defaults.

    Raises:
        FileNotFoundError: an explicit ``config_path`` does not exist.
        ConfigurationError: the configuration is invalid.
    """
    load_dotenv()

    if config_path is None:
        config_path = default_config_path()
        if not config_path.exists():
            logger.info("No config file at %s, using built-in defaults", config_path)
            cfg = AppConfig()
            validate(cfg)
            return cfg
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Cannot parse {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        hermes=_build_hermes(_section(raw, "hermes", dict)),
        poller=_build_poller(_section(raw, "poller", dict)),
        feeds=_build_feeds(_section(raw, "feeds", list)),
    )

    validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def validate(cfg: AppConfig) -> None:
    """Raise ConfigurationError on invalid configuration."""
    if not cfg.feeds:
        raise ConfigurationError("At least one feed must be configured")

    seen: set[str] = set()
    for feed in cfg.feeds:
        if not feed.label:
            raise ConfigurationError(f"Feed '{feed.feed_id}' has no label")
        if not feed.feed_id:
            raise ConfigurationError(f"Feed '{feed.label}' has no feed_id")
        if feed.label in seen:
            raise ConfigurationError(f"Duplicate feed label '{feed.label}'")
        seen.add(feed.label)

    if not math.isfinite(cfg.poller.interval_seconds) or cfg.poller.interval_seconds <= 0:
        raise ConfigurationError("poller.interval_seconds must be a positive number")
    if not math.isfinite(cfg.hermes.timeout_seconds) or cfg.hermes.timeout_seconds <= 0:
        raise ConfigurationError("hermes.timeout_seconds must be a positive number")
    if not cfg.hermes.base_url:
        raise ConfigurationError("hermes.base_url must not be empty")
