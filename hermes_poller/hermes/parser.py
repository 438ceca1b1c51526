"""Pure parsing and filtering functions for Hermes responses — no I/O."""
from __future__ import annotations

from typing import Any, Iterable

from ..errors import ResponseDecodeError
from ..models import FeedDescriptor, RawPriceRecord


def normalize_feed_id(feed_id: str) -> str:
    """Canonical form of a feed id.

    Hermes accepts ids with a ``0x`` prefix but returns them without one.

    Examples:
        "0xE62DF6C8..." → "e62df6c8..."
        "e62df6c8..." → "e62df6c8..."
    """
    feed_id = feed_id.strip().lower()
    if feed_id.startswith("0x"):
        feed_id = feed_id[2:]
    return feed_id


def _require_list(data: Any, what: str) -> list[Any]:
    if not isinstance(data, list):
        raise ResponseDecodeError(
            f"Expected a JSON array of {what}, got {type(data).__name__}"
        )
    return data


def _as_int(value: Any, field: str, feed_id: str) -> int:
    """Accept JSON integers and integer strings; reject bools and fractions."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ResponseDecodeError(f"Malformed price record {feed_id}: {field} {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ResponseDecodeError(f"Malformed price record {feed_id}: {field} {value!r}") from e


def parse_price_record(item: Any) -> RawPriceRecord:
    """Parse one ``{id, price: {price, conf, expo, publish_time}}`` object."""
    try:
        feed_id = item["id"]
        price_data = item["price"]
        mantissa = price_data["price"]
        exponent = price_data["expo"]
        confidence = price_data["conf"]
        publish_time = price_data["publish_time"]
    except (KeyError, TypeError) as e:
        raise ResponseDecodeError(f"Malformed price record: missing {e}") from e

    if not isinstance(feed_id, str):
        raise ResponseDecodeError(f"Malformed price record: id {feed_id!r}")

    exponent = _as_int(exponent, "expo", feed_id)
    publish_time = _as_int(publish_time, "publish_time", feed_id)

    # The mantissa stays text; the decoder validates it.
    return RawPriceRecord(
        feed_id=normalize_feed_id(feed_id),
        mantissa=str(mantissa),
        exponent=exponent,
        confidence=str(confidence),
        publish_time=publish_time,
    )


def parse_price_records(data: Any) -> dict[str, RawPriceRecord]:
    """Parse a ``latest_price_feeds`` response into records keyed by feed id."""
    records: dict[str, RawPriceRecord] = {}
    for item in _require_list(data, "price feeds"):
        record = parse_price_record(item)
        records[record.feed_id] = record
    return records


def parse_feed_descriptor(item: Any) -> FeedDescriptor:
    """Parse one ``{id, attributes: {...}}`` catalog entry."""
    if not isinstance(item, dict) or not isinstance(item.get("id"), str):
        raise ResponseDecodeError(f"Malformed catalog entry: {item!r}")

    attributes = item.get("attributes") or {}
    if not isinstance(attributes, dict):
        raise ResponseDecodeError(f"Malformed attributes for feed {item['id']}")

    return FeedDescriptor(
        id=normalize_feed_id(item["id"]),
        symbol=str(attributes.get("symbol", "")),
        asset_type=str(attributes.get("asset_type", "")),
        base=str(attributes.get("base", "")),
        quote_currency=str(attributes.get("quote_currency", "")),
        description=str(attributes.get("description", "")),
    )


def parse_feed_descriptors(data: Any) -> list[FeedDescriptor]:
    return [parse_feed_descriptor(item) for item in _require_list(data, "feeds")]


def match_query(
    descriptors: Iterable[FeedDescriptor], substring: str
) -> list[FeedDescriptor]:
    """Case-insensitive substring match against symbol or base asset."""
    needle = substring.casefold()
    return [
        d
        for d in descriptors
        if needle in d.symbol.casefold() or needle in d.base.casefold()
    ]


def match_asset_type(
    descriptors: Iterable[FeedDescriptor], asset_type: str
) -> list[FeedDescriptor]:
    """Case-insensitive asset-type match, e.g. "crypto" or "Crypto"."""
    wanted = asset_type.casefold()
    return [d for d in descriptors if d.asset_type.casefold() == wanted]
