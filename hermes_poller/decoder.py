"""Scaled fixed-point price decoding — no I/O."""
from __future__ import annotations

import math
import re

from .errors import MalformedMantissaError, PriceOverflowError
from .models import NormalizedPrice, RawPriceRecord

# int() also accepts whitespace, underscores and non-ASCII digits.
_MANTISSA_RE = re.compile(r"[+-]?[0-9]+")

# Real feeds carry at most ~20 digits; int() refuses very long literals anyway.
MAX_MANTISSA_DIGITS = 1000

# Decimal magnitudes a float can hold: max ~1.8e308, min subnormal ~4.9e-324.
_MAX_MAGNITUDE = 308
_MIN_MAGNITUDE = -325


def parse_mantissa(mantissa: str) -> int:
    """Parse a base-10 integer literal into an arbitrary-precision int."""
    if not isinstance(mantissa, str) or not _MANTISSA_RE.fullmatch(mantissa):
        raise MalformedMantissaError(mantissa)
    if len(mantissa.lstrip("+-")) > MAX_MANTISSA_DIGITS:
        raise MalformedMantissaError(mantissa)
    return int(mantissa)


def scale(mantissa: int, exponent: int) -> float:
    """Return ``mantissa * 10**exponent`` as a correctly rounded float.

    The decimal magnitude is checked first, so an extreme exponent costs
    nothing instead of building a huge power of ten.

    Raises:
        OverflowError: if the result does not fit a float.
    """
    if mantissa == 0:
        return 0.0

    # |result| lies in [10**magnitude, 10**(magnitude + 1))
    magnitude = len(str(abs(mantissa))) - 1 + exponent
    if magnitude > _MAX_MAGNITUDE:
        raise OverflowError(f"10**{magnitude} exceeds the float range")
    if magnitude < _MIN_MAGNITUDE:
        return math.copysign(0.0, mantissa)

    if exponent < 0:
        return mantissa / 10 ** (-exponent)
    return float(mantissa * 10**exponent)


def decode(record: RawPriceRecord, label: str | None = None) -> NormalizedPrice:
    """Convert a raw Hermes price record into a real-valued price.

    Args:
        record: Raw record as returned by the feed client.
        label: Human-readable name for the feed. Defaults to the feed id.

    Raises:
        MalformedMantissaError: mantissa is not an integer literal.
        PriceOverflowError: scaled value is not a finite float.
    """
    mantissa = parse_mantissa(record.mantissa)

    try:
        value = scale(mantissa, record.exponent)
    except OverflowError as e:
        raise PriceOverflowError(record.mantissa, record.exponent) from e

    if not math.isfinite(value):
        raise PriceOverflowError(record.mantissa, record.exponent)

    return NormalizedPrice(
        feed_id=record.feed_id,
        label=label if label is not None else record.feed_id,
        value=value,
        confidence=record.confidence,
        publish_time=record.publish_time,
    )
