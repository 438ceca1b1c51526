"""Error taxonomy for decode, request and configuration failures."""
from __future__ import annotations


class PriceFeedError(Exception):
    """Base class for recoverable per-feed failures."""


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


class DecodeError(PriceFeedError):
    """A raw price record could not be turned into a real-valued price."""


class MalformedMantissaError(DecodeError):
    def __init__(self, mantissa: str) -> None:
        super().__init__(f"Malformed mantissa: {mantissa!r}")
        self.mantissa = mantissa


class PriceOverflowError(DecodeError):
    def __init__(self, mantissa: str, exponent: int) -> None:
        super().__init__(f"Price {mantissa}e{exponent} is not a finite float")
        self.mantissa = mantissa
        self.exponent = exponent


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class RequestError(PriceFeedError):
    """The price service could not be queried."""


class NetworkError(RequestError):
    """Connection failure or timeout."""


class HttpStatusError(RequestError):
    def __init__(self, status: int) -> None:
        super().__init__(f"HTTP {status}")
        self.status = status


class ResponseDecodeError(RequestError):
    """Response body is not the documented JSON shape."""


class FeedNotFoundError(PriceFeedError):
    def __init__(self, feed_id: str) -> None:
        super().__init__(f"No price data available for feed {feed_id}")
        self.feed_id = feed_id


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


class ConfigurationError(ValueError):
    """Invalid configuration; fatal at startup."""
