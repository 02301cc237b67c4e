"""
Domain error taxonomy.

Every error the application layer raises on purpose derives from
GatewayError. The HTTP entrypoint maps each subclass to a status code;
nothing below the entrypoint knows about HTTP.
"""

from typing import Optional


class GatewayError(Exception):
    code = "GATEWAY_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(GatewayError):
    """Missing or malformed input supplied by the caller."""

    code = "INVALID_REQUEST"


class UpstreamError(GatewayError):
    """A market-data or language-model provider failed or rejected the call."""

    code = "UPSTREAM_UNAVAILABLE"

    def __init__(self, message: str, symbol: Optional[str] = None) -> None:
        super().__init__(message)
        self.symbol = symbol


class RateLimitedError(UpstreamError):
    """The provider answered with an explicit rate-limit (HTTP 429 equivalent)."""

    code = "RATE_LIMITED"


class NotConfiguredError(GatewayError):
    """An optional collaborator (e.g. the document store) is not configured."""

    code = "NOT_CONFIGURED"
