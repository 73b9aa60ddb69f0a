"""Service clients for the LiteAPI distribution APIs."""

from .liteapi_client import LiteApiClient, UpstreamError, UpstreamTransportError

__all__ = [
    "LiteApiClient",
    "UpstreamError",
    "UpstreamTransportError",
]
