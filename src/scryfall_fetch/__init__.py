"""scryfall_fetch: rate-limited, paginated access to the Scryfall API.

Every request goes through a rate gate (a simple Throttler or a token bucket
Limiter shared between threads), and list endpoints can be walked lazily
page by page or collected eagerly.
"""

__version__ = "0.1.0"

from .client import GatedClient, GatedRequest, RateLimit, build_client
from .errors import (
    ApiError,
    ApiErrorPayload,
    DecodeError,
    LimiterDisconnected,
    ScryfallError,
    TransportError,
)
from .listing import ListIter, ListUri, ScryfallList
from .rate_limiter import Limiter, LimiterHandle, Throttler, TokenBucket
from .uri import Uri

__all__ = [
    # Rate limiting
    "Limiter",
    "LimiterHandle",
    "Throttler",
    "TokenBucket",
    # HTTP
    "GatedClient",
    "GatedRequest",
    "RateLimit",
    "build_client",
    # Links and lists
    "ListIter",
    "ListUri",
    "ScryfallList",
    "Uri",
    # Errors
    "ApiError",
    "ApiErrorPayload",
    "DecodeError",
    "LimiterDisconnected",
    "ScryfallError",
    "TransportError",
]
