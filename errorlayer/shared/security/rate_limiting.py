"""
Rate limiting configuration and setup.

Uses slowapi to enforce a default per-client limit on every route.
Exceeding a limit is reported to clients as an ApiError, so the 429
carries a fixed message in every environment.
"""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from errorlayer.domain.errors import ApiError

HTTP_429 = 429
RATE_LIMITED_MESSAGE = "Too many requests, please try again later"


def build_limiter(default_limit: str) -> Limiter:
    """Create a limiter keyed on client address with one default limit.

    The limits are enforced by SlowAPIMiddleware, so routes need no
    decorator. Each call gets its own in-memory counters.
    """
    return Limiter(key_func=get_remote_address, default_limits=[default_limit])


def rate_limited_error(exc: RateLimitExceeded) -> ApiError:
    """Translate a slowapi rejection into a client-safe ApiError."""
    return ApiError(HTTP_429, RATE_LIMITED_MESSAGE, stack=f"Rate limit exceeded: {exc.detail}")
