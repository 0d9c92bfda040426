"""
Rate limiting using SlowAPI
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from event_booking.core.config import settings


def get_identifier(request: Request) -> str:
    """
    Get identifier for rate limiting

    Authenticated requests are limited per user, anonymous ones per IP.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


# Create limiter instance
limiter = Limiter(
    key_func=get_identifier,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)
