"""
Rate Limiting for FastAPI

Protects the credential endpoints against brute force attempts.
"""

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from docflow.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=settings.rate_limit_enabled,
)


def configure_rate_limiting(app) -> None:
    """
    Configure rate limiting for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
