"""
Middleware components for request processing.

- Request context (request ID, IP address, user agent)
- Redis-backed rate limiting for gift opening
"""

from app.middleware.rate_limit_dependencies import rate_limit_gift_open
from app.middleware.rate_limiter import rate_limiter
from app.middleware.request_context import RequestContextMiddleware

__all__ = [
    "RequestContextMiddleware",
    "rate_limiter",
    "rate_limit_gift_open",
]
