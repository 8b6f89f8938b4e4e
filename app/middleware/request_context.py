"""
RequestContext Middleware - Adds request tracking to all requests.

Adds to request.state:
- request_id: Unique ID for request tracing
- ip_address: Client IP address (used by the gift-open rate limiter)
- user_agent: Client user agent string

The request_id is also bound into structlog's context so every log line
emitted while handling the request carries it, and is echoed back as the
X-Request-ID response header.
"""

import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Add request context to all incoming requests.

    Request.state Namespace Convention:
    - request_id, ip_address, user_agent: Set by RequestContextMiddleware
    - rate_limit_info: Set by rate limit dependencies
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        ip_address = self._extract_client_ip(request)
        request.state.ip_address = ip_address

        user_agent = request.headers.get("user-agent")
        request.state.user_agent = user_agent

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.debug(
            "Request started",
            method=request.method,
            path=request.url.path,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers["X-Request-ID"] = request_id

        return response

    def _extract_client_ip(self, request: Request) -> str | None:
        """
        Extract client IP address with proxy spoofing protection.

        X-Forwarded-For is only trusted when TRUST_X_FORWARDED_FOR is enabled
        and the direct peer is one of TRUSTED_PROXY_IPS.
        """
        direct_ip = request.client.host if request.client else None

        if not settings.TRUST_X_FORWARDED_FOR:
            return direct_ip

        if direct_ip and direct_ip in settings.TRUSTED_PROXY_IPS:
            forwarded_for = request.headers.get("x-forwarded-for")
            if forwarded_for:
                # "client, proxy1, proxy2": first entry is the original client
                return forwarded_for.split(",")[0].strip()

        return direct_ip
