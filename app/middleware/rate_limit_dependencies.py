"""
Rate Limit Dependencies - per-endpoint rate limiting.

Usage:
    @router.post("/gift/open", dependencies=[Depends(rate_limit_gift_open)])
    async def open_gift(body: OpenGiftRequest):
        ...
"""

from fastapi import HTTPException, Request, status

from app.config import settings
from app.infrastructure.observability.logging import get_logger
from app.middleware.rate_limiter import rate_limiter

logger = get_logger(__name__)


async def rate_limit_gift_open(request: Request) -> None:
    """
    Limit open attempts per gift and client IP.

    The gift id is read from the JSON body; malformed bodies are left for
    request validation to reject.

    Raises:
        HTTPException: 429 if the limit is exceeded
    """
    if not settings.RATE_LIMIT_ENABLED:
        return

    try:
        body = await request.json()
    except ValueError:
        return
    gift_id = None
    if isinstance(body, dict):
        gift_id = body.get("gift_id") or body.get("giftId")
    if not gift_id:
        return

    ip_address = getattr(request.state, "ip_address", None)
    allowed, info = await rate_limiter.check_gift_open(str(gift_id), ip_address)
    request.state.rate_limit_info = info

    if not allowed:
        logger.warning(
            "Gift open rate limit exceeded",
            gift_id=str(gift_id),
            ip_address=ip_address,
            limit=info["limit"],
            retry_after=info["retry_after"],
        )
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": f"Too many attempts. Try again in {info['retry_after']} seconds.",
                "code": "rate_limit_exceeded",
                "retry_after": info["retry_after"],
            },
            headers={"Retry-After": str(info["retry_after"])},
        )
