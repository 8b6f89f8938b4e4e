"""
Sliding-window limiter for gift open attempts, kept in Redis.

Once a gift has unlocked, a short passcode is cheap to guess; the limiter
caps attempts per (gift, client IP) pair. Each attempt is a member of a
sorted set scored by its timestamp. One Lua script prunes, counts and adds,
so two concurrent attempts cannot both squeeze under the limit.

Redis is optional. Without it (or when it errors) the limiter either lets
requests through (RATE_LIMIT_FAIL_OPEN, the default) or refuses them.
"""

import time

from app.config import settings
from app.infrastructure.observability.logging import get_logger
from app.services.redis_client import fast_redis

logger = get_logger(__name__)

# KEYS[1] = window key; ARGV = limit, window seconds, now, member id
# Returns {allowed 0|1, attempts in window, oldest attempt timestamp or 0}
SLIDING_WINDOW_SCRIPT = """
local key = KEYS[1]
local limit = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local now = tonumber(ARGV[3])

redis.call('ZREMRANGEBYSCORE', key, 0, now - window)
local attempts = redis.call('ZCARD', key)

if attempts >= limit then
    local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
    return {0, attempts, tonumber(oldest[2] or 0)}
end

redis.call('ZADD', key, now, ARGV[4])
redis.call('EXPIRE', key, window * 2)
return {1, attempts + 1, 0}
"""


class RateLimiter:
    """
    Args:
        default_limit: Attempts allowed per window
        window_seconds: Window length
        fail_open: Allow requests when Redis is missing or failing
        redis_client: Object exposing ``.client``; defaults to the app-wide pool
    """

    def __init__(
        self,
        default_limit: int = 10,
        window_seconds: int = 900,
        fail_open: bool = True,
        redis_client=None,
    ):
        self.default_limit = default_limit
        self.window_seconds = window_seconds
        self.fail_open = fail_open
        self._redis = redis_client or fast_redis

    async def check_rate_limit(
        self,
        key: str,
        limit: int | None = None,
        window_seconds: int | None = None,
    ) -> tuple[bool, dict]:
        """
        Count one attempt against ``key``.

        Returns:
            (allowed, info) where info carries limit, remaining and, when
            blocked, retry_after in seconds.
        """
        limit = limit or self.default_limit
        window_seconds = window_seconds or self.window_seconds

        if not self._redis.client:
            return self._degraded(limit, "redis_not_initialized")

        now = int(time.time())
        try:
            allowed, attempts, oldest = await self._redis.client.eval(
                SLIDING_WINDOW_SCRIPT,
                1,
                f"ratelimit:{key}",
                limit,
                window_seconds,
                now,
                f"{now}:{time.time_ns()}",
            )
        except Exception as e:
            logger.error(
                "Rate limiter Redis error",
                error=str(e),
                error_type=type(e).__name__,
                key=key,
            )
            return self._degraded(limit, "rate_limiter_error")

        if int(allowed):
            return True, {
                "allowed": True,
                "limit": limit,
                "remaining": max(0, limit - int(attempts)),
                "retry_after": None,
                "window_seconds": window_seconds,
            }

        oldest = int(oldest or 0)
        retry_after = max(1, oldest + window_seconds - now) if oldest else window_seconds
        return False, {
            "allowed": False,
            "limit": limit,
            "remaining": 0,
            "retry_after": retry_after,
            "window_seconds": window_seconds,
        }

    async def check_gift_open(self, gift_id: str, ip_address: str | None) -> tuple[bool, dict]:
        return await self.check_rate_limit(
            key=f"gift-open:{gift_id}:{ip_address or 'unknown'}",
            limit=settings.RATE_LIMIT_OPEN_ATTEMPTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        )

    def _degraded(self, limit: int, reason: str) -> tuple[bool, dict]:
        if self.fail_open:
            logger.warning("Rate limiter unavailable, failing open", reason=reason)
            return True, {
                "allowed": True,
                "limit": limit,
                "remaining": limit,
                "retry_after": None,
                "error": reason,
            }
        return False, {
            "allowed": False,
            "limit": limit,
            "remaining": 0,
            "retry_after": self.window_seconds,
            "error": reason,
        }


# Global singleton
rate_limiter = RateLimiter(
    default_limit=settings.RATE_LIMIT_OPEN_ATTEMPTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    fail_open=settings.RATE_LIMIT_FAIL_OPEN,
)
