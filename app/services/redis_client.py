# app/services/redis_client.py
import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from app.config import settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class FastRedisClient:
    """Pooled async Redis client. Optional: unset REDIS_URL leaves it uninitialized."""

    def __init__(self):
        self.pool = None
        self.client = None
        self._initialized = False

    @property
    def configured(self) -> bool:
        return bool(settings.REDIS_URL)

    async def initialize(self):
        """Initialize connection pool on startup"""
        if self._initialized:
            return

        if not self.configured:
            logger.info("REDIS_URL not set, Redis features disabled")
            return

        try:
            self.pool = ConnectionPool.from_url(
                settings.REDIS_URL,
                max_connections=20,
                socket_connect_timeout=5,
                socket_timeout=2,
                health_check_interval=30,
                decode_responses=True,
            )

            self.client = redis.Redis(connection_pool=self.pool)

            result = await self.client.ping()
            logger.info("Redis ping successful", result=result)

            self._initialized = True
            logger.info("Redis client initialized successfully", max_connections=20)

        except Exception as e:
            logger.error("Failed to initialize Redis client", error=str(e))
            self._initialized = False
            self.client = None
            raise RuntimeError("Redis initialization failed") from e

    async def close(self):
        """Clean shutdown"""
        try:
            if self.client:
                await self.client.aclose()
            if self.pool:
                await self.pool.disconnect()
            self._initialized = False
            self.client = None
            logger.info("Redis client closed")
        except Exception as e:
            logger.error("Error closing Redis client", error=str(e))

    async def ping(self) -> bool:
        """Test Redis connection"""
        if not self._initialized:
            return False
        try:
            return bool(await self.client.ping())
        except Exception as e:
            logger.error("Redis ping failed", error=str(e))
            return False


# Global instance
fast_redis = FastRedisClient()
