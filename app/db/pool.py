"""
Async Postgres pool for the process, built on psycopg_pool.

Connections come out configured for ChronoGift: dict rows, autocommit, UTC,
and a statement_timeout so a stuck query turns into QueryCanceled rather
than a hung request.
"""

import asyncio
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from app.config import settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

POOL_CLOSE_TIMEOUT = 30.0


class DatabasePoolManager:
    """Owns the AsyncConnectionPool: open, configure, probe, close."""

    def __init__(self):
        self.pool: AsyncConnectionPool | None = None
        self._initialized = False
        self._closed = False

    async def initialize(self) -> None:
        """Open the pool and prove one connection works. Called from the app lifespan."""
        if self._initialized:
            logger.warning("Database pool already initialized")
            return
        if self._closed:
            raise RuntimeError("Cannot reinitialize closed pool")

        pool_config = settings.get_db_pool_config()
        logger.info(
            "Opening database pool",
            min_size=pool_config["min_size"],
            max_size=pool_config["max_size"],
            environment=settings.environment,
        )

        try:
            self.pool = AsyncConnectionPool(
                conninfo=settings.DATABASE_URL,
                open=False,
                check=AsyncConnectionPool.check_connection,
                configure=self._configure_connection,
                **pool_config,
            )
            await self.pool.open()
            await self.pool.wait()
            self._initialized = True
            await self._select_one()
        except Exception as e:
            logger.error("Failed to initialize database pool", error=str(e))
            self._initialized = False
            if self.pool:
                try:
                    await self.pool.close()
                except Exception as cleanup_error:
                    logger.warning("Error closing half-open pool", error=str(cleanup_error))
                self.pool = None
            raise RuntimeError(f"Database pool initialization failed: {e}") from e

        logger.info("Database pool ready", timeout=pool_config["timeout"])

    async def _configure_connection(self, conn: psycopg.AsyncConnection) -> None:
        conn.row_factory = dict_row
        # Autocommit; multi-statement work goes through transaction()
        await conn.set_autocommit(True)
        await conn.execute(
            sql.SQL("SET application_name = {}").format(
                sql.Literal(f"chronogift-{settings.environment}")
            )
        )
        await conn.execute("SET timezone = 'UTC'")
        await conn.execute(
            sql.SQL("SET statement_timeout = {}").format(
                sql.Literal(settings.DB_STATEMENT_TIMEOUT_MS)
            )
        )

    async def _select_one(self) -> None:
        async with self.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1 AS ok")
                row = await cur.fetchone()
        if not row or row["ok"] != 1:
            raise RuntimeError(f"Database probe returned {row!r}")

    async def close(self) -> None:
        if not self._initialized or self._closed:
            return

        logger.info("Closing database connection pool")
        try:
            if self.pool:
                await asyncio.wait_for(self.pool.close(), timeout=POOL_CLOSE_TIMEOUT)
        except TimeoutError:
            logger.warning("Database pool close timed out, forcing shutdown")
        finally:
            self._initialized = False
            self._closed = True

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """
        Borrow a connection.

        Usage:
            async with db_pool.connection() as conn:
                await conn.execute("SELECT 1")
        """
        if not self._initialized:
            raise RuntimeError("Database pool not initialized. Call initialize() first.")
        if self._closed:
            raise RuntimeError("Database pool is closed")

        async with self.pool.connection() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """Borrow a connection inside a transaction; commit on exit, rollback on error."""
        async with self.connection() as conn:
            async with conn.transaction():
                yield conn

    async def health_check(self) -> dict[str, Any]:
        """Probe latency and pool occupancy for /readyz."""
        if not self._initialized:
            return {"healthy": False, "error": "Pool not initialized", "service": "database_pool"}
        if self._closed:
            return {"healthy": False, "error": "Pool is closed", "service": "database_pool"}

        try:
            stats = self.pool.get_stats()
            started = time.time()
            await self._select_one()
            connection_time_ms = round((time.time() - started) * 1000, 2)
        except Exception as e:
            logger.error("Database pool health check failed", error=str(e))
            return {
                "healthy": False,
                "service": "database_pool",
                "error": str(e),
                "error_type": type(e).__name__,
            }

        pool_size = stats.get("pool_size", 0)
        pool_available = stats.get("pool_available", 0)
        in_use = (pool_size - pool_available) / pool_size * 100 if pool_size else 0

        return {
            # A saturated pool means requests are about to hit PoolTimeout
            "healthy": in_use < 90,
            "service": "database_pool",
            "connection_time_ms": connection_time_ms,
            "pool_stats": {
                "pool_size": pool_size,
                "pool_available": pool_available,
                "pool_utilization_percent": round(in_use, 2),
                "requests_waiting": stats.get("requests_waiting", 0),
            },
        }


# Global pool instance
db_pool = DatabasePoolManager()


async def get_db_connection():
    """Connection context manager from the shared pool (used by app.db.helpers)."""
    return db_pool.connection()


async def db_health_check() -> dict[str, Any]:
    return await db_pool.health_check()
