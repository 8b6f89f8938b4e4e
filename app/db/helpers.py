"""
Database helper functions for common patterns.
Reduces boilerplate in the repository layer.
"""

import functools
from typing import Any

import psycopg

from app.db.pool import get_db_connection
from app.errors import UnavailableError
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class DatabaseError(Exception):
    """Custom exception for database operations."""

    def __init__(
        self,
        message: str,
        operation: str = "unknown",
        recoverable: bool = True,
        constraint: str | None = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable
        self.constraint = constraint


def _wrap(e: psycopg.Error, operation: str, query: str) -> DatabaseError:
    # OperationalError covers PoolTimeout, QueryCanceled (statement_timeout) and lost connections
    recoverable = isinstance(e, psycopg.OperationalError)
    logger.error(
        f"Database {operation} error",
        query=query[:100],
        error=str(e),
        error_type=type(e).__name__,
        recoverable=recoverable,
    )
    return DatabaseError(
        f"Query failed: {e}",
        operation=operation,
        recoverable=recoverable,
        constraint=e.diag.constraint_name,
    )


async def fetch_one(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> dict[str, Any] | None:
    """
    Execute query and return single row as dict.

    Args:
        query: SQL query with %s placeholders
        params: Query parameters
        connection: Optional existing connection

    Returns:
        Dict with row data or None if no results
    """
    try:
        if connection:
            async with connection.cursor() as cur:
                await cur.execute(query, params)
                row = await cur.fetchone()
                return row if row else None
        else:
            async with await get_db_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(query, params)
                    row = await cur.fetchone()
                    return row if row else None

    except psycopg.Error as e:
        raise _wrap(e, "fetch_one", query) from e


async def fetch_all(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> list[dict[str, Any]]:
    """
    Execute query and return all rows as list of dicts.

    Args:
        query: SQL query with %s placeholders
        params: Query parameters
        connection: Optional existing connection

    Returns:
        List of dicts with row data
    """
    try:
        if connection:
            async with connection.cursor() as cur:
                await cur.execute(query, params)
                return await cur.fetchall()
        else:
            async with await get_db_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(query, params)
                    return await cur.fetchall()

    except psycopg.Error as e:
        raise _wrap(e, "fetch_all", query) from e


async def execute_query(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection | None = None
) -> int:
    """
    Execute query and return number of affected rows.

    Args:
        query: SQL query with %s placeholders
        params: Query parameters
        connection: Optional existing connection

    Returns:
        Number of affected rows
    """
    try:
        if connection:
            cursor = await connection.execute(query, params)
            return cursor.rowcount
        else:
            async with await get_db_connection() as conn:
                cursor = await conn.execute(query, params)
                return cursor.rowcount

    except psycopg.Error as e:
        raise _wrap(e, "execute", query) from e


def translate_db_errors(func):
    """
    Surface transient database failures as UnavailableError.

    Permanent failures (constraint violations, bad data) stay DatabaseError and
    end up as a 500. Nothing is retried here; retrying is the caller's call.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except DatabaseError as e:
            if e.recoverable:
                raise UnavailableError(
                    "Storage is temporarily unavailable, please retry",
                    dependency="database",
                ) from e
            raise

    return wrapper
