# app/db/helpers.py
"""
Database helper functions for common patterns.
Reduces boilerplate in the repository layer.

Every helper runs on a connection the caller already holds, so repositories
decide whether a group of statements shares a connection or a transaction.
"""

import asyncio
import functools
from typing import Any

import psycopg

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class DatabaseError(Exception):
    """Custom exception for database operations."""

    def __init__(self, message: str, operation: str = "unknown", recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


async def fetch_one(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection
) -> dict[str, Any] | None:
    """
    Execute query and return single row as dict.

    Args:
        query: SQL query with %s placeholders
        params: Query parameters
        connection: Connection checked out from the pool

    Returns:
        Dict with row data or None if no results
    """
    try:
        async with connection.cursor() as cur:
            await cur.execute(query, params)
            row = await cur.fetchone()
            return row if row else None

    except psycopg.Error as e:
        logger.error("Database fetch_one error", query=query[:100], error=str(e))
        raise DatabaseError(f"Query failed: {e}", operation="fetch_one") from e


async def fetch_all(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection
) -> list[dict[str, Any]]:
    """
    Execute query and return all rows as list of dicts.

    Args:
        query: SQL query with %s placeholders
        params: Query parameters
        connection: Connection checked out from the pool

    Returns:
        List of dicts with row data
    """
    try:
        async with connection.cursor() as cur:
            await cur.execute(query, params)
            return await cur.fetchall()

    except psycopg.Error as e:
        logger.error("Database fetch_all error", query=query[:100], error=str(e))
        raise DatabaseError(f"Query failed: {e}", operation="fetch_all") from e


async def execute_query(
    query: str, params: tuple = (), *, connection: psycopg.AsyncConnection
) -> int:
    """Execute query and return number of affected rows."""
    try:
        cursor = await connection.execute(query, params)
        return cursor.rowcount

    except psycopg.Error as e:
        logger.error("Database execute error", query=query[:100], error=str(e))
        raise DatabaseError(f"Query failed: {e}", operation="execute") from e


def with_db_retry(max_retries: int = 3, base_delay: float = 0.1):
    """
    Decorator to retry database operations on temporary failures.

    Retries only when the DatabaseError was caused by psycopg.OperationalError
    (connection drops, timeouts). Integrity and data errors fail immediately.

    Args:
        max_retries: Maximum number of retry attempts
        base_delay: Base delay between retries (exponential backoff)
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)

                except DatabaseError as e:
                    transient = isinstance(e.__cause__, psycopg.OperationalError)
                    if not transient or attempt >= max_retries:
                        if transient:
                            logger.error(
                                "Database operation failed after all retries",
                                operation=func.__name__,
                                attempts=attempt + 1,
                                error=str(e),
                            )
                        e.recoverable = False
                        raise

                    delay = base_delay * (2**attempt)
                    logger.warning(
                        "Database operation failed, retrying",
                        operation=func.__name__,
                        attempt=attempt + 1,
                        max_retries=max_retries,
                        delay=delay,
                        error=str(e),
                    )
                    attempt += 1
                    await asyncio.sleep(delay)

        return wrapper

    return decorator
