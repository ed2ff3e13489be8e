"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. The pool is created lazily on first
use and reused for the rest of the process; FastAPI closes it on shutdown
(see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import settings

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None
# Concurrent first requests must not create two pools. Created with the pool
# (no await in between) and dropped on close, so it belongs to one event loop.
_pool_lock: asyncio.Lock | None = None


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = settings.env_str("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def init_pool() -> asyncpg.Pool:
    global _pool, _pool_lock
    if _pool is not None:
        return _pool
    if _pool_lock is None:
        _pool_lock = asyncio.Lock()
    async with _pool_lock:
        if _pool is None:
            _pool = await asyncpg.create_pool(
                dsn=database_url(),
                min_size=settings.env_int("DB_POOL_MIN_SIZE", 1),
                max_size=settings.env_int("DB_POOL_MAX_SIZE", 5),
                command_timeout=settings.env_int("DB_COMMAND_TIMEOUT", 30),
            )
            logger.info("db_pool_created")
    return _pool


async def close_pool() -> None:
    global _pool, _pool_lock
    _pool_lock = None
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


async def pool() -> asyncpg.Pool:
    return await init_pool()


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await (await pool()).fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None

