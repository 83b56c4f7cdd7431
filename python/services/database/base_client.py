"""Base client with connection pool management."""

import json
from contextlib import asynccontextmanager
from typing import List, Dict, Optional, Any, AsyncIterator

import asyncpg

from core.config import settings
from core.exceptions import ConnectionError
from core.logging import get_logger

logger = get_logger(__name__)


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Register JSON codecs so JSONB columns round-trip as dicts."""
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


class BaseClient:
    """Base database client with connection pooling."""

    def __init__(self, database_url: str = None):
        self.pool: Optional[asyncpg.Pool] = None
        self.database_url = database_url or settings.database_url

        if not self.database_url:
            raise ValueError("DATABASE_URL environment variable is required")

        logger.info("PostgresClient initialized (pool will be created on connect)")

    async def connect(self):
        """Initialize connection pool"""
        if not self.pool:
            try:
                self.pool = await asyncpg.create_pool(
                    self.database_url,
                    min_size=settings.db_pool_min_size,
                    max_size=settings.db_pool_max_size,
                    command_timeout=60,
                    init=_init_connection,
                )
            except (OSError, asyncpg.PostgresError) as e:
                logger.error(f"Failed to create connection pool: {e}")
                raise ConnectionError()
            logger.info("Connection pool initialized")

    async def disconnect(self):
        """Close connection pool"""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Connection pool closed")

    @property
    def is_connected(self) -> bool:
        return self.pool is not None

    async def execute(self, query: str, *args) -> str:
        """Execute INSERT/UPDATE/DELETE query"""
        async with self.pool.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args) -> List[Dict[str, Any]]:
        """Fetch multiple rows"""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, *args)
            return [dict(row) for row in rows]

    async def fetchrow(self, query: str, *args) -> Optional[Dict[str, Any]]:
        """Fetch single row"""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, *args)
            return dict(row) if row else None

    async def fetchval(self, query: str, *args) -> Any:
        """Fetch single value"""
        async with self.pool.acquire() as conn:
            return await conn.fetchval(query, *args)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Acquire a connection and run the block inside a transaction.

        Usage:
            async with db.transaction() as conn:
                await repo.insert(data, conn=conn)

        Commits on normal exit, rolls back if the block raises.
        """
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield conn
