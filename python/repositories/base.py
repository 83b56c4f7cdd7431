"""
Base repository with common functionality.
"""

from datetime import time
from decimal import Decimal
from typing import Optional, List, Dict, Any, Iterable
from uuid import UUID

import asyncpg

from core.exceptions import ConflictError, DatabaseError, ValidationError
from core.logging import get_logger

logger = get_logger(__name__)


def normalize_value(value: Any) -> Any:
    """Convert driver types into JSON-friendly primitives."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, list):
        return [normalize_value(v) for v in value]
    return value


def normalize_row(row) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return {key: normalize_value(value) for key, value in dict(row).items()}


class BaseRepository:
    """
    Base repository providing common database operations.

    Subclasses should:
    - Set `table_name` class attribute
    - Implement domain-specific methods

    Every method accepts an optional `conn` so it can take part in a
    transaction opened with `db.transaction()`.
    """

    table_name: str = None
    entity_name: str = None

    def __init__(self, db_client):
        """
        Initialize repository.

        Args:
            db_client: PostgresClient instance (from services.database)
        """
        self.db = db_client
        self.logger = get_logger(f"repo.{self.__class__.__name__}")

    # ============================================================
    # Query helpers
    # ============================================================

    def _executor(self, conn=None):
        return conn if conn is not None else self.db

    async def _fetch(self, query: str, *args, conn=None, operation: str = "fetch") -> List[Dict[str, Any]]:
        try:
            rows = await self._executor(conn).fetch(query, *args)
        except (asyncpg.PostgresError, ValueError) as e:
            self._handle_error(operation, e)
        return [normalize_row(row) for row in rows]

    async def _fetchrow(self, query: str, *args, conn=None, operation: str = "fetchrow") -> Optional[Dict[str, Any]]:
        try:
            row = await self._executor(conn).fetchrow(query, *args)
        except (asyncpg.PostgresError, ValueError) as e:
            self._handle_error(operation, e)
        return normalize_row(row)

    async def _fetchval(self, query: str, *args, conn=None, operation: str = "fetchval") -> Any:
        try:
            value = await self._executor(conn).fetchval(query, *args)
        except (asyncpg.PostgresError, ValueError) as e:
            self._handle_error(operation, e)
        return normalize_value(value)

    async def _execute(self, query: str, *args, conn=None, operation: str = "execute") -> str:
        try:
            return await self._executor(conn).execute(query, *args)
        except (asyncpg.PostgresError, ValueError) as e:
            self._handle_error(operation, e)

    # ============================================================
    # Generic CRUD Operations
    # ============================================================

    async def get_by_id(self, id: str, conn=None) -> Optional[Dict[str, Any]]:
        """Get single record by ID, or None."""
        return await self._fetchrow(
            f"SELECT * FROM {self.table_name} WHERE id = $1",
            id,
            conn=conn,
            operation="get_by_id",
        )

    async def insert(self, data: Dict[str, Any], conn=None) -> Dict[str, Any]:
        """Insert a row built from `data` and return it."""
        columns = list(data.keys())
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        query = (
            f"INSERT INTO {self.table_name} ({', '.join(columns)}) "
            f"VALUES ({placeholders}) RETURNING *"
        )
        row = await self._fetchrow(query, *data.values(), conn=conn, operation="insert")
        if row is None:
            raise DatabaseError("Insert returned no data", operation=f"{self.table_name}.insert")
        return row

    async def update(
        self,
        id: str,
        data: Dict[str, Any],
        conn=None,
        allowed: Iterable[str] = None,
        touch: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Partial update: keys with a None value are left untouched.

        Args:
            id: Record ID
            data: Column values
            allowed: Optional whitelist of updatable columns
            touch: Also stamp updated_at = NOW()

        Returns:
            Updated row, or None when the record does not exist
        """
        fields = {
            key: value for key, value in data.items()
            if value is not None and (allowed is None or key in allowed)
        }
        if not fields:
            return await self.get_by_id(id, conn=conn)

        assignments = [f"{key} = ${i}" for i, key in enumerate(fields.keys(), start=2)]
        if touch:
            assignments.append("updated_at = NOW()")
        query = (
            f"UPDATE {self.table_name} SET {', '.join(assignments)} "
            f"WHERE id = $1 RETURNING *"
        )
        return await self._fetchrow(query, id, *fields.values(), conn=conn, operation="update")

    async def delete(self, id: str, conn=None) -> bool:
        """Delete record by ID."""
        result = await self._execute(
            f"DELETE FROM {self.table_name} WHERE id = $1",
            id,
            conn=conn,
            operation="delete",
        )
        return result is not None and not result.endswith(" 0")

    # ============================================================
    # Helper Methods
    # ============================================================

    def _handle_error(self, operation: str, error: Exception):
        """
        Handle database error with logging.
        """
        if isinstance(error, asyncpg.UniqueViolationError):
            raise ConflictError(f"{self.entity_name or 'Record'} already exists")
        if isinstance(error, (asyncpg.DataError, ValueError)):
            raise ValidationError(f"Invalid input: {error}")
        self.logger.error(f"{operation} failed: {error}")
        raise DatabaseError(str(error), operation=f"{self.table_name}.{operation}")
