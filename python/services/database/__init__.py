"""
Database services package.

Only connection management lives here. All SQL is in repositories/.
"""

from .base_client import BaseClient


class PostgresClient(BaseClient):
    """Application-wide PostgreSQL client."""
    pass


db_client = PostgresClient()

__all__ = [
    'PostgresClient',
    'db_client',
    'BaseClient',
]
