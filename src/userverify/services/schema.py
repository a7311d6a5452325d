"""Schema inspection used to gate verification on compliant tables."""

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


def _column_names(sync_conn: Connection, table_name: str) -> frozenset[str]:
    inspector = inspect(sync_conn)
    if not inspector.has_table(table_name):
        return frozenset()
    return frozenset(column["name"] for column in inspector.get_columns(table_name))


class SchemaInspector:
    """Reports which columns a table has, caching per table."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._columns: dict[str, frozenset[str]] = {}

    async def get_columns(self, table_name: str) -> frozenset[str]:
        """Get the column names of a table (empty if the table does not exist)."""
        if table_name not in self._columns:
            conn = await self.session.connection()
            columns = await conn.run_sync(_column_names, table_name)
            if not columns:
                logger.warning(f"Table {table_name!r} not found or has no columns")
            self._columns[table_name] = columns
        return self._columns[table_name]

    async def has_column(self, table_name: str, column_name: str) -> bool:
        """Check if the given table has the given column."""
        return column_name in await self.get_columns(table_name)

    def clear_cache(self) -> None:
        self._columns.clear()
