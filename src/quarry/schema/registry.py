"""Per-database registry of bound tables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from quarry.core.errors import SchemaError, SchemaTableError
from quarry.core.events import EventRegistry
from quarry.core.logging import get_logger
from quarry.schema.table import AbstractDbTable, BoundDbTable

if TYPE_CHECKING:
    from quarry.database import Database

logger = get_logger(__name__)


class Schema:
    """
    Tables bound to one database, looked up by table name.

    Usage:
        users = db.schema.bind(UsersTable)
        assert db.schema.table("users") is users
    """

    def __init__(self, db: Database):
        self.db = db
        self._tables: dict[str, BoundDbTable] = {}

    @property
    def events(self) -> EventRegistry:
        return self.db.events

    def bind(self, table_cls: type[AbstractDbTable]) -> BoundDbTable:
        """Declare ``table_cls`` and bind it; binding the same name twice returns the first binding."""
        if not isinstance(table_cls, type) or not issubclass(table_cls, AbstractDbTable):
            raise SchemaError(f"Cannot bind {table_cls!r}; not an AbstractDbTable subclass")

        existing = self._tables.get(table_cls.name)
        if existing is not None:
            return existing

        bound = BoundDbTable(self.db, table_cls())
        self._tables[bound.name] = bound
        logger.debug("table_bound", table=bound.name, columns=len(bound.table.columns))
        return bound

    def table(self, name: str | type[AbstractDbTable]) -> BoundDbTable:
        """Bound table by name (or by declaring class).

        Raises:
            SchemaTableError: If the table was never bound.
        """
        key = name.name if isinstance(name, type) else name
        bound = self._tables.get(key)
        if bound is None:
            raise SchemaTableError(f'Table "{key}" is not bound with schema').with_context(
                table=key
            )
        return bound

    def tables(self) -> list[BoundDbTable]:
        return list(self._tables.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tables


__all__ = ["Schema"]
