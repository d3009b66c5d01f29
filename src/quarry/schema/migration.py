"""``CREATE TABLE`` statements from table declarations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from quarry.core.errors import SchemaError
from quarry.schema.columns import IntegerColumn

if TYPE_CHECKING:
    from quarry.schema.table import BoundDbTable

EOL_CHARS = ("", "\n", "\r\n")


class Migration:
    """
    Renders the DDL of a bound table for its database's driver.

    Examples:
        >>> print(users.migration().create_if_not_exists().create_table())
        CREATE TABLE IF NOT EXISTS `users` (
          `id` integer PRIMARY KEY AUTOINCREMENT NOT NULL,
          `email` TEXT UNIQUE NOT NULL
        );
    """

    def __init__(self, table: BoundDbTable):
        self.table = table
        self._drop_existing = False
        self._create_if_not_exists = False
        self._eol = "\n"

    def drop_existing(self) -> Migration:
        """Prefix the statement with ``DROP TABLE IF EXISTS``."""
        self._drop_existing = True
        return self

    def create_if_not_exists(self) -> Migration:
        self._create_if_not_exists = True
        return self

    def eol(self, char: str) -> Migration:
        if char not in EOL_CHARS:
            raise SchemaError("Invalid EOL character")
        self._eol = char
        return self

    def create_table(self) -> str:
        dialect = self.table.db.dialect
        table = self.table.table
        q = dialect.quote
        eol = self._eol

        statement = ""
        if self._drop_existing:
            statement += f"DROP TABLE IF EXISTS {q(table.name)};{eol}"

        statement += "CREATE TABLE"
        if self._create_if_not_exists:
            statement += " IF NOT EXISTS"
        statement += f" {q(table.name)} ({eol}"

        lines: list[str] = []
        unique_keys: list[str] = []
        primary_key = table.columns.primary
        for column in table.columns:
            line = f"  {q(column.name)} {column.column_sql(dialect)}"
            is_auto_increment = isinstance(column, IntegerColumn) and column.is_auto_increment

            if column.attrs.get("unsigned") == 1 and dialect.supports_unsigned:
                # SQLite auto-increment columns cannot be unsigned
                if not (is_auto_increment and dialect.name == "sqlite"):
                    line += " UNSIGNED"

            if column.name == primary_key:
                line += " PRIMARY KEY"

            if is_auto_increment:
                line += dialect.auto_increment()

            if "unique" in column.attrs:
                if dialect.inline_unique:
                    line += " UNIQUE"
                else:
                    unique_keys.append(column.name)

            if dialect.supports_charset:
                if "charset" in column.attrs:
                    line += " CHARACTER SET " + column.attrs["charset"]
                if "collation" in column.attrs:
                    line += " COLLATE " + column.attrs["collation"]

            if not column.is_nullable:
                line += " NOT NULL"

            default = column.default_value
            if default is None:
                if column.is_nullable:
                    line += " default NULL"
            elif isinstance(default, str):
                line += " default '{}'".format(default.replace("'", "''"))
            else:
                line += f" default {default}"

            lines.append(line)

        for name in unique_keys:
            lines.append(f"  UNIQUE KEY ({q(name)})")

        for constraint in table.constraints:
            sql = constraint.constraint_sql(dialect)
            if sql:
                lines.append(f"  {sql}")

        statement += ("," + eol).join(lines) + eol
        statement += dialect.table_suffix(table.engine)
        return statement


__all__ = ["Migration"]
