"""Table-level constraints (composite unique keys, foreign keys)."""

from __future__ import annotations

from collections.abc import Iterator

from quarry.core.dialect import Dialect


class TableConstraint:
    """A named constraint rendered into ``CREATE TABLE``."""

    def __init__(self, name: str):
        self.name = name

    def constraint_sql(self, dialect: Dialect) -> str | None:
        raise NotImplementedError


class UniqueKeyConstraint(TableConstraint):
    """Unique key over one or more columns."""

    def __init__(self, name: str):
        super().__init__(name)
        self.cols: list[str] = []

    def columns(self, *cols: str) -> UniqueKeyConstraint:
        self.cols = list(cols)
        return self

    def constraint_sql(self, dialect: Dialect) -> str | None:
        q = dialect.quote
        columns = ",".join(q(col) for col in self.cols)
        if dialect.name == "mysql":
            return f"UNIQUE KEY {q(self.name)} ({columns})"
        return f"CONSTRAINT {q(self.name)} UNIQUE ({columns})"


class ForeignKeyConstraint(TableConstraint):
    """Foreign key; ``name`` is the referencing column of this table."""

    def __init__(self, name: str):
        super().__init__(name)
        self.ref_table = ""
        self.ref_column = ""
        self.ref_database: str | None = None

    def table(self, table: str, column: str) -> ForeignKeyConstraint:
        self.ref_table = table
        self.ref_column = column
        return self

    def database(self, db: str) -> ForeignKeyConstraint:
        self.ref_database = db
        return self

    def constraint_sql(self, dialect: Dialect) -> str | None:
        q = dialect.quote
        reference = q(self.ref_table)
        if self.ref_database:
            reference = f"{q(self.ref_database)}.{reference}"
        sql = f"FOREIGN KEY ({q(self.name)}) REFERENCES {reference}({q(self.ref_column)})"
        if dialect.name == "mysql":
            return sql
        return f"CONSTRAINT {q(f'cnstrnt_{self.name}_frgn')} {sql}"


class Constraints:
    """Ordered constraint declarations of one table."""

    def __init__(self) -> None:
        self._constraints: dict[str, TableConstraint] = {}

    def unique_key(self, name: str) -> UniqueKeyConstraint:
        constraint = UniqueKeyConstraint(name)
        self._constraints[name] = constraint
        return constraint

    def foreign_key(self, name: str) -> ForeignKeyConstraint:
        constraint = ForeignKeyConstraint(name)
        self._constraints[name] = constraint
        return constraint

    def get(self, name: str) -> TableConstraint | None:
        return self._constraints.get(name)

    def __iter__(self) -> Iterator[TableConstraint]:
        return iter(self._constraints.values())

    def __len__(self) -> int:
        return len(self._constraints)


__all__ = [
    "Constraints",
    "ForeignKeyConstraint",
    "TableConstraint",
    "UniqueKeyConstraint",
]
