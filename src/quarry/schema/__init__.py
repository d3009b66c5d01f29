"""Table declarations, column types, constraints, DDL and the per-database registry."""

from quarry.schema.columns import Columns, TableColumn
from quarry.schema.constraints import Constraints
from quarry.schema.migration import Migration
from quarry.schema.registry import Schema
from quarry.schema.table import AbstractDbTable, BoundDbTable

__all__ = [
    "AbstractDbTable",
    "BoundDbTable",
    "Columns",
    "Constraints",
    "Migration",
    "Schema",
    "TableColumn",
]
