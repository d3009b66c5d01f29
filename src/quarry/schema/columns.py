"""
Table column declarations.

Columns describe a table for two consumers: the ORM, which validates and
coerces values by the column's semantic ``data_type`` (``integer``,
``double``, ``string`` or ``binary``), and :class:`~quarry.schema.migration.Migration`,
which renders the column type for a driver.

Examples:
    >>> cols = Columns()
    >>> cols.int("id").bytes(8).unsigned().auto_increment()
    >>> cols.string("email").length(128).unique()
    >>> cols.enum("status").options("active", "banned").default("active")
    >>> cols.primary_key("id")
    >>> cols.names()
    ['id', 'email', 'status']

Tags:
    schema, columns, ddl, orm, quarry
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from decimal import Decimal
from typing import Any

from quarry.core.dialect import Dialect
from quarry.core.errors import SchemaError

INTEGER = "integer"
DOUBLE = "double"
STRING = "string"
BINARY = "binary"

_DECIMAL_DEFAULT = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")


class TableColumn:
    """Base column: name, nullability, default value and attributes."""

    data_type: str = STRING

    def __init__(self, name: str):
        self._name = name
        self._default: int | float | str | None = None
        self._nullable = False
        self.attrs: dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_nullable(self) -> bool:
        return self._nullable

    @property
    def default_value(self) -> int | float | str | None:
        return self._default

    def nullable(self) -> TableColumn:
        self._nullable = True
        return self

    def _set_default(self, value: int | float | str | None) -> TableColumn:
        if value is None and not self._nullable:
            raise SchemaError(
                f'Default value for col "{self._name}" cannot be NULL; Column is not nullable'
            )
        self._default = value
        return self

    def load_value(self, value: Any) -> Any:
        """Coerce a value read from the driver to this column's ``data_type``."""
        if value is None:
            return None
        if self.data_type == INTEGER:
            return int(value)
        if self.data_type == DOUBLE:
            return float(value)
        if self.data_type == BINARY:
            return value.encode() if isinstance(value, str) else bytes(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value).decode("utf-8")
        return value if isinstance(value, str) else str(value)

    def column_sql(self, dialect: Dialect) -> str | None:
        """Column type as written in ``CREATE TABLE`` for ``dialect``."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._name!r})"


class _UniqueMixin:
    attrs: dict[str, Any]

    def unique(self):
        self.attrs["unique"] = 1
        return self


class _UnsignedMixin:
    attrs: dict[str, Any]

    def unsigned(self):
        self.attrs["unsigned"] = 1
        return self


class _CharsetMixin:
    attrs: dict[str, Any]

    def charset(self, charset: str):
        self.attrs["charset"] = charset
        return self

    def collation(self, collation: str):
        self.attrs["collation"] = collation
        return self


class _PrecisionMixin:
    MAX_DIGITS = 65
    MAX_SCALE = 30
    digits: int
    scale: int

    def precision(self, digits: int, scale: int):
        if digits < 1 or digits > self.MAX_DIGITS:
            raise SchemaError(f"Precision digits must be between 1 and {self.MAX_DIGITS}")
        max_scale = max(digits, self.MAX_SCALE)
        if scale < 0 or scale > max_scale:
            raise SchemaError(f"Scale digits must be between 0 and {max_scale}")
        self.digits = digits
        self.scale = scale
        return self


class _BigSizeMixin:
    SIZES = ("tiny", "medium", "long")
    size_prefix: str

    def size(self, size: str):
        size = size.lower()
        if size not in self.SIZES:
            raise SchemaError(f'Invalid size "{size}"; expected one of {list(self.SIZES)}')
        self.size_prefix = size
        return self


# =============================================================================
# Column types
# =============================================================================


class IntegerColumn(_UniqueMixin, _UnsignedMixin, TableColumn):
    """Integer of 1, 2, 3, 4 (default) or 8 bytes."""

    data_type = INTEGER
    _MYSQL_TYPES = {1: "tinyint", 2: "smallint", 3: "mediumint", 4: "int", 8: "bigint"}

    def __init__(self, name: str):
        super().__init__(name)
        self.attrs["unsigned"] = 0
        self.bytes_size = 4
        self.is_auto_increment = False

    def bytes(self, size: int) -> IntegerColumn:
        if size not in self._MYSQL_TYPES:
            raise SchemaError("Invalid integer size")
        self.bytes_size = size
        return self

    size = bytes

    def default(self, value: int | None) -> IntegerColumn:
        if value is not None and value < 0 and self.attrs["unsigned"] == 1:
            raise SchemaError("Cannot set signed integer as default value")
        self._set_default(value)
        return self

    def auto_increment(self) -> IntegerColumn:
        self.is_auto_increment = True
        return self

    def column_sql(self, dialect: Dialect) -> str | None:
        if dialect.name == "mysql":
            return self._MYSQL_TYPES[self.bytes_size]
        if dialect.name == "pgsql":
            return {1: "smallint", 2: "smallint", 8: "bigint"}.get(self.bytes_size, "integer")
        return "integer"


class StringColumn(_UniqueMixin, _CharsetMixin, TableColumn):
    """``varchar``/``char`` column, 255 characters by default."""

    LENGTH_MIN = 1
    LENGTH_MAX = 0xFFFF

    def __init__(self, name: str):
        super().__init__(name)
        self.length_value = 255
        self.is_fixed = False

    def length(self, length: int) -> StringColumn:
        if length < self.LENGTH_MIN or length > self.LENGTH_MAX:
            raise SchemaError(
                f'Maximum length for col "{self.name}" cannot exceed {self.LENGTH_MAX}'
            )
        self.length_value = length
        return self

    def fixed(self, length: int) -> StringColumn:
        self.length(length)
        self.is_fixed = True
        return self

    def default(self, value: str | None) -> StringColumn:
        self._set_default(value)
        return self

    def column_sql(self, dialect: Dialect) -> str | None:
        if dialect.name == "sqlite":
            return "TEXT"
        kind = "char" if self.is_fixed else "varchar"
        return f"{kind}({self.length_value})"


class BinaryColumn(StringColumn):
    """``varbinary``/``binary`` column (``BLOB`` on SQLite, ``bytea`` on PostgreSQL)."""

    data_type = BINARY

    def column_sql(self, dialect: Dialect) -> str | None:
        if dialect.name == "mysql":
            kind = "binary" if self.is_fixed else "varbinary"
            return f"{kind}({self.length_value})"
        if dialect.name == "pgsql":
            return "bytea"
        return "BLOB"


class TextColumn(_BigSizeMixin, _CharsetMixin, TableColumn):
    """``TEXT`` with an optional MySQL size prefix (``tiny``/``medium``/``long``)."""

    def __init__(self, name: str):
        super().__init__(name)
        self.size_prefix = ""

    def column_sql(self, dialect: Dialect) -> str | None:
        if dialect.name == "mysql":
            return f"{self.size_prefix.upper()}TEXT"
        return "TEXT"


class BlobColumn(_BigSizeMixin, TableColumn):
    """``BLOB`` with an optional MySQL size prefix."""

    data_type = BINARY

    def __init__(self, name: str):
        super().__init__(name)
        self.size_prefix = ""

    def column_sql(self, dialect: Dialect) -> str | None:
        if dialect.name == "mysql":
            return f"{self.size_prefix.upper()}BLOB"
        if dialect.name == "pgsql":
            return "bytea"
        return "BLOB"


class DecimalColumn(_UnsignedMixin, _PrecisionMixin, TableColumn):
    """Fixed-point number; values travel as strings to keep their precision."""

    def __init__(self, name: str):
        super().__init__(name)
        self.digits = 0
        self.scale = 0
        self._set_default("0")

    def default(self, value: str = "0") -> DecimalColumn:
        if not _DECIMAL_DEFAULT.match(value):
            raise SchemaError(f'Bad default decimal value for col "{self.name}"')
        self._set_default(value)
        return self

    def load_value(self, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return f"{Decimal(str(value)):.{self.scale}f}"

    def column_sql(self, dialect: Dialect) -> str | None:
        if dialect.name == "mysql":
            return f"decimal({self.digits},{self.scale})"
        if dialect.name == "pgsql":
            return f"numeric({self.digits},{self.scale})"
        return "TEXT"


class FloatColumn(_UnsignedMixin, _PrecisionMixin, TableColumn):
    """Floating point number, ``float(10,0)`` on MySQL by default."""

    data_type = DOUBLE
    type_name = "float"

    def __init__(self, name: str):
        super().__init__(name)
        self.digits = 10
        self.scale = 0
        self._set_default("0")

    def default(self, value: float | int = 0) -> FloatColumn:
        self._set_default(value)
        return self

    def column_sql(self, dialect: Dialect) -> str | None:
        if dialect.name == "mysql":
            return f"{self.type_name}({self.digits},{self.scale})"
        if dialect.name == "pgsql":
            return "double precision" if self.type_name == "double" else "real"
        return "REAL"


class DoubleColumn(FloatColumn):
    """Double precision floating point number."""

    type_name = "double"


class EnumColumn(TableColumn):
    """One of a fixed list of string options."""

    def __init__(self, name: str):
        super().__init__(name)
        self.options_list: list[str] = []

    def options(self, *opts: str) -> EnumColumn:
        self.options_list = list(opts)
        return self

    def default(self, opt: str) -> EnumColumn:
        if opt not in self.options_list:
            raise SchemaError(f'Default value for "{self.name}" must be from defined options')
        self._set_default(opt)
        return self

    def column_sql(self, dialect: Dialect) -> str | None:
        options = ",".join("'{}'".format(opt.replace("'", "''")) for opt in self.options_list)
        if dialect.name == "mysql":
            return f"enum({options})"
        return f"TEXT CHECK({dialect.quote(self.name)} in ({options}))"


# =============================================================================
# Collection
# =============================================================================


class Columns:
    """Ordered column declarations of one table."""

    def __init__(self) -> None:
        self._columns: dict[str, TableColumn] = {}
        self._default_charset = "utf8mb4"
        self._default_collation = "utf8mb4_unicode_ci"
        self._primary_key: str | None = None

    def defaults(self, charset: str | None = None, collation: str | None = None) -> Columns:
        """Charset/collation applied to string and text columns declared afterwards."""
        if charset:
            self._default_charset = charset
        if collation:
            self._default_collation = collation
        return self

    def _append(self, column: TableColumn) -> Any:
        self._columns[column.name] = column
        return column

    def int(self, name: str) -> IntegerColumn:
        return self._append(IntegerColumn(name))

    def string(self, name: str) -> StringColumn:
        col = self._append(StringColumn(name))
        return col.charset(self._default_charset).collation(self._default_collation)

    def binary(self, name: str) -> BinaryColumn:
        return self._append(BinaryColumn(name))

    def text(self, name: str) -> TextColumn:
        col = self._append(TextColumn(name))
        return col.charset(self._default_charset).collation(self._default_collation)

    def blob(self, name: str) -> BlobColumn:
        return self._append(BlobColumn(name))

    def decimal(self, name: str) -> DecimalColumn:
        return self._append(DecimalColumn(name))

    def float(self, name: str) -> FloatColumn:
        return self._append(FloatColumn(name))

    def double(self, name: str) -> DoubleColumn:
        return self._append(DoubleColumn(name))

    def enum(self, name: str) -> EnumColumn:
        return self._append(EnumColumn(name))

    def primary_key(self, col: str) -> None:
        """Declare the primary key.

        The column must exist, must not be nullable and needs a non-NULL
        default unless it is an auto-increment integer.
        """
        column = self._columns.get(col)
        if column is None:
            raise SchemaError(f'Column "{col}" not defined in table')
        if column.is_nullable:
            raise SchemaError(f'Primary key "{col}" cannot be nullable')
        if column.default_value is None:
            if not (isinstance(column, IntegerColumn) and column.is_auto_increment):
                raise SchemaError(f'Primary key "{col}" default value cannot be NULL')
        self._primary_key = col

    @property
    def primary(self) -> str | None:
        return self._primary_key

    def get(self, name: str) -> TableColumn | None:
        return self._columns.get(name)

    def names(self) -> list[str]:
        return list(self._columns)

    def __iter__(self) -> Iterator[TableColumn]:
        return iter(self._columns.values())

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, name: object) -> bool:
        return name in self._columns


__all__ = [
    "BINARY",
    "DOUBLE",
    "INTEGER",
    "STRING",
    "BinaryColumn",
    "BlobColumn",
    "Columns",
    "DecimalColumn",
    "DoubleColumn",
    "EnumColumn",
    "FloatColumn",
    "IntegerColumn",
    "StringColumn",
    "TableColumn",
    "TextColumn",
]
