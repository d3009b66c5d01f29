"""Compiling a statement template and its bound parameters for a driver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from quarry.core.dialect import NAMED, POSITIONAL, Dialect
from quarry.queries.binder import BoundParams


@dataclass(frozen=True)
class Statement:
    """
    A template translated into the driver paramstyle plus the matching
    parameter container (a list for positional, a dict for named).

    Examples:
        >>> from quarry.core.dialect import get_dialect
        >>> from quarry.queries.binder import ParamBinder
        >>> stmt = Statement.prepare(
        ...     get_dialect("mysql"), "SELECT * FROM t WHERE a=?", ParamBinder().bind([5])
        ... )
        >>> stmt.sql, stmt.params
        ('SELECT * FROM t WHERE a=%s', [5])
    """

    sql: str
    params: list[Any] | dict[str, Any] | None = None

    @classmethod
    def prepare(cls, dialect: Dialect, query_string: str, bound: BoundParams) -> Statement:
        """Compile ``query_string`` for ``dialect``.

        Raises:
            ValueError: If placeholders mix styles or do not match the
                parameter keys (named placeholders with positional data or
                the other way round).
        """
        compiled = dialect.compile(query_string, has_params=len(bound) > 0)
        if not len(bound):
            return cls(compiled.sql)

        if compiled.style == POSITIONAL:
            if not bound.is_positional:
                raise ValueError("Positional placeholders require indexed parameters")
            return cls(compiled.sql, bound.positional())

        if compiled.style == NAMED:
            if any(isinstance(k, int) for k in bound):
                raise ValueError("Named placeholders require string parameter keys")
            return cls(compiled.sql, bound.named())

        raise ValueError("Statement has no placeholders for the given parameters")


__all__ = ["Statement"]
