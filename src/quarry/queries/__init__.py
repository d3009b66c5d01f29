"""Parameter binding, executed queries, result cursors, the query log and the builder."""

from quarry.queries.binder import BindType, BoundParams, ParamBinder
from quarry.queries.builder import QueryBuilder
from quarry.queries.executed import ExecutedQuery
from quarry.queries.fetch import ResultCursor, Row
from quarry.queries.log import QueryLog
from quarry.queries.paginated import CompactNav, Paginated
from quarry.queries.statement import Statement

__all__ = [
    "BindType",
    "BoundParams",
    "CompactNav",
    "ExecutedQuery",
    "Paginated",
    "ParamBinder",
    "QueryBuilder",
    "QueryLog",
    "ResultCursor",
    "Row",
    "Statement",
]
