"""
One-shot persistence query for an ORM model.

A :class:`ModelQuery` targets the model's row through a match clause (its
primary key, or first unique column, and that column's original value) and
runs exactly one of ``save``, ``insert``, ``update`` or ``delete``.

Failure handling:
    Statements run with ``throw_on_fail=False``. When the executed query
    misses its row-count expectation the ``orm_query_fail`` event fires with
    the failed :class:`~quarry.queries.executed.ExecutedQuery`, then the
    caller's ``callback_on_fail``, and finally :class:`ORMModelQueryError`
    is raised carrying the query. Errors from the executor itself (binding,
    placeholder compilation) are re-raised as :class:`ORMModelQueryError`
    with the original chained as the cause.

Examples:
    >>> user = users.find().col("id", 7).first()
    >>> user.set("status", "banned")
    >>> user.query().update()

    >>> users.model().set("email", "a@b.c").query().insert(ignore_duplicate=True)

Tags:
    orm, persistence, upsert, dirty-tracking, quarry
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from quarry.core.errors import ORMError, ORMModelQueryError, ORMValidationError, QuarryError
from quarry.core.logging import get_logger
from quarry.schema.columns import IntegerColumn

if TYPE_CHECKING:
    from quarry.orm.model import ColumnValue, OrmModel
    from quarry.queries.executed import ExecutedQuery

logger = get_logger(__name__)

FailCallback = Callable[["ExecutedQuery"], Any]

UPDATE_MATCH_PREFIX = "p_"


class ModelQuery:
    """Persistence query bound to one model instance."""

    def __init__(self, model: OrmModel):
        self.model = model
        self._executed = False

        primary = model.primary_col()
        self._match_column: str | None = primary.name if primary else None
        self._match_value: ColumnValue = model.original(primary.name) if primary else None

    @property
    def executed(self) -> bool:
        return self._executed

    def where(self, col: str, value: ColumnValue) -> ModelQuery:
        """Match the row on ``col`` instead of the model's primary column.

        Raises:
            ORMModelQueryError: If ``col`` does not exist.
            ORMValidationError: If ``col`` is neither PRIMARY nor UNIQUE, or
                ``value`` does not fit the column.
        """
        bound = self.model.bound
        column = bound.table.columns.get(col)
        if column is None:
            raise ORMModelQueryError(f'Column "{col}" does not exist in table').with_context(
                table=bound.name, column=col
            )

        bound.validate_column_value_type(column, value)
        if col != bound.table.columns.primary and "unique" not in column.attrs:
            raise ORMValidationError(f'Column "{col}" is not PRIMARY OR UNIQUE').with_context(
                table=bound.name, column=col
            )

        self._match_column = col
        self._match_value = value
        return self

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def save(
        self,
        callback_on_fail: FailCallback | None = None,
        expect_positive_row_count: bool = True,
    ) -> ExecutedQuery:
        """Upsert the changes, keyed on the match column."""
        self._before_query()
        match_column, match_value = self._validate_match_clause("save")

        data = self.model.changes()
        data.setdefault(match_column, match_value)

        dialect = self.model.bound.db.dialect
        sql = dialect.upsert(self.model.bound.name, list(data), [match_column])
        query = self._run(
            sql,
            data,
            expect_positive=expect_positive_row_count,
            callback_on_fail=callback_on_fail,
            fail_message=f"Failed to save {self.model.model_name} row",
        )

        self._after_query(data)
        return query

    def insert(
        self, callback_on_fail: FailCallback | None = None, ignore_duplicate: bool = False
    ) -> ExecutedQuery:
        """Insert the changes as a new row.

        With ``ignore_duplicate`` a duplicate key is skipped instead of failing
        (the statement may then affect zero rows).
        """
        self._before_query()
        model_name = self.model.model_name
        if self._is_persisted():
            raise ORMModelQueryError(
                f"Cannot insert already existing {model_name} row"
            ).with_context(model=model_name, table=self.model.bound.name)

        data = self.model.changes()
        if not data:
            raise ORMModelQueryError(f"No data to insert {model_name} row").with_context(
                model=model_name, table=self.model.bound.name
            )

        bound = self.model.bound
        q = bound.db.dialect.quote
        if ignore_duplicate:
            sql = bound.db.dialect.insert_or_ignore(bound.name, list(data))
        else:
            cols = ", ".join(q(col) for col in data)
            placeholders = ", ".join(f":{col}" for col in data)
            sql = f"INSERT INTO {q(bound.name)} ({cols}) VALUES ({placeholders})"

        query = self._run(
            sql,
            data,
            expect_positive=not ignore_duplicate,
            callback_on_fail=callback_on_fail,
            fail_message=f"Failed to insert {model_name} row",
        )

        if query.rows > 0:
            data = self._with_generated_key(data)
            self._after_query(data)
        else:
            self._after_query({})
        return query

    def update(
        self,
        callback_on_fail: FailCallback | None = None,
        expect_positive_row_count: bool = True,
    ) -> ExecutedQuery:
        """``UPDATE`` the changed columns of the matched row."""
        self._before_query()
        match_column, match_value = self._validate_match_clause("update")
        model_name = self.model.model_name

        changes = self.model.changes()
        if not changes:
            raise ORMModelQueryError(
                f"ORM model {model_name} has no changes for update"
            ).with_context(model=model_name, table=self.model.bound.name)

        q = self.model.bound.db.dialect.quote
        match_key = UPDATE_MATCH_PREFIX + match_column
        set_clause = ", ".join(f"{q(col)}=:{col}" for col in changes)
        sql = (
            f"UPDATE {q(self.model.bound.name)} SET {set_clause} "
            f"WHERE {q(match_column)}=:{match_key}"
        )
        data: dict[str, Any] = dict(changes)
        data[match_key] = match_value

        query = self._run(
            sql,
            data,
            expect_positive=expect_positive_row_count,
            callback_on_fail=callback_on_fail,
            fail_message=f"{model_name} with {match_column} => {match_value} could not be updated",
        )

        self._after_query(changes)
        return query

    def delete(
        self,
        callback_on_fail: FailCallback | None = None,
        expect_positive_row_count: bool = True,
    ) -> ExecutedQuery:
        """``DELETE`` the matched row."""
        self._before_query()
        match_column, match_value = self._validate_match_clause("delete")
        model_name = self.model.model_name

        q = self.model.bound.db.dialect.quote
        sql = f"DELETE FROM {q(self.model.bound.name)} WHERE {q(match_column)}=?"
        query = self._run(
            sql,
            [match_value],
            expect_positive=expect_positive_row_count,
            callback_on_fail=callback_on_fail,
            fail_message=f"{model_name} with {match_column} => {match_value} could not be deleted",
        )

        self._after_query({})
        return query

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _before_query(self) -> None:
        if self._executed:
            raise RuntimeError("This query has already been executed")
        self.model.before_query()

    def _after_query(self, written: Mapping[str, ColumnValue]) -> None:
        self._executed = True
        self.model._mark_persisted(written)
        self.model.after_query()

    def _validate_match_clause(self, operation: str) -> tuple[str, ColumnValue]:
        model_name = self.model.model_name
        if self._match_column is None:
            raise ORMModelQueryError(
                f"{operation.upper()} query on a {model_name} model requires a PRIMARY or UNIQUE col"
            ).with_context(model=model_name, table=self.model.bound.name)

        if self._match_value is None:
            raise ORMModelQueryError(
                f'Cannot run {operation.upper()} query on {model_name} model, '
                f'No value for "{self._match_column}"'
            ).with_context(model=model_name, column=self._match_column)

        return self._match_column, self._match_value

    def _is_persisted(self) -> bool:
        primary = self.model.bound.table.columns.primary
        if primary:
            return self.model.original(primary) is not None
        return any(value is not None for value in self.model.original().values())

    def _with_generated_key(self, data: dict[str, ColumnValue]) -> dict[str, ColumnValue]:
        """Add the auto-increment primary key the database generated, if any."""
        columns = self.model.bound.table.columns
        if not columns.primary or columns.primary in data:
            return data
        primary = columns.get(columns.primary)
        if isinstance(primary, IntegerColumn) and primary.is_auto_increment:
            generated = self.model.bound.db.last_insert_id()
            if isinstance(generated, int) and generated > 0:
                return {**data, columns.primary: generated}
        return data

    def _run(
        self,
        sql: str,
        data: Mapping[str, Any] | list[Any],
        *,
        expect_positive: bool,
        callback_on_fail: FailCallback | None,
        fail_message: str,
    ) -> ExecutedQuery:
        bound = self.model.bound
        try:
            query = bound.db.exec(sql, data, throw_on_fail=False)
        except ORMError:
            raise
        except QuarryError as e:
            raise ORMModelQueryError(e.message, cause=e).with_context(
                model=self.model.model_name, table=bound.name, query=sql
            ) from e

        if not query.is_success(expect_positive):
            logger.warning(
                "orm_query_failed",
                model=self.model.model_name,
                table=bound.name,
                rows=query.rows,
                error=str(query.error) if query.error else None,
            )
            self._on_query_fail(query, callback_on_fail)
            raise ORMModelQueryError(fail_message, query=query).with_context(
                model=self.model.model_name, table=bound.name, query=sql
            )
        return query

    def _on_query_fail(self, query: ExecutedQuery, callback: FailCallback | None) -> None:
        self.model.bound.db.events.on_orm_query_fail().trigger(query)
        if callback is not None:
            callback(query)


__all__ = ["FailCallback", "ModelQuery"]
