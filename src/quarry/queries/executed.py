"""Result record of one statement execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from quarry.server.error import StatementError


@dataclass(frozen=True)
class ExecutedQuery:
    """
    Immutable record of an executed statement.

    Attributes:
        query_string: SQL template as given by the caller
        bound_data: Parameters exactly as bound (integer keys are 1-based)
        rows: Native row count (negative driver counts normalized to 0)
        error: Driver error, ``None`` on success
    """

    query_string: str
    bound_data: dict[str | int, Any] = field(default_factory=dict)
    rows: int = 0
    error: StatementError | None = None

    def is_success(self, expect_positive_row_count: bool = True) -> bool:
        """True iff there is no error and ``rows`` meets the expectation.

        With ``expect_positive_row_count`` at least one row must have been
        affected; otherwise zero rows is still a success.
        """
        if self.error is not None:
            return False
        return self.rows >= (1 if expect_positive_row_count else 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query_string": self.query_string,
            "bound_data": dict(self.bound_data),
            "rows": self.rows,
            "error": self.error.to_dict() if self.error else None,
        }


__all__ = ["ExecutedQuery"]
