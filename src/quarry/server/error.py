"""Native driver error captured from a failed statement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

SQLSTATE_SUCCESS = "00000"
SQLSTATE_GENERAL_ERROR = "HY000"


@dataclass(frozen=True)
class StatementError:
    """
    ``(SQLSTATE, vendor code, message)`` reported by the driver.

    A state other than ``00000`` marks the execution as failed.

    Examples:
        >>> str(StatementError("23000", 1062, "Duplicate entry"))
        '[23000][1062] Duplicate entry'
    """

    sqlstate: str | None = None
    code: int | str | None = None
    info: str | None = None

    @property
    def failed(self) -> bool:
        return self.sqlstate != SQLSTATE_SUCCESS

    @classmethod
    def from_exception(cls, exc: BaseException) -> StatementError:
        """Extract the error triple from a DB-API exception.

        Understands mysql-connector (``errno``/``sqlstate``/``msg``), psycopg
        (``sqlstate``/``diag``) and sqlite3 (``sqlite_errorcode``). Drivers
        that report no SQLSTATE get the generic ``HY000``.
        """
        sqlstate: Any = getattr(exc, "sqlstate", None) or getattr(exc, "pgcode", None)
        code: Any = getattr(exc, "errno", None)
        if code is None:
            code = getattr(exc, "sqlite_errorcode", None)
        if code is None:
            code = sqlstate

        info: Any = getattr(exc, "msg", None)
        if not info:
            diag = getattr(exc, "diag", None)
            info = getattr(diag, "message_primary", None) if diag is not None else None
        if not info:
            info = str(exc) or exc.__class__.__name__

        return cls(
            sqlstate=str(sqlstate) if sqlstate else SQLSTATE_GENERAL_ERROR,
            code=code,
            info=str(info),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"sqlstate": self.sqlstate, "code": self.code, "info": self.info}

    def __str__(self) -> str:
        return f"[{self.sqlstate}][{self.code}] {self.info}"


__all__ = ["SQLSTATE_GENERAL_ERROR", "SQLSTATE_SUCCESS", "StatementError"]
