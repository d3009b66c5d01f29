"""ORM models with dirty tracking, their persistence queries and find queries."""

from quarry.orm.find_query import FindQuery
from quarry.orm.model import OrmModel
from quarry.orm.model_query import ModelQuery

__all__ = ["FindQuery", "ModelQuery", "OrmModel"]
