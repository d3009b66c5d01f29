"""Table declarations and models used across the test suite."""

from __future__ import annotations

from quarry.orm.model import OrmModel
from quarry.schema.columns import Columns
from quarry.schema.constraints import Constraints
from quarry.schema.table import AbstractDbTable


class User(OrmModel):
    """Model that records its lifecycle hooks."""

    def on_construct(self) -> None:
        self.hook_calls: list[str] = ["on_construct"]

    def on_load(self) -> None:
        self.hook_calls.append("on_load")

    def before_query(self) -> None:
        self.hook_calls.append("before_query")

    def after_query(self) -> None:
        self.hook_calls.append("after_query")


class UsersTable(AbstractDbTable):
    name = "users"
    orm_class = User

    def structure(self, cols: Columns, constraints: Constraints) -> None:
        cols.int("id").bytes(8).unsigned().auto_increment()
        cols.string("email").length(128).unique()
        cols.string("status").length(16).default("active")
        cols.int("score").default(0)
        cols.double("balance")
        cols.string("nickname").length(32).nullable()
        cols.primary_key("id")


class Note(OrmModel):
    pass


class NotesTable(AbstractDbTable):
    """No primary key and no unique column."""

    name = "notes"
    orm_class = Note

    def structure(self, cols: Columns, constraints: Constraints) -> None:
        cols.string("body").length(255)
        cols.int("user_id").nullable()


class TagsTable(AbstractDbTable):
    """No ORM class."""

    name = "tags"

    def structure(self, cols: Columns, constraints: Constraints) -> None:
        cols.string("label").length(32).unique()


class OrdersTable(AbstractDbTable):
    """Every column kind plus constraints, for DDL rendering."""

    name = "orders"

    def structure(self, cols: Columns, constraints: Constraints) -> None:
        cols.int("id").unsigned().auto_increment()
        cols.int("user_id").bytes(8).unsigned()
        cols.string("code").fixed(8).unique()
        cols.decimal("amount").precision(10, 2).default("0.00")
        cols.enum("state").options("new", "paid", "void").default("new")
        cols.text("note").size("medium").nullable()
        cols.primary_key("id")
        constraints.foreign_key("user_id").table("users", "id")
        constraints.unique_key("user_code").columns("user_id", "code")
