"""Tests for FindQuery."""

from __future__ import annotations

import pytest

from quarry.core.errors import ORMError, ORMModelNotFoundError, ORMValidationError, QueryExecuteError
from tests._support.tables import TagsTable, User


class TestMatch:
    def test_first(self, seeded_users) -> None:
        user = seeded_users.find().col("email", "bob@example.com").first()
        assert isinstance(user, User)
        assert user.get("id") == 2
        assert user.hook_calls == ["on_construct", "on_load"]

    def test_all(self, seeded_users) -> None:
        found = seeded_users.find({"status": "active"}).all()
        assert [user.get("id") for user in found] == [1, 3]

    def test_none_matches_null(self, seeded_users) -> None:
        assert len(seeded_users.find().col("nickname", None).all()) == 3

    def test_several_columns(self, seeded_users) -> None:
        found = seeded_users.find().match({"status": "active", "score": 30}).all()
        assert [user.get("email") for user in found] == ["cat@example.com"]

    def test_order_and_limit(self, seeded_users) -> None:
        found = seeded_users.find().col("nickname", None).desc("id").limit(2).all()
        assert [user.get("id") for user in found] == [3, 2]

    def test_not_found(self, seeded_users) -> None:
        with pytest.raises(ORMModelNotFoundError, match='No matching row found in ":memory:.users"'):
            seeded_users.find().col("email", "nobody@example.com").first()

    def test_value_types_are_validated(self, users) -> None:
        with pytest.raises(ORMValidationError):
            users.find().col("id", "1")

    def test_column_names_must_be_strings(self, users) -> None:
        with pytest.raises(ORMError, match="All column names must be of type string"):
            users.find().match({0: 1})

    def test_unknown_column(self, users) -> None:
        with pytest.raises(ORMError, match='Column "nope" not found'):
            users.find().col("nope", 1)

    def test_nothing_to_match(self, users) -> None:
        with pytest.raises(ORMError, match="No columns to match"):
            users.find().all()


class TestWhereQuery:
    def test_where_clause(self, seeded_users) -> None:
        found = seeded_users.find().query("WHERE `score` > ?", [15]).desc("score").all()
        assert [user.get("id") for user in found] == [3, 2]

    def test_case_insensitive_prefix(self, seeded_users) -> None:
        found = seeded_users.find().query("where `email` LIKE :p", {"p": "a%"}).all()
        assert [user.get("id") for user in found] == [1]

    def test_must_start_with_where(self, users) -> None:
        with pytest.raises(ORMError, match='Query must start with "WHERE"'):
            users.find().query("`id` = 1")

    def test_database_errors_are_wrapped(self, users) -> None:
        with pytest.raises(ORMError) as exc_info:
            users.find().query("WHERE `nope` = 1").all()
        assert isinstance(exc_info.value.__cause__, QueryExecuteError)


class TestGuards:
    def test_invalid_limit(self, users) -> None:
        with pytest.raises(ORMError, match="Invalid limit value"):
            users.find().limit(0)

    def test_table_without_orm_class(self, db) -> None:
        tags = db.schema.bind(TagsTable)
        db.exec(tags.migration().create_table())
        with pytest.raises(ORMError, match='ORM models class not defined for ":memory:.tags" table'):
            tags.find().col("label", "x").all()
