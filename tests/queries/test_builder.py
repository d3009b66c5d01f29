"""Tests for the fluent QueryBuilder."""

from __future__ import annotations

import pytest

from quarry.core.errors import QueryBuilderError, QueryExecuteError
from tests._support.fakes import FakeCursor, FakeDriverError, make_fake_db


# =========================================================================
# SELECT
# =========================================================================


class TestSelect:
    def test_find_matches_by_equality(self, seeded_users) -> None:
        rows = seeded_users.db.query().table("users").find({"status": "active"}).fetch().all()
        assert [row["email"] for row in rows] == ["ann@example.com", "cat@example.com"]

    def test_find_without_string_keys_matches_everything(self, seeded_users) -> None:
        rows = seeded_users.db.query().table("users").find({0: "x"}).fetch().all()
        assert len(rows) == 3

    def test_where_with_positional_data(self, seeded_users) -> None:
        rows = (
            seeded_users.db.query()
            .table("users")
            .where("`score` > ?", [15])
            .cols("email")
            .fetch()
            .all()
        )
        assert rows == [{"email": "bob@example.com"}, {"email": "cat@example.com"}]

    def test_order_and_window(self, seeded_users) -> None:
        query = seeded_users.db.query().table("users").cols("id").desc("id").limit(2)
        assert [row["id"] for row in query.fetch().all()] == [3, 2]

        query = seeded_users.db.query().table("users").cols("id").asc("id").start(1).limit(1)
        assert query.fetch().all() == [{"id": 2}]

    def test_aggregate_columns_are_not_quoted(self, seeded_users) -> None:
        row = seeded_users.db.query().table("users").cols("count(*)").fetch().row()
        assert row == {"count(*)": 3}

    def test_select_sql_shape(self) -> None:
        db, connection = make_fake_db("mysql", FakeCursor(columns=["id"]))
        db.query().table("users").where("`a`=?", [1]).cols("id", "email").asc(
            "id"
        ).start(10).limit(5).lock().fetch()

        sql, params = connection.cursors[0].calls[0]
        assert sql == (
            "SELECT `id`,`email` FROM `users` WHERE `a`=%s ORDER BY `id` ASC "
            "LIMIT 10,5 FOR UPDATE"
        )
        assert params == [1]

    def test_pgsql_select_sql_shape(self) -> None:
        db, connection = make_fake_db("pgsql", FakeCursor(columns=["id"]))
        db.query().table("users").find({"email": "a@b.c"}).start(10).limit(5).fetch()

        sql, params = connection.cursors[0].calls[0]
        assert sql == 'SELECT * FROM "users" WHERE "email"=%(email)s LIMIT 5 OFFSET 10'
        assert params == {"email": "a@b.c"}

    def test_unfiltered_select_matches_every_row(self) -> None:
        db, connection = make_fake_db("mysql", FakeCursor(columns=["id"]))
        db.query().table("users").limit(5).fetch()
        assert connection.cursors[0].calls == [("SELECT * FROM `users` WHERE 1 LIMIT 5", None)]

    def test_pgsql_unfiltered_select_uses_boolean_literal(self) -> None:
        db, connection = make_fake_db("pgsql", FakeCursor(columns=["id"]))
        db.query().table("users").limit(5).fetch()
        assert connection.cursors[0].calls == [('SELECT * FROM "users" WHERE TRUE LIMIT 5', None)]


# =========================================================================
# INSERT / UPDATE / DELETE
# =========================================================================


class TestInsert:
    def test_insert(self, users) -> None:
        query = users.db.query().table("users").insert({"email": "a@b.c", "score": 5})
        assert query.rows == 1
        assert query.query_string == "INSERT INTO `users` (`email`,`score`) VALUES (:email,:score)"
        assert users.db.last_insert_id() == 1

    def test_indexed_array_rejected(self, users) -> None:
        with pytest.raises(QueryBuilderError, match="cannot accept indexed array"):
            users.db.query().table("users").insert({0: "a@b.c"})

    def test_failure_raises_by_default(self, seeded_users) -> None:
        with pytest.raises(QueryExecuteError):
            seeded_users.db.query().table("users").insert({"email": "ann@example.com"})

    def test_failure_returned_without_throw(self, seeded_users) -> None:
        query = (
            seeded_users.db.query()
            .options(throw_on_fail=False)
            .table("users")
            .insert({"email": "ann@example.com"})
        )
        assert query.error is not None
        assert not query.is_success()
        assert seeded_users.db.queries.last() is query


class TestUpdate:
    def test_update(self, seeded_users) -> None:
        db = seeded_users.db
        query = db.query().table("users").find({"email": "bob@example.com"}).update(
            {"status": "active"}
        )
        assert query.rows == 1
        assert query.bound_data == {"status": "active", "__email": "bob@example.com"}
        row = db.fetch("SELECT `status` FROM `users` WHERE `id`=?", [2]).row()
        assert row == {"status": "active"}

    def test_where_parameters_are_prefixed(self) -> None:
        db, connection = make_fake_db("mysql")
        db.query().table("users").where("`email`=:email AND `note`=':x'", {"email": "a"}).update(
            {"email": "b"}
        )

        sql, params = connection.cursors[0].calls[0]
        assert sql == (
            "UPDATE `users` SET `email`=%(email)s WHERE `email`=%(__email)s AND `note`=':x'"
        )
        assert params == {"email": "b", "__email": "a"}

    def test_builder_where_state_survives_update(self, seeded_users) -> None:
        builder = seeded_users.db.query().table("users").find({"email": "bob@example.com"})
        builder.update({"score": 21})
        second = builder.update({"status": "active"})

        assert second.bound_data == {"status": "active", "__email": "bob@example.com"}
        row = builder.cols("score", "status").fetch().row()
        assert row == {"score": 21, "status": "active"}

    def test_requires_where(self, users) -> None:
        with pytest.raises(QueryBuilderError, match="requires WHERE clause"):
            users.db.query().table("users").update({"status": "x"})

    def test_indexed_set_rejected(self, users) -> None:
        with pytest.raises(QueryBuilderError, match="cannot accept indexed array"):
            users.db.query().table("users").where("`id`=:id", {"id": 1}).update({0: "x"})

    def test_positional_where_rejected(self, users) -> None:
        with pytest.raises(QueryBuilderError, match="requires named parameters"):
            users.db.query().table("users").where("`id`=?", [1]).update({"status": "x"})

    def test_prefix_collision_rejected(self, users) -> None:
        with pytest.raises(QueryBuilderError, match="collides"):
            users.db.query().table("users").where("`id`=:id", {"id": 1}).update({"__id": 2})


class TestDelete:
    def test_delete(self, seeded_users) -> None:
        db = seeded_users.db
        query = db.query().table("users").where("`status`=?", ["active"]).delete()
        assert query.rows == 2
        assert db.fetch("SELECT count(*) AS n FROM `users`").row() == {"n": 1}

    def test_requires_where(self, users) -> None:
        with pytest.raises(QueryBuilderError, match="DELETE query requires WHERE clause"):
            users.db.query().table("users").delete()

        with pytest.raises(QueryBuilderError):
            users.db.query().table("users").find({}).delete()


# =========================================================================
# Pagination
# =========================================================================


class TestPaginate:
    def test_first_page(self, seeded_users) -> None:
        page = seeded_users.db.query().table("users").asc("id").limit(2).paginate()
        assert page.total_rows == 3
        assert page.page_count == 2
        assert [row["id"] for row in page.rows] == [1, 2]
        assert page.pages == [{"index": 1, "start": 0}, {"index": 2, "start": 2}]

    def test_second_page(self, seeded_users) -> None:
        page = seeded_users.db.query().table("users").asc("id").start(2).limit(2).paginate()
        assert [row["id"] for row in page.rows] == [3]
        assert page.compact_nav().current == 2

    def test_filtered(self, seeded_users) -> None:
        page = seeded_users.db.query().table("users").find({"status": "banned"}).paginate()
        assert page.total_rows == 1
        assert page.count == 1

    def test_no_matches(self, seeded_users) -> None:
        page = seeded_users.db.query().table("users").find({"status": "gone"}).paginate()
        assert page.total_rows == 0
        assert page.page_count == 0
        assert page.rows == []

    def test_default_per_page_from_settings(
        self, seeded_users, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("QUARRY_DEFAULT_PER_PAGE", "2")
        page = seeded_users.db.query().table("users").paginate()
        assert page.per_page == 2
        assert page.count == 2

    def test_pgsql_unfiltered_count_and_page(self) -> None:
        db, connection = make_fake_db(
            "pgsql",
            FakeCursor(rows=[(3,)], columns=["count"]),
            FakeCursor(rows=[(1,), (2,)], columns=["id"]),
        )
        page = db.query().table("users").limit(2).paginate()

        count_call, page_call = (cursor.calls[0] for cursor in connection.cursors)
        assert count_call == ('SELECT count(*) FROM "users" WHERE TRUE', None)
        assert page_call == ('SELECT * FROM "users" WHERE TRUE LIMIT 2', None)
        assert page.total_rows == 3
        assert [row["id"] for row in page.rows] == [1, 2]

    def test_count_failure_raises_without_throw(self) -> None:
        error = FakeDriverError("Table 'users' doesn't exist", errno=1146, sqlstate="42S02")
        db, connection = make_fake_db("mysql", FakeCursor(execute_error=error))

        with pytest.raises(QueryExecuteError, match="doesn't exist"):
            db.query().options(throw_on_fail=False).table("users").paginate()
        assert len(connection.cursors) == 1
