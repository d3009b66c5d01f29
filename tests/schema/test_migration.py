"""Tests for CREATE TABLE rendering."""

from __future__ import annotations

import pytest

from quarry.core.errors import SchemaError
from quarry.database import Database
from quarry.server.credentials import DbCredentials
from tests._support.tables import OrdersTable, TagsTable, UsersTable


def _bound(driver: str, table_cls):
    return Database(DbCredentials(driver, "app"), connect=False).schema.bind(table_cls)


class TestMySQL:
    def test_orders(self) -> None:
        ddl = _bound("mysql", OrdersTable).migration().create_table()
        assert ddl == (
            "CREATE TABLE `orders` (\n"
            "  `id` int UNSIGNED PRIMARY KEY auto_increment NOT NULL,\n"
            "  `user_id` bigint UNSIGNED NOT NULL,\n"
            "  `code` char(8) CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci NOT NULL,\n"
            "  `amount` decimal(10,2) NOT NULL default '0.00',\n"
            "  `state` enum('new','paid','void') NOT NULL default 'new',\n"
            "  `note` MEDIUMTEXT CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci default NULL,\n"
            "  UNIQUE KEY (`code`),\n"
            "  FOREIGN KEY (`user_id`) REFERENCES `users`(`id`),\n"
            "  UNIQUE KEY `user_code` (`user_id`,`code`)\n"
            ") ENGINE=InnoDB;"
        )


class TestSQLite:
    def test_users(self) -> None:
        ddl = _bound("sqlite", UsersTable).migration().create_table()
        assert ddl == (
            "CREATE TABLE `users` (\n"
            "  `id` integer PRIMARY KEY AUTOINCREMENT NOT NULL,\n"
            "  `email` TEXT UNIQUE NOT NULL,\n"
            "  `status` TEXT NOT NULL default 'active',\n"
            "  `score` integer NOT NULL default 0,\n"
            "  `balance` REAL NOT NULL default '0',\n"
            "  `nickname` TEXT default NULL\n"
            ");"
        )

    def test_drop_and_if_not_exists_on_one_line(self) -> None:
        ddl = (
            _bound("sqlite", TagsTable)
            .migration()
            .drop_existing()
            .create_if_not_exists()
            .eol("")
            .create_table()
        )
        assert ddl == (
            "DROP TABLE IF EXISTS `tags`;"
            "CREATE TABLE IF NOT EXISTS `tags` (  `label` TEXT UNIQUE NOT NULL);"
        )

    def test_rendered_ddl_runs(self, db) -> None:
        bound = db.schema.bind(OrdersTable)
        db.exec(bound.migration().create_table())
        columns = [row["name"] for row in db.fetch("PRAGMA table_info(orders)").all()]
        assert columns == ["id", "user_id", "code", "amount", "state", "note"]


class TestPostgreSQL:
    def test_users(self) -> None:
        ddl = _bound("pgsql", UsersTable).migration().eol("\r\n").create_table()
        assert ddl == (
            'CREATE TABLE "users" (\r\n'
            '  "id" bigint PRIMARY KEY GENERATED BY DEFAULT AS IDENTITY NOT NULL,\r\n'
            '  "email" varchar(128) UNIQUE NOT NULL,\r\n'
            '  "status" varchar(16) NOT NULL default \'active\',\r\n'
            '  "score" integer NOT NULL default 0,\r\n'
            '  "balance" double precision NOT NULL default \'0\',\r\n'
            '  "nickname" varchar(32) default NULL\r\n'
            ");"
        )

    def test_foreign_key_is_named(self) -> None:
        ddl = _bound("pgsql", OrdersTable).migration().create_table()
        assert (
            'CONSTRAINT "cnstrnt_user_id_frgn" FOREIGN KEY ("user_id") REFERENCES "users"("id")'
            in ddl
        )
        assert 'CONSTRAINT "user_code" UNIQUE ("user_id","code")' in ddl


class TestEol:
    def test_invalid_eol(self) -> None:
        with pytest.raises(SchemaError, match="Invalid EOL character"):
            _bound("sqlite", TagsTable).migration().eol("\t")
