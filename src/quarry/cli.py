"""
Root Typer application for the ``quarry`` command.

Connection details come from :class:`~quarry.core.settings.QuarrySettings`
(``QUARRY_*`` environment variables or ``.env``).
"""

from __future__ import annotations

import importlib
import json
import re
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from quarry.core.errors import QuarryError
from quarry.core.settings import get_settings

app = typer.Typer(
    name="quarry",
    help="quarry: query builder, statement executor and ORM for MySQL, SQLite and PostgreSQL.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)

_ROW_RETURNING = re.compile(r"^\s*(select|with|pragma|show|explain|describe)\b", re.IGNORECASE)
_INTEGER = re.compile(r"^-?\d+$")


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        from quarry import __version__

        try:
            v = pkg_version("quarry")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"quarry {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """quarry CLI: inspect the configured connection, run statements, render DDL."""
    from quarry.core.logging import configure_logging

    try:
        settings = get_settings()
    except QuarryError as e:
        _fail(e.message)
        return
    configure_logging(level=settings.log_level, json_format=settings.json_logs)


# ── Helpers ──────────────────────────────────────────────────────────────


def _fail(message: str) -> None:
    err_console.print(f"[bold red]Error[/bold red]: {message}")
    raise typer.Exit(code=1)


def _parse_params(params: list[str] | None) -> dict[str, Any]:
    """``key=value`` pairs; integers become ``int``, ``null`` becomes ``None``."""
    data: dict[str, Any] = {}
    for item in params or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got '{item}'", param_hint="--param")
        if _INTEGER.match(value):
            data[key.strip()] = int(value)
        elif value.lower() == "null":
            data[key.strip()] = None
        else:
            data[key.strip()] = value
    return data


def _print_rows(rows: list[dict[str, Any]], title: str = "") -> None:
    if not rows:
        console.print("[dim]No rows.[/dim]")
        return
    table = Table(title=title or None, show_header=True, header_style="bold cyan")
    for col in rows[0]:
        table.add_column(str(col))
    for row in rows:
        table.add_row(*("NULL" if v is None else str(v) for v in row.values()))
    console.print(table)


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def dsn() -> None:
    """Print the DSN of the configured database."""
    try:
        typer.echo(get_settings().credentials().dsn())
    except QuarryError as e:
        _fail(e.message)


@app.command("exec")
def exec_statement(
    sql: str = typer.Argument(..., help="Statement with ?/:name placeholders"),
    param: list[str] | None = typer.Option(  # noqa: UP007
        None, "--param", "-p", help="Named parameter as key=value (repeatable)"
    ),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Execute one statement against the configured database."""
    from quarry.database import Database

    data = _parse_params(param)
    try:
        with Database.from_settings() as db:
            if _ROW_RETURNING.match(sql):
                rows = db.fetch(sql, data).all()
                if json_out:
                    console.print_json(json.dumps(rows, default=str))
                else:
                    _print_rows(rows, title="Rows")
                return

            executed = db.exec(sql, data)
    except QuarryError as e:
        _fail(e.message)
        return

    if json_out:
        console.print_json(json.dumps(executed.to_dict(), default=str))
    else:
        console.print(f"[green]OK[/green] {executed.rows} row(s) affected")


@app.command()
def ddl(
    target: str = typer.Argument(..., help="Table declaration as module:TableClass"),
    driver: str | None = typer.Option(None, "--driver", "-d", help="mysql, sqlite or pgsql"),
    drop: bool = typer.Option(False, "--drop", help="Prefix with DROP TABLE IF EXISTS"),
    if_not_exists: bool = typer.Option(False, "--if-not-exists", help="CREATE TABLE IF NOT EXISTS"),
) -> None:
    """Render the CREATE TABLE statement of a table declaration."""
    from quarry.database import Database
    from quarry.schema.table import AbstractDbTable
    from quarry.server.credentials import DbCredentials

    module_name, sep, class_name = target.partition(":")
    if not sep or not module_name or not class_name:
        raise typer.BadParameter("Expected module:TableClass", param_hint="TARGET")

    try:
        table_cls = getattr(importlib.import_module(module_name), class_name)
    except (ImportError, AttributeError) as e:
        _fail(f"Cannot load {target}: {e}")
        return

    if not isinstance(table_cls, type) or not issubclass(table_cls, AbstractDbTable):
        _fail(f"{target} is not an AbstractDbTable subclass")

    settings = get_settings()
    try:
        credentials = DbCredentials(driver or settings.driver, settings.dbname)
        db = Database(credentials, connect=False)
        migration = db.schema.bind(table_cls).migration()
        if drop:
            migration.drop_existing()
        if if_not_exists:
            migration.create_if_not_exists()
        typer.echo(migration.create_table())
    except QuarryError as e:
        _fail(e.message)


__all__ = ["app"]
