"""
Root Typer application for the ``tabular`` CLI.

Read-only helpers around one table: inspect its live columns, generate
column definitions or a CREATE statement, and list distinct values.
"""

from __future__ import annotations

import typer
from typer import Typer

from tabular.cli.utils import console, fail, open_db, output_rows
from tabular.core.adapters import normalize_charset
from tabular.core.dialect import get_dialect
from tabular.core.errors import ConfigError, TabularError
from tabular.core.logging import configure_logging
from tabular.core.settings import get_settings
from tabular.data.table import TabularTable, create_table_sql

app = Typer(
    name="tabular",
    help="tabular: table-access toolkit for spreadsheet-style CRUD.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

_SQLITE = typer.Option(None, "--sqlite", help="SQLite database file (default: TABULAR_* settings)")


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("tabular-toolkit")
        except PackageNotFoundError:
            v = "0.1.0"
        typer.echo(f"tabular {v}")
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
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log executed SQL to stderr."),
) -> None:
    """tabular CLI: inspect tables and generate schema helpers."""
    settings = get_settings()
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_format == "json",
    )


@app.command()
def describe(
    table: str = typer.Argument(..., help="Table name"),
    sqlite: str | None = _SQLITE,
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show the live column metadata of TABLE."""
    try:
        with open_db(sqlite) as db:
            columns = TabularTable(db, table, history=False).describe_columns()
    except TabularError as e:
        fail(e)
    if not columns:
        fail(TabularError(f"Table does not exist in database: {table}"))
    output_rows(list(columns.values()), as_json=json_out, title=table)


@app.command("column-defs")
def column_defs(
    table: str = typer.Argument(..., help="Table name"),
    sqlite: str | None = _SQLITE,
) -> None:
    """Print Python column definitions generated from TABLE."""
    try:
        with open_db(sqlite) as db:
            source = TabularTable(db, table, history=False).column_defs_source()
    except TabularError as e:
        fail(e)
    typer.echo(source, nl=False)


@app.command("create-sql")
def create_sql(
    table: str = typer.Argument(..., help="Table name"),
    column: list[str] = typer.Option(..., "--column", "-c", help="Column as NAME or NAME:SQL_TYPE"),
    key: str = typer.Option("id", "--key", "-k", help="'id' for auto-increment, else comma-separated key columns"),
    engine: str = typer.Option("InnoDB", "--engine", help="MySQL storage engine"),
    dialect: str | None = typer.Option(None, "--dialect", help="mysql or sqlite; generate offline without connecting"),
    charset: str | None = typer.Option(None, "--charset", help="Table charset with --dialect (default: TABULAR_DB_CHARSET)"),
    sqlite: str | None = _SQLITE,
) -> None:
    """Print a CREATE TABLE statement for TABLE."""
    definitions: dict[str, dict[str, str]] = {}
    for entry in column:
        name, _, sql_type = entry.partition(":")
        definitions[name] = {"sqlType": sql_type} if sql_type else {}
    try:
        if dialect is not None:
            try:
                sql_dialect = get_dialect(dialect)
            except ValueError as e:
                raise ConfigError(str(e)) from e
            sql = create_table_sql(
                table,
                definitions,
                sql_dialect,
                key=key,
                engine=engine,
                charset=normalize_charset(charset or get_settings().db_charset),
            )
        else:
            with open_db(sqlite) as db:
                sql = TabularTable(db, table, history=False).generate_create_statement(definitions, key, engine)
    except TabularError as e:
        fail(e)
    typer.echo(sql)


@app.command()
def distinct(
    table: str = typer.Argument(..., help="Table name"),
    column: str = typer.Argument(..., help="Column name"),
    counts: bool = typer.Option(False, "--counts", help="Include occurrence counts"),
    keep_spaces: bool = typer.Option(False, "--keep-spaces", help="Do not merge values that differ only in spaces"),
    sqlite: str | None = _SQLITE,
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List the distinct values of COLUMN in TABLE."""
    try:
        with open_db(sqlite) as db:
            tbl = TabularTable(db, table, history=False)
            values = tbl.distinct_values(column, with_counts=counts, ignore_spaces=not keep_spaces)
    except TabularError as e:
        fail(e)
    if counts:
        output_rows(values, as_json=json_out, title=f"{table}.{column}")
        return
    if json_out:
        output_rows([{column: v} for v in values], as_json=True)
        return
    for value in values:
        console.print("" if value is None else str(value), markup=False, highlight=False)
