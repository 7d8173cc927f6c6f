"""
CLI utility helpers: output formatting and connection management.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from tabular.core.connection import TabularDb
from tabular.core.errors import TabularError

console = Console()
err_console = Console(stderr=True)


# ── Connection helper ────────────────────────────────────────────────────


def open_db(sqlite: str | None = None) -> TabularDb:
    """Open a SQLite file when ``sqlite`` is given, else the configured database."""
    if sqlite:
        return TabularDb.sqlite(sqlite)
    return TabularDb.from_settings()


# ── Output helpers ───────────────────────────────────────────────────────


def fail(error: TabularError) -> NoReturn:
    """Print ``error`` in red and exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red] ({error.__class__.__name__}): {error.message}")
    raise typer.Exit(code=1)


def output_rows(rows: list[dict[str, Any]], *, as_json: bool = False, title: str = "") -> None:
    """Render rows as a Rich table (or JSON)."""
    if as_json:
        console.print_json(json.dumps(rows, default=str))
        return
    if not rows:
        console.print("[dim]No rows.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(str(col), overflow="fold")
    for row in rows:
        table.add_row(*("" if v is None else str(v) for v in row.values()))
    console.print(table)
