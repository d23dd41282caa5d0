from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from pathlib import Path

import typer

from fuzzy_rank import __version__
from fuzzy_rank.exceptions import FuzzyRankError, InvalidEncodingError
from fuzzy_rank.models import RankedRow, ScoringSettings
from fuzzy_rank.search import rank
from fuzzy_rank.sqlite import register

__all__ = [
    "cli",
    "run",
]


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(f"fuzzy-rank {__version__}")
    raise typer.Exit()


cli = typer.Typer(
    add_completion=False,
    help="Rank text by end-weighted fuzzy subsequence score (best match first).",
)


def _read_lines(stream: Iterable[str]) -> list[str]:
    try:
        return [line.rstrip("\r\n") for line in stream if line.strip()]
    except UnicodeDecodeError as exc:
        raise InvalidEncodingError(
            f"stdin is not valid UTF-8: {exc.reason} at byte {exc.start}"
        ) from exc


def _open_readonly(database: Path) -> sqlite3.Connection:
    return sqlite3.connect(f"{database.resolve().as_uri()}?mode=ro", uri=True)


def _search_database(
    database: Path,
    table: str,
    column: str,
    query: str,
    *,
    settings: ScoringSettings,
    limit: int | None,
) -> list[RankedRow]:
    connection = _open_readonly(database)
    try:
        extension = register(connection, settings=settings)
        return extension.search_table(table, column, query, limit=limit)
    finally:
        connection.close()


@cli.command()
def run(
    query: str = typer.Argument(..., help="Characters to match, in order."),
    database: Path | None = typer.Option(
        None,
        "--database",
        "-d",
        exists=True,
        dir_okay=False,
        help="SQLite database to search. Reads lines from stdin when omitted.",
    ),
    table: str | None = typer.Option(
        None,
        "--table",
        "-t",
        help="Table to search (requires --database).",
    ),
    column: str | None = typer.Option(
        None,
        "--column",
        "-c",
        help="Text column to match against (requires --database).",
    ),
    case_sensitive: bool = typer.Option(
        False,
        "--case-sensitive/--ignore-case",
        envvar="FUZZY_RANK_CASE_SENSITIVE",
        help="Compare characters exactly instead of case-folded.",
    ),
    limit: int | None = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Maximum number of matches to print.",
    ),
    show_score: bool = typer.Option(
        False,
        "--show-score",
        "-s",
        help="Prefix every match with its score and a tab.",
    ),
    _version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    settings = ScoringSettings(case_sensitive=case_sensitive)

    if database is None:
        if table is not None or column is not None:
            typer.echo("--table and --column require --database.", err=True)
            raise typer.Exit(code=1)
        stdin = typer.get_text_stream("stdin")
        try:
            lines = _read_lines(stdin)
        except InvalidEncodingError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1) from exc
        results = rank(query, lines, settings=settings)
        if limit is not None:
            results = results[:limit]
    else:
        if table is None or column is None:
            typer.echo("--database requires --table and --column.", err=True)
            raise typer.Exit(code=1)
        try:
            results = _search_database(
                database,
                table,
                column,
                query,
                settings=settings,
                limit=limit,
            )
        except (FuzzyRankError, sqlite3.Error) as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1) from exc

    for result in results:
        if show_score:
            typer.echo(f"{result.score}\t{result.text}")
        else:
            typer.echo(result.text)


if __name__ == "__main__":
    cli()
