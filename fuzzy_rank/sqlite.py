from __future__ import annotations

import logging
import sqlite3

from fuzzy_rank.exceptions import InvalidEncodingError
from fuzzy_rank.models import RankedRow, ScoringSettings
from fuzzy_rank.search import fuzzy_score

logger = logging.getLogger("fuzzy-rank.sqlite")

FUNCTION_NAME = "fuzzy_score"
LIKE_ESCAPE = "\\"
_LIKE_SPECIAL = frozenset({"%", "_", LIKE_ESCAPE})


def like_pattern(query: str) -> str:
    """Build the ``LIKE`` pattern matching texts that contain ``query`` as a subsequence.

    Use it with ``ESCAPE '\\'`` so literal ``%`` and ``_`` in the query stay literal.
    """
    if not query:
        return "%"
    escaped = (LIKE_ESCAPE + char if char in _LIKE_SPECIAL else char for char in query)
    return "%" + "%".join(escaped) + "%"


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _coerce_text(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidEncodingError(
                f"blob argument is not valid UTF-8: {exc.reason} at byte {exc.start}"
            ) from exc
    raise TypeError(
        f"{FUNCTION_NAME}() expects text arguments, got {type(value).__name__}"
    )


class FuzzyScoreExtension:
    """The ``fuzzy_score(query, text)`` SQL function bound to one connection.

    Holds the connection's case-sensitivity setting and keeps SQLite's
    ``PRAGMA case_sensitive_like`` in step with it, so the ``LIKE``
    pre-filter and the score always use the same comparison mode. The
    function is not registered as deterministic: its result changes with
    the case setting, so SQLite must not keep it in index expressions.
    """

    def __init__(
        self,
        connection: sqlite3.Connection,
        *,
        settings: ScoringSettings | None = None,
        name: str = FUNCTION_NAME,
    ) -> None:
        self._connection = connection
        self._settings = settings or ScoringSettings()
        self.name = name

    @property
    def settings(self) -> ScoringSettings:
        return self._settings

    def install(self) -> None:
        self._connection.create_function(self.name, 2, self)
        self._apply_pragma()
        logger.info(
            "Registered %s() (case_sensitive=%s)",
            self.name,
            self._settings.case_sensitive,
        )

    def set_case_sensitive(self, case_sensitive: bool) -> None:
        self._settings = ScoringSettings(case_sensitive=case_sensitive)
        self._apply_pragma()

    def _apply_pragma(self) -> None:
        value = "ON" if self._settings.case_sensitive else "OFF"
        # The pragma has no getter, so this object is the source of truth.
        self._connection.execute(f"PRAGMA case_sensitive_like = {value}")
        logger.debug("case_sensitive_like = %s", value)

    def __call__(self, query: object, text: object) -> int | None:
        if query is None or text is None:
            return None
        settings = self._settings
        return fuzzy_score(
            _coerce_text(query),
            _coerce_text(text),
            case_sensitive=settings.case_sensitive,
        )

    def search_table(
        self,
        table: str,
        column: str,
        query: str,
        *,
        limit: int | None = None,
    ) -> list[RankedRow]:
        """Rank the rows of ``table`` whose ``column`` contains ``query`` in order."""
        column_sql = quote_identifier(column)
        # LIKE sees numbers in their text form, so the scorer must too.
        text_sql = f"CAST({column_sql} AS TEXT)"
        sql = (
            f"SELECT rowid, {text_sql} AS text, {self.name}(?, {text_sql}) AS score "
            f"FROM {quote_identifier(table)} "
            f"WHERE {text_sql} LIKE ? ESCAPE '{LIKE_ESCAPE}' "
            "ORDER BY score, text"
        )
        parameters: list[object] = [query, like_pattern(query)]
        if limit is not None:
            sql += " LIMIT ?"
            parameters.append(limit)

        rows = self._connection.execute(sql, parameters).fetchall()
        return [
            RankedRow(score=score, text=_coerce_text(text), rowid=rowid)
            for rowid, text, score in rows
        ]


def register(
    connection: sqlite3.Connection,
    *,
    settings: ScoringSettings | None = None,
    name: str = FUNCTION_NAME,
) -> FuzzyScoreExtension:
    extension = FuzzyScoreExtension(connection, settings=settings, name=name)
    extension.install()
    return extension
