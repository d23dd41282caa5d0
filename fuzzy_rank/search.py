from __future__ import annotations

from collections.abc import Callable, Iterable

from fuzzy_rank.exceptions import NoAlignmentError
from fuzzy_rank.models import RankedRow, ScoringSettings

CharPredicate = Callable[[str, str], bool]


def _exact_char_equal(left: str, right: str) -> bool:
    return left == right


def _folded_char_equal(left: str, right: str) -> bool:
    return left == right or left.casefold() == right.casefold()


def char_predicate(*, case_sensitive: bool) -> CharPredicate:
    """Return the per-character equality used for both query and text."""
    if case_sensitive:
        return _exact_char_equal
    return _folded_char_equal


def rightmost_alignment(
    query: str, text: str, *, case_sensitive: bool = False
) -> tuple[int, ...]:
    """Align every query character to the latest position the order allows.

    The last query character takes the rightmost matching position in
    ``text``; each earlier character takes the rightmost match strictly
    before its successor. Raises ``NoAlignmentError`` when ``query`` is not a
    subsequence of ``text``.
    """
    if not query:
        return ()
    if len(query) > len(text):
        raise NoAlignmentError(query, text, case_sensitive=case_sensitive)

    matches = char_predicate(case_sensitive=case_sensitive)
    positions = [0] * len(query)
    cursor = len(text)

    for query_index in range(len(query) - 1, -1, -1):
        char = query[query_index]
        index = cursor - 1
        while index >= 0 and not matches(text[index], char):
            index -= 1
        if index < 0:
            raise NoAlignmentError(query, text, case_sensitive=case_sensitive)
        positions[query_index] = index
        cursor = index

    return tuple(positions)


def alignment_score(positions: Iterable[int], text_length: int) -> int:
    """Sum each position's distance from the last character of the text."""
    last = text_length - 1
    return sum(last - position for position in positions)


def fuzzy_score(query: str, text: str, *, case_sensitive: bool = False) -> int:
    """Score a candidate using rightmost subsequence alignment; lower scores are better."""
    positions = rightmost_alignment(query, text, case_sensitive=case_sensitive)
    return alignment_score(positions, len(text))


def rank(
    query: str,
    texts: Iterable[str],
    *,
    settings: ScoringSettings | None = None,
) -> list[RankedRow]:
    settings = settings or ScoringSettings()
    scored_results: list[RankedRow] = []
    for text in texts:
        try:
            score = fuzzy_score(query, text, case_sensitive=settings.case_sensitive)
        except NoAlignmentError:
            continue
        scored_results.append(RankedRow(score=score, text=text))

    scored_results.sort(key=lambda row: (row.score, row.text))
    return scored_results
