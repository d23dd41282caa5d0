import pytest

from fuzzy_rank.exceptions import NoAlignmentError
from fuzzy_rank.models import RankedRow, ScoringSettings
from fuzzy_rank.search import (
    alignment_score,
    char_predicate,
    fuzzy_score,
    rank,
    rightmost_alignment,
)


def test_rightmost_alignment_prefers_trailing_matches() -> None:
    positions = rightmost_alignment("pnvim", "Project/something/nvim")

    assert positions == (0, 18, 19, 20, 21)


def test_rightmost_alignment_respects_successor_position() -> None:
    # The trailing "i" in "lib" cannot be used because "m" must come after it.
    positions = rightmost_alignment("pnvim", "Project/nvim/lib/lua")

    assert positions == (0, 8, 9, 10, 11)


def test_rightmost_alignment_handles_recurring_characters() -> None:
    text = "Proasdlmasd/o"

    positions = rightmost_alignment("olmo", text)

    assert positions == (2, 6, 7, 12)
    assert all(left < right for left, right in zip(positions, positions[1:]))


@pytest.mark.parametrize(
    ("query", "text"),
    [
        ("convim", "Projects/config/nvim"),
        ("datab", "Projects/neo-api-rs/database.rs"),
        ("nvim-t-", "Projects/nvim-traveller-rs"),
        ("de", "gateways/delete.yaml"),
    ],
)
def test_alignment_positions_increase_and_match(query: str, text: str) -> None:
    matches = char_predicate(case_sensitive=False)

    positions = rightmost_alignment(query, text)

    assert len(positions) == len(query)
    assert list(positions) == sorted(set(positions))
    for char, position in zip(query, positions):
        assert matches(text[position], char)


def test_worked_examples_produce_documented_scores() -> None:
    assert fuzzy_score("pnvim", "Project/something/nvim") == 27
    assert fuzzy_score("pnvim", "Project/nvim/lib/lua") == 57


def test_matches_near_the_end_rank_first() -> None:
    near_end = fuzzy_score("pnvim", "Project/something/nvim")
    near_start = fuzzy_score("pnvim", "Project/nvim/lib/lua")

    assert near_end < near_start


def test_longer_text_is_penalised_for_the_same_relative_match() -> None:
    assert fuzzy_score("vim", "vimx") < fuzzy_score("vim", "vimxxxx")
    assert fuzzy_score("ab", "xab") < fuzzy_score("ab", "xxxxab-")


def test_empty_query_scores_zero() -> None:
    assert fuzzy_score("", "") == 0
    assert fuzzy_score("", "anything at all") == 0
    assert rightmost_alignment("", "abc") == ()


def test_score_is_deterministic() -> None:
    scores = {fuzzy_score("neo", "Projects/neo-api-rs/") for _ in range(5)}

    assert len(scores) == 1


def test_shifting_matches_towards_the_end_never_raises_the_score() -> None:
    early = fuzzy_score("abc", "abcxxxxx")
    middle = fuzzy_score("abc", "xxabcxxx")
    late = fuzzy_score("abc", "xxxxxabc")

    assert late <= middle <= early
    assert late == 3


def test_case_insensitive_mode_ignores_query_case() -> None:
    assert fuzzy_score("PNVIM", "project/nvim") == fuzzy_score(
        "pnvim", "project/nvim"
    )


def test_case_insensitive_mode_folds_per_character() -> None:
    # A whole-string casefold would turn "ß" into "ss" and shift positions.
    assert rightmost_alignment("ẞa", "xßa") == (1, 2)


def test_case_sensitive_mode_rejects_mismatched_case() -> None:
    with pytest.raises(NoAlignmentError) as exc_info:
        fuzzy_score("PRnvim", "Projects/config/nvim", case_sensitive=True)

    assert exc_info.value.case_sensitive is True
    assert exc_info.value.query == "PRnvim"


def test_case_sensitive_mode_scores_exact_case() -> None:
    assert fuzzy_score("Pnvim", "Project/nvim", case_sensitive=True) == 11 + 3 + 2 + 1


def test_no_alignment_raises_instead_of_scoring() -> None:
    with pytest.raises(NoAlignmentError, match="'xyz' is not a subsequence of 'abc'"):
        fuzzy_score("xyz", "abc")


@pytest.mark.parametrize(
    ("query", "text"),
    [
        ("a", ""),
        ("abcd", "abc"),
        ("ba", "ab"),
    ],
)
def test_no_alignment_edge_cases(query: str, text: str) -> None:
    with pytest.raises(NoAlignmentError):
        rightmost_alignment(query, text)


def test_no_alignment_error_is_a_lookup_error() -> None:
    with pytest.raises(LookupError):
        fuzzy_score("z", "a")


def test_alignment_score_sums_distance_from_end() -> None:
    assert alignment_score((0, 8, 9, 10, 11), 20) == 57
    assert alignment_score((), 10) == 0


def test_rank_orders_by_score_and_skips_non_matches() -> None:
    texts = [
        "Project/nvim/lib/lua",
        "README.md",
        "Project/something/nvim",
    ]

    results = rank("pnvim", texts)

    assert results == [
        RankedRow(score=27, text="Project/something/nvim"),
        RankedRow(score=57, text="Project/nvim/lib/lua"),
    ]


def test_rank_breaks_ties_alphabetically() -> None:
    results = rank("a", ["ba", "ca", "aa"])

    assert [row.text for row in results] == ["aa", "ba", "ca"]


def test_rank_honours_case_sensitive_settings() -> None:
    texts = ["Nvim", "nvim"]

    results = rank("nv", texts, settings=ScoringSettings(case_sensitive=True))

    assert [row.text for row in results] == ["nvim"]
