from __future__ import annotations


class FuzzyRankError(Exception):
    """Base class for errors raised while scoring."""


class NoAlignmentError(FuzzyRankError, LookupError):
    """The query is not a subsequence of the text under the active case mode."""

    def __init__(self, query: str, text: str, *, case_sensitive: bool) -> None:
        self.query = query
        self.text = text
        self.case_sensitive = case_sensitive
        mode = "case-sensitive" if case_sensitive else "case-insensitive"
        super().__init__(f"{query!r} is not a subsequence of {text!r} ({mode})")


class InvalidEncodingError(FuzzyRankError, ValueError):
    """A blob argument could not be decoded as UTF-8."""
