from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoringSettings:
    case_sensitive: bool = False


@dataclass(frozen=True)
class RankedRow:
    score: int
    text: str
    rowid: int | None = None
