"""Shared records for weighted log-odds scoring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Optional


class InvalidInputError(ValueError):
    """Raised when an observation table cannot yield a meaningful odds ratio."""

    def __init__(self, message: str, row_index: Optional[int] = None) -> None:
        if row_index is not None:
            message = f"row {row_index}: {message}"
        super().__init__(message)
        self.row_index = row_index


@dataclass(frozen=True)
class Observation:
    """Single (item, group, count) cell of a count table."""

    item: Hashable
    group: Hashable
    count: float


@dataclass(frozen=True)
class ScoredRow:
    """Aggregated cell together with its log-odds statistics."""

    item: Hashable
    group: Hashable
    count: float
    log_odds: float
    variance: float
    log_odds_weighted: float
