"""Weighted log-odds ratios with an informative Dirichlet prior.

Each (item, group) cell is compared against the same item in every other
group combined. Pseudo-counts proportional to the item's background rate keep
every smoothed cell strictly positive, and the log-odds ratio is divided by
its standard error so that frequent and rare items are on the same scale.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .records import InvalidInputError, Observation, ScoredRow

RowLike = Union[Observation, Tuple[Hashable, Hashable, float]]
CellKey = Tuple[Hashable, Hashable]

LOG_ODDS_COLUMNS: Tuple[str, ...] = ("log_odds", "variance", "log_odds_weighted")


@dataclass(frozen=True)
class LogOddsConfig:
    """Prior settings for `score_weighted_log_odds`."""

    # Total pseudo-count mass; None uses the grand total (empirical Bayes).
    prior_strength: Optional[float] = None
    uninformative: bool = False
    # Share of the background rate spread evenly over items; keeps zero-count items positive.
    uniform_share: float = 0.01

    def validate(self) -> None:
        if self.prior_strength is not None and not (
            math.isfinite(self.prior_strength) and self.prior_strength > 0
        ):
            raise ValueError("prior_strength must be a positive finite number.")
        if not 0.0 < self.uniform_share <= 1.0:
            raise ValueError("uniform_share must fall within (0, 1].")


def score_weighted_log_odds(
    rows: Iterable[RowLike],
    config: Optional[LogOddsConfig] = None,
) -> List[ScoredRow]:
    """Score every distinct (item, group) pair in `rows`.

    Args:
        rows: Observations or plain ``(item, group, count)`` triples. Duplicate
            pairs are summed before scoring.
        config: Optional prior configuration.

    Returns:
        One ScoredRow per distinct pair, in first-seen order.

    Raises:
        InvalidInputError: if the input is empty, a row is malformed, the
            counts sum to zero, or fewer than two distinct items are present.
    """
    cfg = config or LogOddsConfig()
    cfg.validate()

    cells = _aggregate(rows)
    if not cells:
        raise InvalidInputError("at least one observation is required.")

    item_totals: Dict[Hashable, float] = defaultdict(float)
    group_totals: Dict[Hashable, float] = defaultdict(float)
    for (item, group), count in cells.items():
        item_totals[item] += count
        group_totals[group] += count
    grand_total = sum(item_totals.values())

    if grand_total <= 0:
        raise InvalidInputError("counts sum to zero; odds are undefined.")
    if len(item_totals) < 2:
        raise InvalidInputError("at least two distinct items are required to form an odds ratio.")

    alphas, alpha_total = _prior(item_totals, grand_total, cfg)

    scored: List[ScoredRow] = []
    for (item, group), n_ij in cells.items():
        n_i = item_totals[item]
        n_j = group_totals[group]
        alpha_i = alphas[item]
        alpha_rest = alpha_total - alpha_i

        in_item = n_ij + alpha_i
        in_rest = (n_j - n_ij) + alpha_rest
        out_item = (n_i - n_ij) + alpha_i
        out_rest = ((grand_total - n_j) - (n_i - n_ij)) + alpha_rest

        log_odds = math.log(in_item / in_rest) - math.log(out_item / out_rest)
        variance = 1.0 / in_item + 1.0 / in_rest + 1.0 / out_item + 1.0 / out_rest
        scored.append(
            ScoredRow(
                item=item,
                group=group,
                count=n_ij,
                log_odds=log_odds,
                variance=variance,
                log_odds_weighted=log_odds / math.sqrt(variance),
            )
        )
    return scored


def bind_log_odds(
    frame: pd.DataFrame,
    set_col: str,
    feature_col: str,
    n_col: str,
    config: Optional[LogOddsConfig] = None,
) -> pd.DataFrame:
    """Return `frame` aggregated per (feature, set) with log-odds columns appended."""
    missing = [col for col in (set_col, feature_col, n_col) if col not in frame.columns]
    if missing:
        raise InvalidInputError(f"missing columns: {', '.join(missing)}")

    triples = zip(frame[feature_col], frame[set_col], frame[n_col])
    scored = score_weighted_log_odds(triples, config)

    columns = {
        set_col: [row.group for row in scored],
        feature_col: [row.item for row in scored],
        n_col: [row.count for row in scored],
    }
    for name in LOG_ODDS_COLUMNS:
        columns[name] = [getattr(row, name) for row in scored]
    return pd.DataFrame(columns)


def _aggregate(rows: Iterable[RowLike]) -> Dict[CellKey, float]:
    cells: Dict[CellKey, float] = {}
    for idx, row in enumerate(rows):
        item, group, count = _unpack(row, idx)
        key = (item, group)
        cells[key] = cells.get(key, 0.0) + count
    return cells


def _unpack(row: RowLike, idx: int) -> Tuple[Hashable, Hashable, float]:
    if isinstance(row, Observation):
        item, group, raw_count = row.item, row.group, row.count
    else:
        fields: Sequence = tuple(row)
        if len(fields) != 3:
            raise InvalidInputError(f"expected (item, group, count), got {len(fields)} fields.", idx)
        item, group, raw_count = fields

    if _is_missing(item) or _is_missing(group):
        raise InvalidInputError("item and group keys are required.", idx)
    if _is_missing(raw_count):
        raise InvalidInputError("count is missing.", idx)
    try:
        count = float(raw_count)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"count {raw_count!r} is not numeric.", idx) from exc
    if not math.isfinite(count) or count < 0:
        raise InvalidInputError(f"count must be a finite non-negative number, got {raw_count!r}.", idx)
    return item, group, count


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _prior(
    item_totals: Dict[Hashable, float],
    grand_total: float,
    cfg: LogOddsConfig,
) -> Tuple[Dict[Hashable, float], float]:
    """Return per-item pseudo-counts and their sum."""
    n_items = len(item_totals)
    if cfg.uninformative:
        return {item: 1.0 for item in item_totals}, float(n_items)

    strength = cfg.prior_strength if cfg.prior_strength is not None else grand_total
    # Background rates depend only on count shares, so the default prior scales with the counts.
    share = cfg.uniform_share
    alphas = {
        item: strength * ((1.0 - share) * total / grand_total + share / n_items)
        for item, total in item_totals.items()
    }
    return alphas, strength


__all__ = [
    "LOG_ODDS_COLUMNS",
    "LogOddsConfig",
    "bind_log_odds",
    "score_weighted_log_odds",
]
