"""Unit tests for the weighted log-odds scorer."""

from __future__ import annotations

import math
from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.metrics.log_odds import LOG_ODDS_COLUMNS, LogOddsConfig, bind_log_odds, score_weighted_log_odds
from src.metrics.records import InvalidInputError, Observation, ScoredRow


def _by_key(rows: list[ScoredRow]) -> dict[tuple, ScoredRow]:
    return {(row.item, row.group): row for row in rows}


MIRRORED = [
    ("gene1", "groupA", 100),
    ("gene1", "groupB", 1),
    ("gene2", "groupA", 1),
    ("gene2", "groupB", 100),
]


# ---------------------------------------------------------------------------
# Worked example


def test_mirrored_genes_score_in_opposite_directions() -> None:
    scored = _by_key(score_weighted_log_odds(MIRRORED))

    assert scored[("gene1", "groupA")].log_odds_weighted > 0
    assert scored[("gene1", "groupB")].log_odds_weighted < 0
    assert scored[("gene2", "groupA")].log_odds_weighted < 0
    assert scored[("gene2", "groupB")].log_odds_weighted > 0
    assert scored[("gene1", "groupA")].log_odds_weighted == pytest.approx(
        scored[("gene2", "groupB")].log_odds_weighted
    )


def test_empirical_prior_matches_hand_computation() -> None:
    # n = 202 and both genes hold half of it, so each gene gets 202 * 0.5 = 101 pseudo-counts.
    row = _by_key(score_weighted_log_odds(MIRRORED))[("gene1", "groupA")]

    expected_log_odds = math.log(201 / 102) - math.log(102 / 201)
    expected_variance = 2 / 201 + 2 / 102
    assert row.count == pytest.approx(100.0)
    assert row.log_odds == pytest.approx(expected_log_odds)
    assert row.variance == pytest.approx(expected_variance)
    assert row.log_odds_weighted == pytest.approx(expected_log_odds / math.sqrt(expected_variance))


def test_uninformative_prior_uses_one_pseudo_count_per_item() -> None:
    row = _by_key(score_weighted_log_odds(MIRRORED, LogOddsConfig(uninformative=True)))[("gene1", "groupA")]

    assert row.log_odds == pytest.approx(math.log(101 / 2) - math.log(2 / 101))
    assert row.variance == pytest.approx(2 / 101 + 2 / 2)


def test_prior_strength_controls_shrinkage() -> None:
    weak = _by_key(score_weighted_log_odds(MIRRORED, LogOddsConfig(prior_strength=2.0)))
    strong = _by_key(score_weighted_log_odds(MIRRORED, LogOddsConfig(prior_strength=2000.0)))

    key = ("gene1", "groupA")
    assert weak[key].log_odds > strong[key].log_odds > 0


def test_accepts_observation_records() -> None:
    rows = [Observation(item, group, count) for item, group, count in MIRRORED]
    assert _by_key(score_weighted_log_odds(rows)) == _by_key(score_weighted_log_odds(MIRRORED))


# ---------------------------------------------------------------------------
# Properties


def test_duplicate_pairs_are_summed() -> None:
    rows = [("g1", "A", 3), ("g1", "A", 4), ("g1", "B", 2), ("g2", "A", 5), ("g2", "B", 9)]
    scored = score_weighted_log_odds(rows)

    assert len(scored) == 4
    assert _by_key(scored)[("g1", "A")].count == pytest.approx(7.0)


def test_row_count_matches_distinct_pairs() -> None:
    rng = np.random.default_rng(0)
    rows = [
        (f"g{rng.integers(0, 12)}", f"s{rng.integers(0, 4)}", int(rng.integers(0, 50)))
        for _ in range(200)
    ]
    distinct = {(item, group) for item, group, _ in rows}
    scored = score_weighted_log_odds(rows)

    assert len(scored) == len(distinct)
    assert {(row.item, row.group) for row in scored} == distinct


def test_concentrated_item_is_positive_in_its_group_and_negative_elsewhere() -> None:
    rows = [
        ("marker", "A", 50),
        ("marker", "B", 0),
        ("marker", "C", 0),
        ("house", "A", 40),
        ("house", "B", 45),
        ("house", "C", 42),
        ("other", "A", 10),
        ("other", "B", 12),
        ("other", "C", 9),
    ]
    scored = _by_key(score_weighted_log_odds(rows))

    assert scored[("marker", "A")].log_odds_weighted > 0
    assert scored[("marker", "B")].log_odds_weighted < 0
    assert scored[("marker", "C")].log_odds_weighted < 0


def test_two_group_log_odds_negate_exactly() -> None:
    rows = [("g1", "A", 17), ("g1", "B", 5), ("g2", "A", 8), ("g2", "B", 30), ("g3", "A", 2), ("g3", "B", 0)]
    scored = _by_key(score_weighted_log_odds(rows))

    for item in ("g1", "g2", "g3"):
        assert scored[(item, "A")].log_odds == pytest.approx(-scored[(item, "B")].log_odds, abs=1e-12)


def test_full_ranking_is_scale_invariant_on_random_tables() -> None:
    rng = np.random.default_rng(7)
    for _ in range(50):
        table = rng.integers(0, 60, size=(8, 3))
        rows = [(f"g{i}", f"s{j}", int(table[i, j])) for i in range(8) for j in range(3)]
        scaled = [(item, group, count * 10) for item, group, count in rows]

        base = _by_key(score_weighted_log_odds(rows))
        bigger = _by_key(score_weighted_log_odds(scaled))
        for key, row in base.items():
            assert bigger[key].log_odds == pytest.approx(row.log_odds, abs=1e-9)
            assert bigger[key].log_odds_weighted == pytest.approx(math.sqrt(10) * row.log_odds_weighted, abs=1e-9)

        keys = list(base)
        for left in keys:
            for right in keys:
                gap = base[left].log_odds_weighted - base[right].log_odds_weighted
                if gap > 1e-9:
                    assert bigger[left].log_odds_weighted > bigger[right].log_odds_weighted


def test_smoothed_cells_stay_positive_for_zero_count_items() -> None:
    rows = [("silent", "A", 0), ("silent", "B", 0), ("only_a", "A", 12), ("only_b", "B", 7)]
    scored = score_weighted_log_odds(rows)

    for row in scored:
        assert math.isfinite(row.log_odds)
        assert math.isfinite(row.variance) and row.variance > 0
        assert math.isfinite(row.log_odds_weighted)


def test_single_group_input_is_scored() -> None:
    scored = score_weighted_log_odds([("g1", "A", 4), ("g2", "A", 6)])
    assert all(math.isfinite(row.log_odds_weighted) for row in scored)


# ---------------------------------------------------------------------------
# Invalid input


def test_empty_input_raises() -> None:
    with pytest.raises(InvalidInputError):
        score_weighted_log_odds([])


def test_all_zero_counts_raise() -> None:
    with pytest.raises(InvalidInputError):
        score_weighted_log_odds([("g1", "A", 0), ("g2", "B", 0)])


def test_negative_count_reports_row_index() -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        score_weighted_log_odds([("g1", "A", 3), ("g2", "A", -1)])
    assert excinfo.value.row_index == 1
    assert "row 1" in str(excinfo.value)


@pytest.mark.parametrize(
    "bad_row",
    [
        (None, "A", 3),
        ("g2", None, 3),
        ("g2", "A", None),
        ("g2", "A", float("nan")),
        ("g2", "A", float("inf")),
        ("g2", "A", "many"),
        ("g2", "A"),
    ],
)
def test_malformed_rows_raise(bad_row: tuple) -> None:
    with pytest.raises(InvalidInputError) as excinfo:
        score_weighted_log_odds([("g1", "A", 3), bad_row])
    assert excinfo.value.row_index == 1


def test_single_item_raises() -> None:
    with pytest.raises(InvalidInputError):
        score_weighted_log_odds([("g1", "A", 3), ("g1", "B", 5)])


def test_invalid_prior_strength_rejected() -> None:
    with pytest.raises(ValueError):
        score_weighted_log_odds(MIRRORED, LogOddsConfig(prior_strength=0.0))
    with pytest.raises(ValueError):
        score_weighted_log_odds(MIRRORED, LogOddsConfig(prior_strength=float("nan")))
    with pytest.raises(ValueError):
        score_weighted_log_odds(MIRRORED, LogOddsConfig(uniform_share=0.0))


# ---------------------------------------------------------------------------
# DataFrame front end


def test_bind_log_odds_appends_columns() -> None:
    frame = pd.DataFrame(MIRRORED + [("gene1", "groupA", 0)], columns=["gene", "condition", "count"])
    scored = bind_log_odds(frame, "condition", "gene", "count")

    assert list(scored.columns) == ["condition", "gene", "count", "log_odds", "variance", "log_odds_weighted"]
    assert tuple(scored.columns[-3:]) == LOG_ODDS_COLUMNS
    assert len(scored) == 4
    top = scored.sort_values("log_odds_weighted", ascending=False).iloc[0]
    assert (top["gene"], top["condition"]) in {("gene1", "groupA"), ("gene2", "groupB")}


def test_bind_log_odds_requires_columns() -> None:
    frame = pd.DataFrame(MIRRORED, columns=["gene", "condition", "count"])
    with pytest.raises(InvalidInputError):
        bind_log_odds(frame, "condition", "gene", "reads")


def test_bind_log_odds_rejects_missing_values() -> None:
    frame = pd.DataFrame(MIRRORED, columns=["gene", "condition", "count"])
    frame.loc[2, "count"] = np.nan
    with pytest.raises(InvalidInputError) as excinfo:
        bind_log_odds(frame, "condition", "gene", "count")
    assert excinfo.value.row_index == 2
