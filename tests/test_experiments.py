"""End-to-end tests for the report sections, plot saving and the CLI."""

from __future__ import annotations

from pathlib import Path
import sys

import pandas as pd
import pytest
from typer.testing import CliRunner

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from conftest import UP_GENES
from experiments.forest import build_feature_matrix, encode_target, run_forest
from experiments.log_odds import grouped_observations, run_log_odds
from experiments.plots import PlotSaveConfig
from experiments.plots.save_config import PlotSaveDestinations
from experiments.report import run_report
from main import app
from src.datahub.count_dataset import CountDataset
from src.datahub.tables import write_table
from src.expression.differential import DifferentialExpressionConfig
from src.probes.random_forest import RandomForestConfig


def _html_only(tmp_path: Path) -> PlotSaveConfig:
    return PlotSaveConfig(base_dir=tmp_path / "plots", run_tag="test", save_static=False, save_html=True)


# ---------------------------------------------------------------------------
# Plot destinations


def test_plot_save_config_paths(tmp_path: Path) -> None:
    destination = PlotSaveConfig(base_dir=tmp_path, run_tag="run1").for_plot("forest", "importance")

    assert isinstance(destination, PlotSaveDestinations)
    assert destination.png_path == tmp_path / "run1" / "forest" / "importance.png"
    assert destination.html_path == tmp_path / "run1" / "forest" / "importance.html"


# ---------------------------------------------------------------------------
# Log-odds section


def test_grouped_observations_sum_per_condition(count_dataset: CountDataset) -> None:
    observations = grouped_observations(count_dataset, "condition", min_total_count=0)

    assert list(observations.columns) == ["gene", "condition", "count"]
    assert len(observations) == 2 * count_dataset.shape[0]
    total = observations["count"].sum()
    assert total == count_dataset.counts.to_numpy().sum()


def test_run_log_odds_ranks_upregulated_genes_for_treated(count_dataset: CountDataset, tmp_path: Path) -> None:
    save_config = _html_only(tmp_path)
    scored = run_log_odds(count_dataset, "condition", save_config=save_config)

    assert {"log_odds", "variance", "log_odds_weighted"}.issubset(scored.columns)
    assert scored["log_odds_weighted"].is_monotonic_decreasing
    treated = scored[scored["condition"] == "treated"]
    assert set(treated.head(5)["gene"]).intersection(UP_GENES)
    assert (tmp_path / "plots" / "test" / "log_odds" / "weighted_log_odds.html").exists()


# ---------------------------------------------------------------------------
# Forest section


def test_build_feature_matrix_orients_samples_by_genes(count_dataset: CountDataset) -> None:
    features = build_feature_matrix(count_dataset, max_genes=25)

    assert features.shape == (count_dataset.shape[1], 25)
    assert list(features.index) == list(count_dataset.counts.columns)


def test_encode_target_numeric_and_categorical(count_dataset: CountDataset) -> None:
    dose, dose_levels = encode_target(count_dataset.samples, "dose")
    assert dose_levels is None
    assert dose.tolist() == [0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 2.0, 2.0]

    condition, levels = encode_target(count_dataset.samples, "condition")
    assert levels == ("control", "treated")
    assert condition.tolist() == [0.0] * 4 + [1.0] * 4

    with pytest.raises(ValueError):
        encode_target(count_dataset.samples, "tissue")


def test_run_forest_returns_importance_table(count_dataset: CountDataset, tmp_path: Path) -> None:
    table = run_forest(
        count_dataset,
        "condition",
        config=RandomForestConfig(n_estimators=50, random_state=0),
        max_genes=30,
        n_repeats=2,
        save_config=_html_only(tmp_path),
    )

    assert isinstance(table, pd.DataFrame)
    assert list(table.columns) == ["importance_mean", "importance_std", "importance"]
    assert len(table) == 30
    assert table["importance"].sum() == pytest.approx(1.0)
    forest_dir = tmp_path / "plots" / "test" / "forest"
    assert (forest_dir / "permutation_importance.html").exists()
    assert (forest_dir / "impurity_importance.html").exists()


# ---------------------------------------------------------------------------
# Full report


def test_run_report_runs_all_sections(count_dataset: CountDataset, tmp_path: Path) -> None:
    results = run_report(
        count_dataset,
        de_config=DifferentialExpressionConfig(n_cpus=1),
        forest_config=RandomForestConfig(n_estimators=30, random_state=0),
        save_config=_html_only(tmp_path),
    )

    assert results.differential.contrast == ("condition", "treated", "control")
    assert results.differential.summary()["significant"] > 0
    assert not results.importances.empty
    assert set(results.log_odds["condition"]) == {"control", "treated"}
    run_dir = tmp_path / "plots" / "test"
    assert (run_dir / "differential" / "volcano.html").exists()
    assert (run_dir / "differential" / "ma.html").exists()


# ---------------------------------------------------------------------------
# CLI


def _write_dataset(dataset: CountDataset, root: Path) -> tuple[Path, Path]:
    counts_path = root / "counts.tsv"
    samples_path = root / "samples.tsv"
    write_table(dataset.counts.rename_axis("gene"), counts_path)
    write_table(dataset.samples, samples_path)
    return counts_path, samples_path


def test_cli_log_odds_writes_plots(count_dataset: CountDataset, tmp_path: Path) -> None:
    counts_path, samples_path = _write_dataset(count_dataset, tmp_path)
    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "log-odds",
            "--counts",
            str(counts_path),
            "--samples",
            str(samples_path),
            "--plots-root",
            str(tmp_path / "plots"),
            "--plots-tag",
            "cli",
            "--no-save-static",
            "--top",
            "3",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "[log-odds]" in result.output
    assert (tmp_path / "plots" / "cli" / "log_odds" / "weighted_log_odds.html").exists()


def test_cli_reports_bad_group_as_usage_error(count_dataset: CountDataset, tmp_path: Path) -> None:
    counts_path, samples_path = _write_dataset(count_dataset, tmp_path)
    result = CliRunner().invoke(
        app,
        ["log-odds", "--counts", str(counts_path), "--samples", str(samples_path), "--group", "tissue"],
    )
    assert result.exit_code == 2


def test_cli_reports_missing_files_as_usage_error(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        app,
        ["de", "--counts", str(tmp_path / "nope.tsv"), "--samples", str(tmp_path / "nope2.tsv")],
    )
    assert result.exit_code == 2
