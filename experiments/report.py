from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from src.datahub.count_dataset import CountDataset
from src.expression.differential import DifferentialExpressionConfig, DifferentialResult
from src.metrics.log_odds import LogOddsConfig
from src.probes.random_forest import RandomForestConfig

from .differential import run_differential
from .forest import run_forest
from .log_odds import run_log_odds
from .plots import PlotSaveConfig


@dataclass(frozen=True)
class ReportResults:
    differential: DifferentialResult
    importances: pd.DataFrame
    log_odds: pd.DataFrame


def run_report(
    dataset: CountDataset,
    de_config: Optional[DifferentialExpressionConfig] = None,
    forest_target: Optional[str] = None,
    forest_config: Optional[RandomForestConfig] = None,
    log_odds_config: Optional[LogOddsConfig] = None,
    save_config: Optional[PlotSaveConfig] = None,
) -> ReportResults:
    """Run the three analysis sections on the same dataset, one after another."""
    de_cfg = de_config or DifferentialExpressionConfig()
    print("[report] Section 1/3: differential expression.")
    differential = run_differential(dataset, de_cfg, save_config=save_config)

    print("[report] Section 2/3: random forest variable importance.")
    importances = run_forest(
        dataset,
        forest_target or de_cfg.design_factor,
        config=forest_config,
        save_config=save_config,
    )

    print("[report] Section 3/3: weighted log odds.")
    scored = run_log_odds(
        dataset,
        de_cfg.design_factor,
        config=log_odds_config,
        min_total_count=de_cfg.min_total_count,
        save_config=save_config,
    )
    return ReportResults(differential=differential, importances=importances, log_odds=scored)
