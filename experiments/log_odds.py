from __future__ import annotations

from typing import Optional

import pandas as pd

from src.datahub.config import CONDITION_COLUMN, COUNT_COLUMN, GENE_COLUMN
from src.datahub.count_dataset import CountDataset
from src.metrics.log_odds import LogOddsConfig, bind_log_odds
from src.pipelines.reshape import attach_sample_annotation, filter_by_total, group_counts, to_long, top_n

from .plots import PlotSaveConfig, plot_log_odds

SECTION = "log_odds"


def grouped_observations(
    dataset: CountDataset,
    group_col: str = CONDITION_COLUMN,
    min_total_count: int = 10,
) -> pd.DataFrame:
    """(gene, group, count) table summed over the samples of each group."""
    counts = filter_by_total(dataset.counts, min_total_count)
    long = attach_sample_annotation(to_long(counts), dataset.samples, [group_col])
    return group_counts(long, group_col)


def run_log_odds(
    dataset: CountDataset,
    group_col: str = CONDITION_COLUMN,
    config: Optional[LogOddsConfig] = None,
    min_total_count: int = 10,
    save_config: Optional[PlotSaveConfig] = None,
    top: int = 10,
) -> pd.DataFrame:
    """Score genes by weighted log odds of belonging to each sample group."""
    observations = grouped_observations(dataset, group_col, min_total_count)
    print(
        f"[log-odds] Scoring {observations[GENE_COLUMN].nunique()} genes across "
        f"{observations[group_col].nunique()} '{group_col}' groups."
    )
    scored = bind_log_odds(observations, group_col, GENE_COLUMN, COUNT_COLUMN, config)
    scored = scored.sort_values("log_odds_weighted", ascending=False, kind="mergesort").reset_index(drop=True)

    print(f"[log-odds] Top {top} genes per group:")
    print(top_n(scored, "log_odds_weighted", top, group_col=group_col).to_string(index=False))

    plot_log_odds(
        scored,
        group_col,
        f"Genes most specific to each '{group_col}' group",
        top=top,
        save_to=save_config.for_plot(SECTION, "weighted_log_odds") if save_config else None,
    )
    return scored
