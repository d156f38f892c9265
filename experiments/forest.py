from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import pandas as pd

from src.datahub.count_dataset import CountDataset
from src.expression.differential import log_normalized
from src.pipelines.reshape import filter_by_total
from src.probes.random_forest import RandomForestConfig, RandomForestProbe
from src.probes.random_forest_tuner import RandomForestOptunaTuner, RandomForestTuningConfig

from .plots import PlotSaveConfig, plot_importances

SECTION = "forest"


def build_feature_matrix(
    dataset: CountDataset,
    min_total_count: int = 10,
    max_genes: Optional[int] = 500,
) -> pd.DataFrame:
    """Samples x genes matrix of log2 normalised counts, most variable genes first."""
    counts = filter_by_total(dataset.counts, min_total_count)
    if counts.empty:
        raise ValueError(f"No genes reach a total count of {min_total_count}.")
    logged = log_normalized(counts)
    variances = logged.var(axis=1).sort_values(ascending=False, kind="mergesort")
    if max_genes is not None:
        variances = variances.head(max_genes)
    return logged.loc[variances.index].T


def encode_target(samples: pd.DataFrame, target: str) -> Tuple[np.ndarray, Optional[Tuple[str, ...]]]:
    """Numeric columns are used as-is; categorical ones become sorted level codes."""
    if target not in samples.columns:
        raise ValueError(f"Sample table has no '{target}' column.")
    column = samples[target]
    if column.isna().any():
        raise ValueError(f"Every sample needs a '{target}' value.")
    if pd.api.types.is_numeric_dtype(column):
        return column.to_numpy(dtype=np.float64), None

    levels = tuple(sorted(column.astype(str).unique()))
    codes = {level: idx for idx, level in enumerate(levels)}
    return np.asarray([codes[value] for value in column.astype(str)], dtype=np.float64), levels


def run_forest(
    dataset: CountDataset,
    target: str,
    config: Optional[RandomForestConfig] = None,
    tune: bool = False,
    tuning_trials: int = 25,
    max_genes: Optional[int] = 500,
    n_repeats: int = 10,
    save_config: Optional[PlotSaveConfig] = None,
    top: int = 20,
) -> pd.DataFrame:
    """Regress `target` on expression and rank genes by forest importance."""
    base_config = config or RandomForestConfig(oob_score=True, random_state=42)
    features = build_feature_matrix(dataset, max_genes=max_genes)
    y, levels = encode_target(dataset.samples.loc[features.index], target)
    if levels is not None:
        print(f"[forest] Encoding '{target}' levels as codes: {dict(enumerate(levels))}.")
    print(f"[forest] Fitting random forest on {features.shape[0]} samples x {features.shape[1]} genes.")

    if tune:
        tuner = RandomForestOptunaTuner(base_config, RandomForestTuningConfig(trials=tuning_trials))
        tuner.tune(features.to_numpy(), y)
        probe = tuner.make_probe()
        print(f"[forest] Tuned config: {tuner.best_config}")
    else:
        probe = RandomForestProbe(base_config)

    probe.fit(features, y)
    if probe.oob_score is not None:
        print(f"[forest] Out-of-bag R² = {probe.oob_score:.3f}")

    gene_names = list(features.columns)
    impurity = probe.feature_importances(gene_names)
    permuted = probe.permutation_importances(
        features,
        y,
        feature_names=gene_names,
        n_repeats=n_repeats,
        random_state=base_config.random_state,
    )
    table = permuted.join(impurity, how="left").sort_values("importance_mean", ascending=False, kind="mergesort")
    table.index.name = "gene"
    print(f"[forest] Top {min(top, len(table))} genes by permutation importance:")
    print(table.head(top).to_string())

    plot_importances(
        table,
        "importance_mean",
        f"Permutation importance for '{target}'",
        top=top,
        save_to=save_config.for_plot(SECTION, "permutation_importance") if save_config else None,
    )
    plot_importances(
        table.sort_values("importance", ascending=False, kind="mergesort"),
        "importance",
        f"Impurity importance for '{target}'",
        top=top,
        save_to=save_config.for_plot(SECTION, "impurity_importance") if save_config else None,
    )
    return table
