"""Differential expression through PyDESeq2's negative-binomial GLM."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd
from pydeseq2.dds import DeseqDataSet
from pydeseq2.default_inference import DefaultInference
from pydeseq2.ds import DeseqStats
from pydeseq2.preprocessing import deseq2_norm

from src.datahub.config import CONDITION_COLUMN
from src.datahub.count_dataset import CountDataset
from src.pipelines.reshape import filter_by_total

RESULT_COLUMNS: Tuple[str, ...] = ("baseMean", "log2FoldChange", "lfcSE", "stat", "pvalue", "padj")


@dataclass
class DifferentialExpressionConfig:
    """Settings forwarded to DeseqDataSet / DeseqStats."""

    design_factor: str = CONDITION_COLUMN
    reference: Optional[str] = None
    treated: Optional[str] = None
    alpha: float = 0.05
    min_total_count: int = 10
    shrink: bool = True
    refit_cooks: bool = True
    n_cpus: Optional[int] = None

    def validate(self) -> None:
        if not 0 < self.alpha < 1:
            raise ValueError("alpha must fall within (0, 1).")
        if self.min_total_count < 0:
            raise ValueError("min_total_count cannot be negative.")


@dataclass(frozen=True)
class DifferentialResult:
    """Wald-test results for a single two-level contrast."""

    factor: str
    treated: str
    reference: str
    alpha: float
    results: pd.DataFrame
    shrunk: Optional[pd.DataFrame]
    size_factors: pd.Series

    @property
    def contrast(self) -> Tuple[str, str, str]:
        return (self.factor, self.treated, self.reference)

    def table(self, shrunk: bool = True) -> pd.DataFrame:
        """Return the shrunk table when available, else the raw MLE table."""
        if shrunk and self.shrunk is not None:
            return self.shrunk
        return self.results

    def significant(self, lfc_threshold: float = 0.0, shrunk: bool = True) -> pd.DataFrame:
        """Genes with padj below alpha and |log2FoldChange| above the threshold, by padj."""
        table = self.table(shrunk)
        mask = (table["padj"] < self.alpha) & (table["log2FoldChange"].abs() > lfc_threshold)
        return table.loc[mask.fillna(False)].sort_values("padj")

    def summary(self) -> Dict[str, int]:
        table = self.results
        hits = self.significant(shrunk=False)
        return {
            "tested": int(len(table)),
            "significant": int(len(hits)),
            "up": int((hits["log2FoldChange"] > 0).sum()),
            "down": int((hits["log2FoldChange"] < 0).sum()),
            "padj_na": int(table["padj"].isna().sum()),
        }


def run_differential_expression(
    dataset: CountDataset,
    config: Optional[DifferentialExpressionConfig] = None,
) -> DifferentialResult:
    """Fit the DESeq2 model on `dataset` and test treated vs reference.

    Genes whose total count falls below ``min_total_count`` are dropped
    before fitting. Reference/treated default to the first/second factor
    level in sorted order when unset.
    """
    cfg = config or DifferentialExpressionConfig()
    cfg.validate()

    reference, treated = _resolve_levels(dataset.samples, cfg)
    factor = cfg.design_factor

    counts = filter_by_total(dataset.counts, cfg.min_total_count)
    if counts.empty:
        raise ValueError(f"No genes reach a total count of {cfg.min_total_count}.")

    metadata = dataset.samples[[factor]].copy()
    levels = [reference] + sorted(
        str(level) for level in metadata[factor].astype(str).unique() if str(level) != reference
    )
    # Ordered categories put the reference level first in the design matrix.
    metadata[factor] = pd.Categorical(metadata[factor].astype(str), categories=levels)

    inference = DefaultInference(n_cpus=cfg.n_cpus)
    dds = DeseqDataSet(
        counts=counts.T,
        metadata=metadata,
        design=f"~{factor}",
        refit_cooks=cfg.refit_cooks,
        inference=inference,
        quiet=True,
    )
    dds.deseq2()

    stats = DeseqStats(
        dds,
        contrast=[factor, treated, reference],
        alpha=cfg.alpha,
        inference=inference,
        quiet=True,
    )
    stats.summary()
    results = stats.results_df.copy()

    shrunk: Optional[pd.DataFrame] = None
    if cfg.shrink:
        stats.lfc_shrink()
        shrunk = stats.results_df.copy()

    _, size_factors = normalized_counts(counts)
    return DifferentialResult(
        factor=factor,
        treated=treated,
        reference=reference,
        alpha=cfg.alpha,
        results=results,
        shrunk=shrunk,
        size_factors=size_factors,
    )


def normalized_counts(counts: pd.DataFrame) -> Tuple[pd.DataFrame, pd.Series]:
    """Median-of-ratios normalisation of a genes x samples matrix."""
    normed, size_factors = deseq2_norm(counts.T)
    normed_frame = pd.DataFrame(np.asarray(normed), index=counts.columns, columns=counts.index).T
    return normed_frame, pd.Series(np.asarray(size_factors), index=counts.columns, name="size_factor")


def log_normalized(counts: pd.DataFrame, pseudocount: float = 1.0) -> pd.DataFrame:
    """log2 of normalised counts plus a pseudocount."""
    if pseudocount <= 0:
        raise ValueError("pseudocount must be positive.")
    normed, _ = normalized_counts(counts)
    return np.log2(normed + pseudocount)


def _resolve_levels(samples: pd.DataFrame, cfg: DifferentialExpressionConfig) -> Tuple[str, str]:
    if cfg.design_factor not in samples.columns:
        raise ValueError(f"Sample table has no '{cfg.design_factor}' column.")
    column = samples[cfg.design_factor]
    if column.isna().any():
        raise ValueError(f"Every sample needs a '{cfg.design_factor}' value.")

    levels = sorted(column.astype(str).unique())
    if len(levels) < 2:
        raise ValueError(f"'{cfg.design_factor}' must have at least two levels, found {levels}.")

    reference = cfg.reference if cfg.reference is not None else levels[0]
    if cfg.treated is not None:
        treated = cfg.treated
    else:
        others = [level for level in levels if level != reference]
        treated = others[0] if others else reference

    for level in (reference, treated):
        if level not in levels:
            raise ValueError(f"Level '{level}' not found in '{cfg.design_factor}' (levels: {levels}).")
    if reference == treated:
        raise ValueError("treated and reference levels must differ.")
    return reference, treated


__all__ = [
    "RESULT_COLUMNS",
    "DifferentialExpressionConfig",
    "DifferentialResult",
    "log_normalized",
    "normalized_counts",
    "run_differential_expression",
]
