"""Pivoting, joining and filtering helpers shared by the analysis sections."""

from __future__ import annotations

from typing import Optional, Sequence

import pandas as pd

from src.datahub.config import COUNT_COLUMN, GENE_COLUMN, SAMPLE_COLUMN


def filter_low_counts(counts: pd.DataFrame, min_total: int = 10, min_samples: int = 1) -> pd.DataFrame:
    """Keep genes with at least `min_total` reads in at least `min_samples` samples."""
    if min_total < 0:
        raise ValueError("min_total cannot be negative.")
    if min_samples < 1:
        raise ValueError("min_samples must be at least 1.")
    keep = (counts >= min_total).sum(axis=1) >= min_samples
    return counts.loc[keep]


def filter_by_total(counts: pd.DataFrame, min_total: int = 10) -> pd.DataFrame:
    """Keep genes whose counts summed over all samples reach `min_total`."""
    if min_total < 0:
        raise ValueError("min_total cannot be negative.")
    return counts.loc[counts.sum(axis=1) >= min_total]


def to_long(counts: pd.DataFrame) -> pd.DataFrame:
    """Pivot a genes x samples matrix into (gene, sample, count) rows."""
    wide = counts.rename_axis(index=GENE_COLUMN, columns=None).reset_index()
    return wide.melt(id_vars=GENE_COLUMN, var_name=SAMPLE_COLUMN, value_name=COUNT_COLUMN)


def attach_sample_annotation(
    long: pd.DataFrame,
    samples: pd.DataFrame,
    columns: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """Left-join sample metadata columns onto a long count table."""
    selected = list(columns) if columns is not None else list(samples.columns)
    unknown = [column for column in selected if column not in samples.columns]
    if unknown:
        raise ValueError(f"Unknown sample annotation columns: {unknown}")

    annotation = samples[selected].rename_axis(SAMPLE_COLUMN).reset_index()
    annotation[SAMPLE_COLUMN] = annotation[SAMPLE_COLUMN].astype(str)
    joined = long.assign(**{SAMPLE_COLUMN: long[SAMPLE_COLUMN].astype(str)})
    return joined.merge(annotation, on=SAMPLE_COLUMN, how="left", validate="many_to_one")


def group_counts(long: pd.DataFrame, group_col: str) -> pd.DataFrame:
    """Sum counts per (gene, group); the result feeds the log-odds scorer."""
    if group_col not in long.columns:
        raise ValueError(f"Column '{group_col}' not found; attach the sample annotation first.")
    if long[group_col].isna().any():
        raise ValueError(f"Column '{group_col}' has samples without a group.")
    grouped = long.groupby([GENE_COLUMN, group_col], sort=True, observed=True)[COUNT_COLUMN].sum()
    return grouped.reset_index()


def top_n(frame: pd.DataFrame, by: str, n: int, group_col: Optional[str] = None, ascending: bool = False) -> pd.DataFrame:
    """Return the top `n` rows by `by`, optionally within each `group_col`."""
    if n < 1:
        raise ValueError("n must be at least 1.")
    ordered = frame.sort_values(by, ascending=ascending, kind="mergesort")
    if group_col is None:
        return ordered.head(n).reset_index(drop=True)
    return ordered.groupby(group_col, sort=True, observed=True).head(n).reset_index(drop=True)


__all__ = ["attach_sample_annotation", "filter_by_total", "filter_low_counts", "group_counts", "to_long", "top_n"]
