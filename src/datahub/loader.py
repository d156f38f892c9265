from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd

from .count_dataset import CountDataset
from .tables import read_annotation_table, read_count_table


def load_count_dataset(
    counts_path: Path,
    samples_path: Path,
    genes_path: Optional[Path] = None,
) -> CountDataset:
    """Read the count matrix and annotations, aligning samples to the matrix columns."""
    counts = read_count_table(counts_path)
    samples = read_annotation_table(samples_path)
    genes = read_annotation_table(genes_path) if genes_path is not None else None
    return align_dataset(counts, samples, genes)


def align_dataset(
    counts: pd.DataFrame,
    samples: pd.DataFrame,
    genes: Optional[pd.DataFrame] = None,
) -> CountDataset:
    """Order sample annotation like the count columns; reject mismatched ids."""
    count_ids = [str(sample) for sample in counts.columns]
    sample_ids = {str(sample) for sample in samples.index}

    missing = [sample for sample in count_ids if sample not in sample_ids]
    extra = sorted(sample_ids.difference(count_ids))
    if missing or extra:
        raise ValueError(
            f"Sample ids differ between count and sample tables (missing annotation: {missing}, "
            f"unused annotation: {extra})"
        )

    aligned_samples = samples.copy()
    aligned_samples.index = aligned_samples.index.astype(str)
    aligned_samples = aligned_samples.loc[count_ids]

    aligned_genes: Optional[pd.DataFrame] = None
    if genes is not None:
        aligned_genes = genes.copy()
        aligned_genes.index = aligned_genes.index.astype(str)
        aligned_genes = aligned_genes.reindex(counts.index.astype(str))

    return CountDataset(counts=counts, samples=aligned_samples, genes=aligned_genes)
