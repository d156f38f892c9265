"""Shared fixtures: a small simulated RNA-seq experiment."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.datahub.count_dataset import CountDataset

N_GENES = 200
UP_GENES = ("gene_000", "gene_001", "gene_002", "gene_003", "gene_004")
DOWN_GENES = ("gene_005", "gene_006", "gene_007", "gene_008", "gene_009")


def simulate_counts(seed: int = 7, n_genes: int = N_GENES, dispersion: float = 0.05) -> CountDataset:
    """Negative-binomial counts for 4 control vs 4 treated samples with 10 regulated genes."""
    rng = np.random.default_rng(seed)
    genes = [f"gene_{idx:03d}" for idx in range(n_genes)]
    samples = [f"ctrl_{idx}" for idx in range(1, 5)] + [f"trt_{idx}" for idx in range(1, 5)]
    treated = np.array([name.startswith("trt") for name in samples])

    base_means = rng.lognormal(mean=5.0, sigma=1.0, size=n_genes)
    means = np.repeat(base_means[:, None], len(samples), axis=1)
    means[:5, treated] *= 8.0
    means[5:10, treated] /= 8.0

    size = 1.0 / dispersion
    values = rng.negative_binomial(size, size / (size + means))
    counts = pd.DataFrame(values.astype(np.int64), index=genes, columns=samples)

    annotation = pd.DataFrame(
        {
            "condition": ["control"] * 4 + ["treated"] * 4,
            "dose": [0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 2.0, 2.0],
        },
        index=pd.Index(samples, name="sample"),
    )
    return CountDataset(counts=counts, samples=annotation)


@pytest.fixture(scope="session")
def count_dataset() -> CountDataset:
    return simulate_counts()
