from dataclasses import dataclass
from typing import Optional, Tuple

import pandas as pd


@dataclass(frozen=True)
class CountDataset:
    """Raw gene counts together with the sample (and optional gene) annotation."""

    counts: pd.DataFrame  # genes x samples
    samples: pd.DataFrame  # indexed by sample id
    genes: Optional[pd.DataFrame] = None  # indexed by gene id

    @property
    def shape(self) -> Tuple[int, int]:
        return self.counts.shape

    @property
    def sample_ids(self) -> Tuple[str, ...]:
        return tuple(str(sample) for sample in self.counts.columns)

    @property
    def gene_ids(self) -> Tuple[str, ...]:
        return tuple(str(gene) for gene in self.counts.index)

    def with_counts(self, counts: pd.DataFrame) -> "CountDataset":
        """Return a copy restricted to the genes kept in `counts`."""
        genes = self.genes.reindex(counts.index) if self.genes is not None else None
        return CountDataset(counts=counts, samples=self.samples, genes=genes)
