"""Static configuration for count-table locations and column names."""

from __future__ import annotations

from pathlib import Path


# Default directories used by the Typer CLI; callers may override these.
DEFAULT_DATA_ROOT = Path("data/raw")
DEFAULT_PLOTS_ROOT = Path("plots")

DEFAULT_COUNTS_PATH = DEFAULT_DATA_ROOT / "counts.tsv"
DEFAULT_SAMPLES_PATH = DEFAULT_DATA_ROOT / "samples.tsv"

# ---------------------------------------------------------------------------
# Column names shared by the long-format tables.

GENE_COLUMN = "gene"
SAMPLE_COLUMN = "sample"
COUNT_COLUMN = "count"
CONDITION_COLUMN = "condition"

TABLE_SEPARATOR = "\t"


__all__ = [
    "CONDITION_COLUMN",
    "COUNT_COLUMN",
    "DEFAULT_COUNTS_PATH",
    "DEFAULT_DATA_ROOT",
    "DEFAULT_PLOTS_ROOT",
    "DEFAULT_SAMPLES_PATH",
    "GENE_COLUMN",
    "SAMPLE_COLUMN",
    "TABLE_SEPARATOR",
]
