"""Readers for the tab-separated count and annotation tables."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from .config import TABLE_SEPARATOR
from .helpers import ensure_count_matrix


def read_count_table(path: Path) -> pd.DataFrame:
    """Read a genes x samples count matrix; the first column holds gene ids."""
    frame = pd.read_csv(path, sep=TABLE_SEPARATOR, index_col=0)
    frame.index = frame.index.astype(str)
    frame.columns = [str(column) for column in frame.columns]
    return ensure_count_matrix(frame, name=path.name)


def read_annotation_table(path: Path) -> pd.DataFrame:
    """Read an annotation table indexed by its first column."""
    frame = pd.read_csv(path, sep=TABLE_SEPARATOR, index_col=0)
    frame.index = frame.index.astype(str)
    if not frame.index.is_unique:
        raise ValueError(f"{path.name} has duplicated ids in its first column")
    return frame


def write_table(frame: pd.DataFrame, path: Path, index: bool = True) -> None:
    """Write a table in the same tab-separated layout the readers expect."""
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, sep=TABLE_SEPARATOR, index=index)


__all__ = ["read_annotation_table", "read_count_table", "write_table"]
