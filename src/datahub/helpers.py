from __future__ import annotations

import numpy as np
import pandas as pd


def ensure_count_matrix(frame: pd.DataFrame, *, name: str = "counts") -> pd.DataFrame:
    """Validate a genes x samples matrix of non-negative integer counts."""
    if frame.empty:
        raise ValueError(f"{name} table is empty")
    if not frame.index.is_unique:
        duplicated = frame.index[frame.index.duplicated()].unique().tolist()
        raise ValueError(f"{name} table has duplicated gene ids: {duplicated[:5]}")

    numeric = frame.apply(pd.to_numeric, errors="coerce")
    if numeric.isna().to_numpy().any():
        bad_columns = numeric.columns[numeric.isna().any()].tolist()
        raise ValueError(f"{name} table has missing or non-numeric values in columns {bad_columns}")

    values = numeric.to_numpy(dtype=np.float64)
    if (values < 0).any():
        raise ValueError(f"{name} table contains negative counts")
    if not np.allclose(values, np.round(values)):
        raise ValueError(f"{name} table contains non-integer counts")
    return numeric.round().astype(np.int64)
