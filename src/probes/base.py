"""Common probe interfaces and shared typing aliases."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, Union

import numpy as np
import pandas as pd

ArrayLike = Union[np.ndarray, pd.DataFrame, Sequence[Sequence[float]]]
TargetLike = Union[np.ndarray, pd.Series, Sequence[float]]
WeightsLike = Optional[Union[np.ndarray, pd.Series, Sequence[float]]]


class BaseProbe(Protocol):
    """Protocol describing the minimal surface area for regression probes."""

    def fit(
        self,
        features: ArrayLike,
        targets: TargetLike,
        sample_weights: WeightsLike = None,
    ) -> "BaseProbe": ...

    def predict(self, features: ArrayLike) -> np.ndarray: ...
