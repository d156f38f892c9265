"""Probe implementations and helpers."""

from .base import ArrayLike, BaseProbe, TargetLike, WeightsLike
from .random_forest import RandomForestConfig, RandomForestProbe
from .random_forest_tuner import RandomForestOptunaTuner, RandomForestTuningConfig

__all__ = [
    "ArrayLike",
    "TargetLike",
    "WeightsLike",
    "BaseProbe",
    "RandomForestConfig",
    "RandomForestProbe",
    "RandomForestOptunaTuner",
    "RandomForestTuningConfig",
]
