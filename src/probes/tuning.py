"""Tuner protocol shared by the regression forest search."""

from __future__ import annotations

from typing import Protocol

import numpy as np

from .base import BaseProbe


class ProbeTuner(Protocol):
    """Searches forest hyper-parameters against continuous expression targets."""

    def tune(self, features: np.ndarray, targets: np.ndarray) -> None:
        """Score candidate settings by cross-validated squared error (no-op if already tuned)."""

    def make_probe(self) -> BaseProbe:
        """Return an unfitted regressor built from the best settings found."""
