"""Optuna-backed hyperparameter tuning for the RandomForest probe."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import optuna
from sklearn.ensemble import RandomForestRegressor
from sklearn.model_selection import KFold, cross_val_score

from .helpers import ensure_1d_array, ensure_2d_array
from .random_forest import RandomForestConfig, RandomForestProbe
from .tuning import ProbeTuner


@dataclass
class RandomForestTuningConfig:
    """Configuration controlling the Optuna tuning pass."""

    trials: int = 25
    random_seed: int = 42
    cv_folds: int = 5
    subsample: int = 2000  # cap tuning cost on large sample tables


class RandomForestOptunaTuner(ProbeTuner):
    """Search forest hyper-parameters once by cross-validated squared error."""

    def __init__(
        self,
        base_config: Optional[RandomForestConfig] = None,
        tuning_config: Optional[RandomForestTuningConfig] = None,
    ) -> None:
        self.base_config = base_config or RandomForestConfig()
        self.tuning_config = tuning_config or RandomForestTuningConfig()
        self._best_config: Optional[RandomForestConfig] = None
        self._study: Optional[optuna.Study] = None

    def tune(self, features: np.ndarray, targets: np.ndarray) -> None:
        if self._best_config is not None:
            return

        X, y = self._prepare_subset(ensure_2d_array(features), ensure_1d_array(targets))
        folds = min(self.tuning_config.cv_folds, X.shape[0])
        if folds < 2 or np.unique(y).size < 2:
            self._best_config = self.base_config
            return

        sampler = optuna.samplers.TPESampler(seed=self.tuning_config.random_seed)
        self._study = optuna.create_study(direction="maximize", sampler=sampler, study_name="random_forest_probe")
        self._study.optimize(lambda trial: self._objective(trial, X, y, folds), n_trials=self.tuning_config.trials)

        params = self._study.best_params
        self._best_config = RandomForestConfig(
            n_estimators=params["n_estimators"],
            max_depth=params["max_depth"],
            max_features=params["max_features"],
            min_samples_split=params["min_samples_split"],
            min_samples_leaf=params["min_samples_leaf"],
            bootstrap=True,
            oob_score=self.base_config.oob_score,
            n_jobs=self.base_config.n_jobs,
            random_state=self.base_config.random_state,
        )

    def make_probe(self) -> RandomForestProbe:
        config = self._best_config or self.base_config
        return RandomForestProbe(config)

    @property
    def best_config(self) -> Optional[RandomForestConfig]:
        return self._best_config

    # --- internals -----------------------------------------------------

    def _objective(self, trial: optuna.Trial, X: np.ndarray, y: np.ndarray, folds: int) -> float:
        config = RandomForestConfig(
            n_estimators=trial.suggest_int("n_estimators", 100, 1000, step=100),
            max_depth=trial.suggest_int("max_depth", 2, 16),
            max_features=trial.suggest_categorical("max_features", ["sqrt", "log2", 1.0]),
            min_samples_split=trial.suggest_int("min_samples_split", 2, 8),
            min_samples_leaf=trial.suggest_int("min_samples_leaf", 1, 4),
            bootstrap=True,
            n_jobs=self.base_config.n_jobs,
            random_state=self.base_config.random_state,
        )
        splitter = KFold(n_splits=folds, shuffle=True, random_state=self.tuning_config.random_seed)
        scores = cross_val_score(
            RandomForestRegressor(**config.to_regressor_kwargs()),
            X,
            y,
            cv=splitter,
            scoring="neg_mean_squared_error",
        )
        return float(np.mean(scores))

    def _prepare_subset(self, features: np.ndarray, targets: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        if features.shape[0] <= self.tuning_config.subsample:
            return features, targets
        rng = np.random.default_rng(self.tuning_config.random_seed)
        idx = rng.choice(features.shape[0], size=self.tuning_config.subsample, replace=False)
        return features[idx], targets[idx]
