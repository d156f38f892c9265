from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestRegressor
from sklearn.inspection import permutation_importance

from .base import ArrayLike, BaseProbe, TargetLike, WeightsLike
from .helpers import ensure_1d_array, ensure_2d_array, ensure_sample_weights


@dataclass
class RandomForestConfig:
    """Hyper-parameters forwarded to scikit-learn's RandomForestRegressor."""

    n_estimators: int = 500
    criterion: str = "squared_error"
    max_depth: Optional[int] = None
    min_samples_split: Union[int, float] = 2
    min_samples_leaf: Union[int, float] = 1
    min_weight_fraction_leaf: float = 0.0
    # One third of the features per split, the usual default for regression forests.
    max_features: Optional[Union[int, float, str]] = 1.0 / 3.0
    max_leaf_nodes: Optional[int] = None
    min_impurity_decrease: float = 0.0
    bootstrap: bool = True
    oob_score: bool = False
    n_jobs: Optional[int] = None
    random_state: Optional[int] = None
    max_samples: Optional[Union[int, float]] = None
    ccp_alpha: float = 0.0

    def to_regressor_kwargs(self) -> Dict[str, Any]:
        """Return kwargs compatible with RandomForestRegressor."""
        return dict(
            n_estimators=self.n_estimators,
            criterion=self.criterion,
            max_depth=self.max_depth,
            min_samples_split=self.min_samples_split,
            min_samples_leaf=self.min_samples_leaf,
            min_weight_fraction_leaf=self.min_weight_fraction_leaf,
            max_features=self.max_features,
            max_leaf_nodes=self.max_leaf_nodes,
            min_impurity_decrease=self.min_impurity_decrease,
            bootstrap=self.bootstrap,
            oob_score=self.oob_score,
            n_jobs=self.n_jobs,
            random_state=self.random_state,
            max_samples=self.max_samples,
            ccp_alpha=self.ccp_alpha,
        )


class RandomForestProbe(BaseProbe):
    """Random forest regressor used to rank features by importance."""

    config: RandomForestConfig
    model: Optional[RandomForestRegressor]

    def __init__(self, config: Optional[RandomForestConfig] = None) -> None:
        self.config = config or RandomForestConfig()
        self.model = None

    def fit(
        self,
        features: ArrayLike,
        targets: TargetLike,
        sample_weights: WeightsLike = None,
    ) -> "RandomForestProbe":
        X = ensure_2d_array(features)
        y = ensure_1d_array(targets)
        if X.shape[0] != y.shape[0]:
            raise ValueError(f"Feature rows ({X.shape[0]}) and target count ({y.shape[0]}) must match")

        weights = ensure_sample_weights(sample_weights, X.shape[0])

        self.model = RandomForestRegressor(**self.config.to_regressor_kwargs())
        self.model.fit(X, y, sample_weight=weights)
        return self

    def predict(self, features: ArrayLike) -> np.ndarray:
        model = self._require_model()
        X = ensure_2d_array(features)
        return np.asarray(model.predict(X))

    @property
    def oob_score(self) -> Optional[float]:
        """Out-of-bag R², available when the config enables ``oob_score``."""
        model = self._require_model()
        if not self.config.oob_score:
            return None
        return float(model.oob_score_)

    def feature_importances(self, feature_names: Optional[Sequence[str]] = None) -> pd.Series:
        """Impurity-based importances, largest first."""
        model = self._require_model()
        names = self._feature_names(feature_names, model.n_features_in_)
        importances = pd.Series(model.feature_importances_, index=names, name="importance")
        return importances.sort_values(ascending=False, kind="mergesort")

    def permutation_importances(
        self,
        features: ArrayLike,
        targets: TargetLike,
        feature_names: Optional[Sequence[str]] = None,
        n_repeats: int = 10,
        random_state: Optional[int] = None,
    ) -> pd.DataFrame:
        """Mean/std drop in R² when each feature is shuffled, largest mean first."""
        model = self._require_model()
        X = ensure_2d_array(features)
        y = ensure_1d_array(targets)
        if X.shape[0] != y.shape[0]:
            raise ValueError(f"Feature rows ({X.shape[0]}) and target count ({y.shape[0]}) must match")

        result = permutation_importance(
            model,
            X,
            y,
            n_repeats=n_repeats,
            random_state=random_state,
            n_jobs=self.config.n_jobs,
        )
        names = self._feature_names(feature_names, X.shape[1])
        frame = pd.DataFrame(
            {"importance_mean": result.importances_mean, "importance_std": result.importances_std},
            index=names,
        )
        return frame.sort_values("importance_mean", ascending=False, kind="mergesort")

    def _require_model(self) -> RandomForestRegressor:
        if self.model is None:
            raise RuntimeError("RandomForestProbe has not been fitted yet.")
        return self.model

    @staticmethod
    def _feature_names(feature_names: Optional[Sequence[str]], n_features: int) -> list[str]:
        if feature_names is None:
            return [f"feature_{idx}" for idx in range(n_features)]
        names = [str(name) for name in feature_names]
        if len(names) != n_features:
            raise ValueError(f"Expected {n_features} feature names, got {len(names)}")
        return names
