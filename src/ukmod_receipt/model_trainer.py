import warnings
from typing import Any, Sequence

import numpy as np
import pandas as pd
from lightgbm import LGBMClassifier
from sklearn.metrics import roc_auc_score

from .preprocessor import Preprocessor
from .utils.logger import get_logger

# Grid parameter names mapped onto LightGBM arguments.
PARAM_NAMES = {
    "trees": "n_estimators",
    "tree_depth": "max_depth",
    "min_n": "min_child_samples",
    "learn_rate": "learning_rate",
    "loss_reduction": "min_split_gain",
}

# LightGBM caps leaves per tree independently of depth.
MAX_NUM_LEAVES = 131072


def to_lgbm_params(candidate: dict[str, Any]) -> dict[str, Any]:
    params = {}
    for name, value in candidate.items():
        key = PARAM_NAMES.get(name, name)
        if key in ("n_estimators", "max_depth", "min_child_samples"):
            value = int(value)
        params[key] = value
    # Depth-wise capacity: a tree of depth d may grow 2**d leaves.
    depth = params.get("max_depth")
    if depth is not None and depth > 0:
        params.setdefault("num_leaves", min(2 ** depth, MAX_NUM_LEAVES))
    return params


class ModelTrainer:
    """
    Fits the boosted-tree classifier on one analysis set and scores it on the
    matching assessment set. The model matrix is fit on analysis rows only.
    """

    def __init__(
        self,
        params: dict[str, Any],
        features: Sequence[str],
        random_state: int = 42,
    ):
        self.params = dict(params)
        self.features = list(features)
        self.random_state = random_state
        self.logger = get_logger(self.__class__.__name__)

    def _make_model(self) -> LGBMClassifier:
        params = dict(self.params)
        params.setdefault("random_state", self.random_state)
        params.setdefault("verbosity", -1)
        # Parallelism lives in the tuning pool, one thread per fit.
        params.setdefault("n_jobs", 1)
        return LGBMClassifier(**params)

    def fit(self, X_df: pd.DataFrame, y: np.ndarray):
        """Fit transformer + model; returns both."""
        warnings.filterwarnings("ignore", category=UserWarning, module="lightgbm")

        transformer = Preprocessor(self.features).build(X_df)
        X = transformer.fit_transform(X_df)

        model = self._make_model()
        model.fit(X, np.asarray(y).astype(int))
        return transformer, model

    def score_resample(
        self,
        X_df: pd.DataFrame,
        y: np.ndarray,
        analysis_idx: np.ndarray,
        assessment_idx: np.ndarray,
    ) -> float:
        """ROC-AUC on the assessment rows; NaN if they hold a single class."""
        y = np.asarray(y).astype(int)
        y_val = y[assessment_idx]
        if len(np.unique(y_val)) < 2:
            self.logger.warning("Assessment set has one class; ROC-AUC undefined")
            return float("nan")

        transformer, model = self.fit(
            X_df.iloc[analysis_idx].reset_index(drop=True), y[analysis_idx]
        )
        X_val = transformer.transform(X_df.iloc[assessment_idx].reset_index(drop=True))
        proba = model.predict_proba(X_val)[:, 1]
        return float(roc_auc_score(y_val, proba))


def evaluate_candidate(
    candidate: dict[str, Any],
    base_params: dict[str, Any],
    features: Sequence[str],
    X_df: pd.DataFrame,
    y: np.ndarray,
    analysis_idx: np.ndarray,
    assessment_idx: np.ndarray,
    random_state: int = 42,
) -> float:
    """Worker entry point for one (resample, grid point) task."""
    params = dict(base_params)
    params.update(to_lgbm_params(candidate))
    trainer = ModelTrainer(params=params, features=features, random_state=random_state)
    return trainer.score_resample(X_df, y, analysis_idx, assessment_idx)
