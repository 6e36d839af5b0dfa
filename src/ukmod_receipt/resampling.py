from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import KFold, ShuffleSplit

from .utils.logger import get_logger

Split = Tuple[np.ndarray, np.ndarray]


@dataclass
class ResamplePlan:
    """Train/test partition plus resamples over the training rows.

    Split indices are positions into ``train`` (which has a fresh index).
    """
    train: pd.DataFrame
    test: pd.DataFrame
    mc_splits: List[Split] = field(default_factory=list)
    cv_splits: List[Split] = field(default_factory=list)


class ResamplePlanner:
    """Stratified initial split, Monte-Carlo CV and V-fold CV from one seed.

    Defaults follow rsample: 25 Monte-Carlo resamples holding out 25% of
    the training rows each time, and 5 folds.
    """

    def __init__(
        self,
        prop: float = 0.8,
        strata: str = "year",
        seed: int = 42,
        mc_times: int = 25,
        mc_assessment: float = 0.25,
        n_folds: int = 5,
    ):
        if not 0 < prop < 1:
            raise ValueError(f"prop must be in (0, 1), got {prop}")
        self.prop = prop
        self.strata = strata
        self.seed = seed
        self.mc_times = mc_times
        self.mc_assessment = mc_assessment
        self.n_folds = n_folds
        self.logger = get_logger(self.__class__.__name__)

    def initial_split(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Split each stratum independently at ``prop`` and recombine."""
        rng = np.random.default_rng(self.seed)
        train_pos: list = []
        test_pos: list = []

        positions = np.arange(len(df))
        for _, stratum in pd.Series(positions).groupby(df[self.strata].to_numpy()):
            shuffled = rng.permutation(stratum.to_numpy())
            n_train = int(np.floor(len(shuffled) * self.prop))
            train_pos.append(shuffled[:n_train])
            test_pos.append(shuffled[n_train:])

        train_idx = np.sort(np.concatenate(train_pos)) if train_pos else np.array([], dtype=int)
        test_idx = np.sort(np.concatenate(test_pos)) if test_pos else np.array([], dtype=int)
        return (
            df.iloc[train_idx].reset_index(drop=True),
            df.iloc[test_idx].reset_index(drop=True),
        )

    def mc_cv(self, train: pd.DataFrame) -> List[Split]:
        splitter = ShuffleSplit(
            n_splits=self.mc_times, test_size=self.mc_assessment, random_state=self.seed
        )
        return list(splitter.split(train))

    def vfold_cv(self, train: pd.DataFrame) -> List[Split]:
        splitter = KFold(n_splits=self.n_folds, shuffle=True, random_state=self.seed)
        return list(splitter.split(train))

    def plan(self, df: pd.DataFrame) -> ResamplePlan:
        train, test = self.initial_split(df)
        plan = ResamplePlan(
            train=train,
            test=test,
            mc_splits=self.mc_cv(train),
            cv_splits=self.vfold_cv(train),
        )
        self.logger.info(
            f"Split {len(df):,} rows into train={len(train):,} / test={len(test):,}; "
            f"{len(plan.mc_splits)} Monte-Carlo resamples, {len(plan.cv_splits)} folds"
        )
        return plan
