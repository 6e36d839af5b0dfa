from __future__ import annotations

import itertools
import os
import time
from dataclasses import dataclass
from typing import Any, Sequence

import joblib
import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from .model_trainer import evaluate_candidate
from .resampling import Split
from .utils.logger import get_logger

# Default search ranges, in the order the grid varies them (first fastest).
# learn_rate and loss_reduction are on a log10 scale.
PARAM_RANGES = {
    "min_n": (2, 40),
    "tree_depth": (1, 15),
    "learn_rate": (-10.0, -1.0),
    "loss_reduction": (-10.0, 1.5),
}
LOG10_PARAMS = ("learn_rate", "loss_reduction")
INTEGER_PARAMS = ("min_n", "tree_depth")


def regular_grid(levels: int = 3) -> pd.DataFrame:
    """Evenly spaced levels per parameter, crossed with min_n varying fastest."""
    values = {}
    for name, (low, high) in PARAM_RANGES.items():
        points = np.linspace(low, high, levels)
        if name in LOG10_PARAMS:
            points = 10 ** points
        if name in INTEGER_PARAMS:
            points = np.round(points).astype(int)
        values[name] = points

    names = list(PARAM_RANGES)
    # itertools.product varies the last iterable fastest, so feed it reversed.
    rows = [dict(zip(reversed(names), combo)) for combo in itertools.product(*(values[n] for n in reversed(names)))]
    return pd.DataFrame(rows, columns=names)


def build_tuning_grid(
    levels: int = 3,
    min_n_values: Sequence[int] = (40, 50, 60),
    tree_depth_values: Sequence[int] = (5, 10, 15),
) -> pd.DataFrame:
    """
    Regular grid with min_n and tree_depth replaced by explicit sequences:
    min_n cycles every row, tree_depth holds each value for ``len(min_n_values)``
    rows. learn_rate and loss_reduction keep their regular-grid values.
    """
    grid = regular_grid(levels)
    n = len(grid)

    min_n = np.tile(np.asarray(min_n_values), int(np.ceil(n / len(min_n_values))))[:n]
    depth_block = np.repeat(np.asarray(tree_depth_values), len(min_n_values))
    tree_depth = np.tile(depth_block, int(np.ceil(n / len(depth_block))))[:n]

    grid["min_n"] = min_n
    grid["tree_depth"] = tree_depth
    grid.insert(0, "config", [f"Preprocessor1_Model{i + 1:02d}" for i in range(n)])
    return grid


def worker_count(core_fraction: float = 0.98) -> int:
    """Near-all cores, keeping a small share for the coordinating process."""
    cores = os.cpu_count() or 1
    return max(1, int(np.floor(core_fraction * cores)))


@dataclass
class TuningResult:
    """All grid points and every per-resample score; no selection applied."""
    grid: pd.DataFrame
    metrics: pd.DataFrame
    features: list
    target: str
    base_params: dict
    n_resamples: int
    elapsed_seconds: float = 0.0

    def collect_metrics(self) -> pd.DataFrame:
        """Mean, count and standard error of each metric per grid point."""
        summary = (
            self.metrics.groupby(["config", ".metric"], sort=False)[".estimate"]
            .agg(mean="mean", n="count", std="std")
            .reset_index()
        )
        summary["std_err"] = summary["std"] / np.sqrt(summary["n"])
        summary = summary.drop(columns="std")
        return self.grid.merge(summary, on="config", how="left")


class GridTuner:
    """Grid search of the boosted-tree classifier over Monte-Carlo resamples."""

    def __init__(
        self,
        features: Sequence[str],
        target: str = "uc_receipt",
        base_params: dict[str, Any] | None = None,
        n_jobs: int | None = None,
        core_fraction: float = 0.98,
        random_state: int = 42,
        verbose: int = 0,
    ):
        self.features = list(features)
        self.target = target
        self.base_params = dict(base_params or {"n_estimators": 1000})
        self.n_jobs = n_jobs if n_jobs is not None else worker_count(core_fraction)
        self.random_state = random_state
        self.verbose = verbose
        self.logger = get_logger(self.__class__.__name__)

    def _prepare(self, train: pd.DataFrame) -> tuple[pd.DataFrame, np.ndarray, np.ndarray]:
        """Drop rows without a response; returns X, y and the kept positions."""
        keep = train[self.target].notna().to_numpy()
        dropped = int((~keep).sum())
        if dropped:
            self.logger.warning(f"Dropping {dropped:,} rows with missing {self.target}")
        positions = np.flatnonzero(keep)
        X_df = train.loc[keep, self.features].reset_index(drop=True)
        y = train.loc[keep, self.target].astype(int).to_numpy()
        return X_df, y, positions

    @staticmethod
    def _remap(splits: Sequence[Split], positions: np.ndarray, n_rows: int) -> list[Split]:
        """Translate split positions onto the rows kept by ``_prepare``."""
        if len(positions) == n_rows:
            return list(splits)
        new_pos = np.full(n_rows, -1)
        new_pos[positions] = np.arange(len(positions))
        remapped = []
        for analysis, assessment in splits:
            a = new_pos[analysis]
            b = new_pos[assessment]
            remapped.append((a[a >= 0], b[b >= 0]))
        return remapped

    def tune(
        self,
        train: pd.DataFrame,
        resamples: Sequence[Split],
        grid: pd.DataFrame,
    ) -> TuningResult:
        X_df, y, positions = self._prepare(train)
        splits = self._remap(resamples, positions, len(train))
        candidates = grid.drop(columns="config").to_dict(orient="records")

        tasks = [
            (r, c) for r in range(len(splits)) for c in range(len(candidates))
        ]
        self.logger.info(
            f"Starting grid search: {len(candidates)} candidates x {len(splits)} resamples "
            f"= {len(tasks)} fits on {self.n_jobs} workers"
        )

        start = time.perf_counter()
        # The context manager shuts the worker pool down on every exit path;
        # the first failing task aborts the run and is re-raised here.
        with Parallel(n_jobs=self.n_jobs, backend="loky", verbose=self.verbose) as parallel:
            scores = parallel(
                delayed(evaluate_candidate)(
                    candidates[c],
                    self.base_params,
                    self.features,
                    X_df,
                    y,
                    splits[r][0],
                    splits[r][1],
                    self.random_state,
                )
                for r, c in tasks
            )
        elapsed = time.perf_counter() - start

        metrics = pd.DataFrame(
            {
                "id": [f"Resample{r + 1:02d}" for r, _ in tasks],
                "config": [grid["config"].iloc[c] for _, c in tasks],
                ".metric": "roc_auc",
                ".estimator": "binary",
                ".estimate": scores,
            }
        )
        self.logger.info(f"Grid search finished in {elapsed:.1f}s")

        return TuningResult(
            grid=grid.reset_index(drop=True),
            metrics=metrics,
            features=self.features,
            target=self.target,
            base_params=self.base_params,
            n_resamples=len(splits),
            elapsed_seconds=elapsed,
        )


def save_result(result: TuningResult, path: str) -> str:
    """Persist the tuning result; written to a temp file then renamed into place."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    tmp_path = f"{path}.tmp"
    try:
        joblib.dump(result, tmp_path)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
    return path
