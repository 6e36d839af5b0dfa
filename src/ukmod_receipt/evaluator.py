import json
import os
import time
from typing import Dict

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from .hyper_tuner import TuningResult
from .utils.logger import get_logger


class TuningReporter:
    """Summarise a tuning result per grid point, save JSON/CSV and a line plot."""

    def __init__(self, output_dir: str = "artifacts", verbose: bool = True):
        self.output_dir = output_dir
        self.verbose = verbose
        self.logger = get_logger(self.__class__.__name__)

    def _plot(self, summary: pd.DataFrame) -> str:
        """Mean ROC-AUC against learning rate, one line per tree depth."""
        plt.figure(figsize=(7, 5))
        sns.lineplot(
            data=summary,
            x="learn_rate",
            y="mean",
            hue="tree_depth",
            style="min_n",
            marker="o",
            palette="Blues",
            errorbar=None,
        )
        plt.xscale("log")
        plt.xlabel("Learning rate (log scale)")
        plt.ylabel("Mean ROC-AUC")
        plt.title("Grid search: ROC-AUC over Monte-Carlo resamples")

        os.makedirs(self.output_dir, exist_ok=True)
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        path = os.path.join(self.output_dir, f"tuning_roc_auc_{timestamp}.png")

        plt.tight_layout()
        plt.savefig(path, dpi=200)
        plt.close()

        if self.verbose:
            self.logger.info(f"Saved tuning plot: {path}")
        return path

    def report(self, result: TuningResult, plot: bool = True) -> Dict[str, float]:
        """Write the per-candidate summary and return headline figures."""
        summary = result.collect_metrics()

        os.makedirs(self.output_dir, exist_ok=True)
        csv_path = os.path.join(self.output_dir, "tuning_metrics.csv")
        summary.to_csv(csv_path, index=False)
        summary_json_path = os.path.join(self.output_dir, "tuning_metrics.json")
        summary.to_json(summary_json_path, orient="records", indent=4)

        means = summary["mean"].to_numpy(dtype=float)
        headline: Dict[str, float] = {
            "n_candidates": float(len(result.grid)),
            "n_resamples": float(result.n_resamples),
            "roc_auc_min": float(np.nanmin(means)) if np.isfinite(means).any() else float("nan"),
            "roc_auc_max": float(np.nanmax(means)) if np.isfinite(means).any() else float("nan"),
            "elapsed_seconds": float(result.elapsed_seconds),
        }

        json_path = os.path.join(self.output_dir, "tuning_summary.json")
        with open(json_path, "w") as f:
            json.dump(headline, f, indent=4)

        if self.verbose:
            self.logger.info(f"Saved tuning metrics: {csv_path}, {summary_json_path}")

        if plot and np.isfinite(means).any():
            self._plot(summary)

        return headline
