"""
UKMOD Universal Credit Receipt - Modelling Pipeline

This package turns UKMOD microsimulation output into a working-age
modelling table and grid-searches a LightGBM classifier predicting
household Universal Credit receipt.

Modules:
    config              - Load YAML configuration safely.
    exceptions          - Pipeline error types.
    data_loader         - Read scenario files keyed by (year, policy).
    scenario_merger     - Derive and join the UC and legacy scenarios.
    household           - Household child counts.
    categories          - Closed category sets for the features.
    feature_recoder     - Map raw UKMOD codes to categorical features.
    table_builder       - Household responses and working-age filter.
    resampling          - Stratified split, Monte-Carlo and V-fold CV.
    preprocessor        - One-hot model matrix.
    model_trainer       - Fit and score LightGBM on one resample.
    hyper_tuner         - Tuning grid and parallel grid search.
    evaluator           - Summarise and plot tuning results.
    pipeline            - Orchestrates all components.
    utils.logger        - Unified timestamped console logger.
"""

from .config import Config
from .data_loader import DataLoader
from .exceptions import (
    LoadError,
    MissingScenarioError,
    PipelineError,
    RecodeError,
    SchemaError,
)
from .scenario_merger import ScenarioMerger
from .household import HouseholdAggregator
from .feature_recoder import FeatureRecoder
from .table_builder import ModelTableBuilder
from .resampling import ResamplePlan, ResamplePlanner
from .preprocessor import Preprocessor
from .model_trainer import ModelTrainer
from .hyper_tuner import GridTuner, TuningResult, build_tuning_grid
from .evaluator import TuningReporter
from .pipeline import PipelineRunner

__all__ = [
    "Config",
    "DataLoader",
    "LoadError",
    "MissingScenarioError",
    "PipelineError",
    "RecodeError",
    "SchemaError",
    "ScenarioMerger",
    "HouseholdAggregator",
    "FeatureRecoder",
    "ModelTableBuilder",
    "ResamplePlan",
    "ResamplePlanner",
    "Preprocessor",
    "ModelTrainer",
    "GridTuner",
    "TuningResult",
    "build_tuning_grid",
    "TuningReporter",
    "PipelineRunner",
]
