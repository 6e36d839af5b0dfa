import warnings
from textwrap import indent

import pandas as pd

from .config import Config
from .data_loader import DataLoader
from .evaluator import TuningReporter
from .feature_recoder import FeatureRecoder
from .household import HouseholdAggregator
from .hyper_tuner import GridTuner, TuningResult, build_tuning_grid, save_result
from .resampling import ResamplePlan, ResamplePlanner
from .scenario_merger import ScenarioMerger
from .table_builder import ModelTableBuilder
from .utils.logger import get_logger

DEFAULT_FEATURES = [
    "age", "i_c", "region", "disability", "education", "gender",
    "employment_length", "seeking_work", "student", "housing_tenure",
    "household_responsibility", "caring", "n_hh_emp", "n_hh_unemp",
    "n_hh_inact", "children", "employment", "marital_status",
]


class PipelineRunner:
    """End-to-end UKMOD UC-receipt tuning pipeline.

    Steps:
      1. Load every scenario file (one per year and policy)
      2. Merge the UC and legacy scenarios per person-year
      3. Count children per household
      4. Recode raw UKMOD codes into categorical features
      5. Aggregate household responses and filter to working age
      6. Split train/test by year and plan the resamples
      7. Grid-search LightGBM over the Monte-Carlo resamples
      8. Save the tuning result and a summary report"""

    def __init__(self, config_path: str):
        self.config = Config.from_yaml(config_path)
        self.logger = get_logger(self.__class__.__name__)
        warnings.filterwarnings(
            "ignore",
            message="X does not have valid feature names",
            category=UserWarning,
            module="sklearn",
        )

    def build_model_table(self) -> pd.DataFrame:
        cfg = self.config
        tables = DataLoader(
            cfg.data.get("input_dir", "data/ukmod_out"),
            sep=cfg.data.get("sep", "\t"),
            required_columns=cfg.data.get("required_columns"),
            n_jobs=cfg.data.get("n_jobs", -1),
        ).load()

        combined = ScenarioMerger(
            uc_policy=cfg.data.get("uc_policy", "UCAon"),
            lba_policy=cfg.data.get("lba_policy", "LBAon"),
            income_definitions=cfg.income,
        ).merge(tables)
        del tables

        combined = HouseholdAggregator(
            child_age=cfg.features.get("child_age", 16)
        ).add_children(combined)

        recoded = FeatureRecoder(
            income_cap=cfg.features.get("income_cap", 3415)
        ).transform(combined)

        return ModelTableBuilder(
            min_age_exclusive=cfg.features.get("min_age_exclusive", 17),
            max_age_exclusive=cfg.features.get("max_age_exclusive", 66),
        ).build(recoded)

    def plan_resamples(self, model_data: pd.DataFrame) -> ResamplePlan:
        split = self.config.split
        return ResamplePlanner(
            prop=split.get("prop", 0.8),
            strata=split.get("strata", "year"),
            seed=split.get("seed", 42),
            mc_times=split.get("mc_times", 25),
            mc_assessment=split.get("mc_assessment", 0.25),
            n_folds=split.get("n_folds", 5),
        ).plan(model_data)

    def tune(self, plan: ResamplePlan) -> TuningResult:
        model_cfg = self.config.model
        grid = build_tuning_grid(
            levels=model_cfg.get("grid_levels", 3),
            min_n_values=model_cfg.get("min_n_values", (40, 50, 60)),
            tree_depth_values=model_cfg.get("tree_depth_values", (5, 10, 15)),
        )
        tuner = GridTuner(
            features=model_cfg.get("features", DEFAULT_FEATURES),
            target=model_cfg.get("target", "uc_receipt"),
            base_params=model_cfg.get("params", {"n_estimators": 1000}),
            n_jobs=model_cfg.get("n_jobs"),
            core_fraction=model_cfg.get("core_fraction", 0.98),
            random_state=self.config.split.get("seed", 42),
        )
        return tuner.tune(plan.train, plan.mc_splits, grid)

    def run(self) -> TuningResult:
        cfg = self.config
        self.logger.info("Starting UKMOD UC-receipt tuning pipeline")

        model_data = self.build_model_table()
        self.logger.info(f"Model table: {model_data.shape[0]:,} rows x {model_data.shape[1]} cols")

        plan = self.plan_resamples(model_data)
        result = self.tune(plan)

        path = save_result(result, cfg.output.get("tune_result_path", "output/tune_out_class_lgbm.joblib"))
        self.logger.info(f"Saved tuning result: {path}")

        headline = TuningReporter(cfg.output.get("report_dir", "artifacts")).report(result)
        headline_str = indent(
            "\n".join([f"{k}: {v:.4f}" for k, v in headline.items()]),
            " " * 4,
        )
        self.logger.info(f"Tuning summary:\n{headline_str}")
        self.logger.info("Pipeline finished")
        return result
