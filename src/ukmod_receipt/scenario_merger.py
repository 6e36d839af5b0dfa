from typing import Any, Dict, Mapping, Optional

import numpy as np
import pandas as pd

from .data_loader import ScenarioKey
from .exceptions import MissingScenarioError, SchemaError
from .utils.logger import get_logger

DEFAULT_INCOME_DEFINITIONS: Dict[str, Dict[str, list]] = {
    "uc_income": {
        "add": ["bho_s", "bmu_s", "boamt_s", "boamtmm_s", "boamtxp_s", "bsauc_s"],
        "subtract": ["brduc_s"],
    },
    "uc_receipt": {
        "add": ["bsauc_s"],
        "subtract": ["brduc_s"],
    },
    "lba_income": {
        "add": [
            "bho_s", "bmu_s", "boamt_s", "boamtmm_s", "boamtxp_s",
            "bfamt_s", "bsadi_s", "bsa_s", "bwkmt_s",
        ],
        "subtract": ["brd_s"],
    },
}


def component_total(df: pd.DataFrame, definition: Mapping[str, Any]) -> pd.Series:
    """Sum the ``add`` columns and subtract the ``subtract`` columns."""
    add = list(definition.get("add", []))
    subtract = list(definition.get("subtract", []))

    missing = [col for col in add + subtract if col not in df.columns]
    if missing:
        raise SchemaError(f"Missing income component columns: {missing}")

    total = pd.Series(0.0, index=df.index)
    for col in add:
        total = total + df[col]
    for col in subtract:
        total = total - df[col]
    return total


class ScenarioMerger:
    """Combines the UC and legacy-benefit scenarios into one row per person-year."""

    def __init__(
        self,
        uc_policy: str = "UCAon",
        lba_policy: str = "LBAon",
        income_definitions: Optional[Mapping[str, Mapping[str, Any]]] = None,
        id_col: str = "idperson",
    ):
        self.uc_policy = uc_policy
        self.lba_policy = lba_policy
        self.definitions = dict(DEFAULT_INCOME_DEFINITIONS)
        self.definitions.update(income_definitions or {})
        self.id_col = id_col
        self.logger = get_logger(self.__class__.__name__)

    def _check_unique_ids(self, df: pd.DataFrame, year: int, policy: str) -> None:
        if self.id_col not in df.columns:
            raise SchemaError(f"{year} {policy}: column {self.id_col!r} not found")
        dupes = df[self.id_col][df[self.id_col].duplicated()].unique()
        if len(dupes):
            raise SchemaError(
                f"{year} {policy}: duplicate {self.id_col} values {dupes[:10].tolist()}"
            )

    def derive_uc(self, df: pd.DataFrame) -> pd.DataFrame:
        """UC scenario reduced to (idperson, uc_income, uc_receipt)."""
        receipt_amount = component_total(df, self.definitions["uc_receipt"])
        return pd.DataFrame(
            {
                self.id_col: df[self.id_col].to_numpy(),
                "uc_income": component_total(df, self.definitions["uc_income"]).to_numpy(),
                "uc_receipt": np.where(receipt_amount > 0, 1, 0),
            }
        )

    def derive_lba(self, df: pd.DataFrame) -> pd.DataFrame:
        """Legacy scenario with every original column plus lba_income."""
        out = df.copy()
        out["lba_income"] = component_total(df, self.definitions["lba_income"])
        return out

    def merge_year(self, year: int, uc_df: pd.DataFrame, lba_df: pd.DataFrame) -> pd.DataFrame:
        self._check_unique_ids(uc_df, year, self.uc_policy)
        self._check_unique_ids(lba_df, year, self.lba_policy)

        combined = self.derive_lba(lba_df).merge(
            self.derive_uc(uc_df), on=self.id_col, how="left", validate="one_to_one"
        )
        n_unmatched = int(combined["uc_receipt"].isna().sum())
        if n_unmatched:
            self.logger.warning(f"{year}: {n_unmatched} legacy rows have no UC-scenario match")

        combined.insert(0, "year", year)
        return combined

    def merge(self, tables: Mapping[ScenarioKey, pd.DataFrame]) -> pd.DataFrame:
        years = sorted({year for year, _ in tables})
        ignored = sorted(
            {policy for _, policy in tables} - {self.uc_policy, self.lba_policy}
        )
        if ignored:
            self.logger.info(f"Ignoring policies not used for modelling: {ignored}")

        parts = []
        for year in years:
            missing = [
                policy for policy in (self.uc_policy, self.lba_policy)
                if (year, policy) not in tables
            ]
            if missing:
                raise MissingScenarioError(f"Year {year} is missing scenario(s): {missing}")
            parts.append(
                self.merge_year(year, tables[(year, self.uc_policy)], tables[(year, self.lba_policy)])
            )

        combined = (
            pd.concat(parts, ignore_index=True)
            .sort_values(["year", self.id_col], kind="mergesort")
            .reset_index(drop=True)
        )
        self.logger.info(f"Combined scenarios for years {years}: {len(combined):,} person rows")
        return combined
