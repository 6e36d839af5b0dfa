import pandas as pd

from .categories import Employment
from .exceptions import SchemaError
from .feature_recoder import bucket_count
from .utils.logger import get_logger

HOUSEHOLD_COUNTS = {
    "n_hh_emp": Employment.EMPLOYED.value,
    "n_hh_unemp": Employment.UNEMPLOYED.value,
    "n_hh_inact": Employment.INACTIVE.value,
}


class ModelTableBuilder:
    """Household-level responses and employment mix on working-age person rows.

    Household aggregates are computed over every member before the age
    filter, so rows sharing (year, idhh) always carry identical values.
    """

    def __init__(self, min_age_exclusive: int = 17, max_age_exclusive: int = 66):
        self.min_age_exclusive = min_age_exclusive
        self.max_age_exclusive = max_age_exclusive
        self.logger = get_logger(self.__class__.__name__)

    def build(self, df: pd.DataFrame) -> pd.DataFrame:
        blank = [col for col in ("year", "idhh") if df[col].isna().any()]
        if blank:
            raise SchemaError(f"Household keys have missing values: {blank}")

        out = df.copy()
        groups = out.groupby(["year", "idhh"], sort=False)

        out["lba_income"] = groups["lba_income"].transform("sum")
        out["uc_income"] = groups["uc_income"].transform("max")
        out["uc_receipt"] = groups["uc_receipt"].transform("max")

        employment = out["employment"].astype(str)
        for col, level in HOUSEHOLD_COUNTS.items():
            out[col] = (
                (employment == level).astype(int)
                .groupby([out["year"], out["idhh"]])
                .transform("sum")
            )

        n_before = len(out)
        out = out[(out["age"] > self.min_age_exclusive) & (out["age"] < self.max_age_exclusive)]
        out = out.reset_index(drop=True)

        out["person_in_employed_household"] = (
            (out["employment"].astype(str) == Employment.EMPLOYED.value) & (out["n_hh_emp"] > 0)
        ).astype(int)
        for col in HOUSEHOLD_COUNTS:
            out[col] = bucket_count(out[col])

        n_receipt = int(out["uc_receipt"].fillna(0).sum())
        self.logger.info(
            f"Modelling table: {len(out):,} working-age rows (from {n_before:,}), "
            f"{n_receipt:,} in UC-receiving households"
        )
        return out
