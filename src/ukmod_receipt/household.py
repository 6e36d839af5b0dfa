import pandas as pd

from .exceptions import SchemaError
from .utils.logger import get_logger


class HouseholdAggregator:
    """Household-level counts broadcast back onto every member row."""

    def __init__(
        self,
        year_col: str = "year",
        hh_col: str = "idhh",
        age_col: str = "dag",
        child_age: int = 16,
    ):
        self.year_col = year_col
        self.hh_col = hh_col
        self.age_col = age_col
        self.child_age = child_age
        self.logger = get_logger(self.__class__.__name__)

    @property
    def keys(self) -> list:
        return [self.year_col, self.hh_col]

    def add_children(self, df: pd.DataFrame) -> pd.DataFrame:
        """Add ``children``: number of household members younger than ``child_age``."""
        missing = [col for col in self.keys + [self.age_col] if col not in df.columns]
        if missing:
            raise SchemaError(f"Cannot count children, missing columns: {missing}")

        blank = [col for col in self.keys if df[col].isna().any()]
        if blank:
            raise SchemaError(f"Household keys have missing values: {blank}")

        out = df.copy()
        is_child = (out[self.age_col] < self.child_age).astype(int)
        out["children"] = is_child.groupby([out[self.year_col], out[self.hh_col]]).transform("sum")

        n_households = out[self.keys].drop_duplicates().shape[0]
        self.logger.info(f"Counted children for {n_households:,} households")
        return out
