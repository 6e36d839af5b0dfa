from typing import Mapping, Type

import numpy as np
import pandas as pd

from .categories import (
    REGION_LETTERS,
    Category,
    Citizenship,
    CountBucket,
    Disability,
    Education,
    Employment,
    EmploymentLength,
    Gender,
    HousingTenure,
    IncomeBand,
    MaritalStatus,
    YesNo,
)
from .exceptions import RecodeError, SchemaError
from .utils.logger import get_logger

EMPLOYMENT_CODES = {
    1: Employment.EMPLOYED,
    2: Employment.EMPLOYED,
    3: Employment.EMPLOYED,
    4: Employment.RETIRED,
    5: Employment.UNEMPLOYED,
    6: Employment.INACTIVE,
    7: Employment.INACTIVE,
    8: Employment.SICK_OR_DISABLED,
}
NOT_IN_WORK_CODES = (4, 5, 6, 7, 8)
STUDENT_CODE = 6

EDUCATION_CODES = {
    2: Education.SECONDARY,
    3: Education.SECONDARY,
    4: Education.DEGREE_OR_COLLEGE,
    5: Education.TERTIARY,
}

MARITAL_CODES = {
    1: MaritalStatus.SINGLE,
    2: MaritalStatus.MARRIED,
    3: MaritalStatus.SEPARATED,
    4: MaritalStatus.DIVORCED,
    5: MaritalStatus.WIDOWED,
}

TENURE_CODES = {
    1: HousingTenure.MORTGAGED,
    2: HousingTenure.OUTRIGHT,
    3: HousingTenure.RENTED,
    4: HousingTenure.RENTED,
    5: HousingTenure.RENTED,
    6: HousingTenure.FREE,
    7: HousingTenure.OTHER,
}

# UKMOD region codes skip 3 after North West, so codes from 3 onwards shift by
# one letter less. Letters are 1-indexed: code 1 -> C (North East).
REGION_CODES = {
    code: REGION_LETTERS[(code + 2 if code < 3 else code + 1) - 1]
    for code in range(0, len(REGION_LETTERS))
}

EMPLOYMENT_LENGTH_BINS = [-np.inf, 12, 24, 60, 120, 240, np.inf]
INCOME_BINS = [0, 1, 500, 1000, 2000, 3000, np.inf]

RAW_COLUMNS = [
    "year", "idhh", "idperson", "uc_income", "lba_income", "uc_receipt", "children",
    "dag", "dcz", "ddi", "les", "dec", "dgn", "dms", "drgn1", "liwwh", "lowas",
    "yem", "amrtn", "dhr", "lcr01",
]

OUTPUT_COLUMNS = [
    "year", "idhh", "idperson", "uc_income", "lba_income", "uc_receipt",
    "age", "citizenship", "disability", "employment", "education", "gender",
    "marital_status", "region", "employment_length", "seeking_work", "student",
    "children", "income", "i_0", "i_m", "i_l", "i_c",
    "housing_tenure", "household_responsibility", "caring",
]


def as_category(values, enum_cls: Type[Category], index: pd.Index) -> pd.Series:
    """Wrap string labels as a categorical with the enum's full level set."""
    labels = [v.value if isinstance(v, Category) else v for v in values]
    return pd.Series(
        pd.Categorical(labels, categories=enum_cls.levels()), index=index
    )


def strict_map(raw: pd.Series, mapping: Mapping, column: str) -> pd.Series:
    """Map codes, raising RecodeError for any code without a level."""
    mapped = raw.map(mapping)
    unmapped = mapped.isna()
    if unmapped.any():
        bad = sorted(set(raw[unmapped].tolist()), key=str)
        raise RecodeError(f"Column {column!r} has codes outside its domain: {bad[:10]}")
    return mapped


def catch_all_map(raw: pd.Series, mapping: Mapping, other: Category) -> pd.Series:
    return raw.map(mapping).where(lambda s: s.notna(), other)


def bucket_count(counts: pd.Series) -> pd.Series:
    """Collapse a non-negative count to the 0 / 1 / 2+ levels."""
    labels = np.where(
        counts == 0,
        CountBucket.ZERO.value,
        np.where(counts == 1, CountBucket.ONE.value, CountBucket.TWO_PLUS.value),
    )
    return as_category(labels, CountBucket, counts.index)


class FeatureRecoder:
    """Maps raw UKMOD codes onto the semantic feature set used by the model.

    Every categorical mapping is total: codes either land in a level, fall
    into the explicit catch-all where one exists (employment, education,
    housing tenure), or raise ``RecodeError``.
    """

    def __init__(self, income_cap: float = 3415):
        self.income_cap = income_cap
        self.logger = get_logger(self.__class__.__name__)

    def _employment_length(self, les: pd.Series, months: pd.Series) -> pd.Series:
        not_in_work = les.isin(NOT_IN_WORK_CODES)
        bands = pd.cut(
            months,
            bins=EMPLOYMENT_LENGTH_BINS,
            right=False,
            labels=EmploymentLength.levels()[1:],
        ).astype(object)
        labels = bands.where(~not_in_work, EmploymentLength.NOT_IN_EMPLOYMENT.value)

        undefined = labels.isna()
        if undefined.any():
            raise RecodeError(
                f"Column 'liwwh' is missing for {int(undefined.sum())} people in work"
            )
        return as_category(labels, EmploymentLength, les.index)

    def _income_features(self, yem: pd.Series) -> pd.DataFrame:
        income = yem.where(~(yem > self.income_cap), self.income_cap)
        if income.isna().any() or (income < 0).any():
            bad = sorted(set(yem[income.isna() | (income < 0)].tolist()), key=str)
            raise RecodeError(f"Column 'yem' has values outside the income bands: {bad[:10]}")

        i_m = (income == self.income_cap).astype(int)
        bands = pd.cut(income, bins=INCOME_BINS, right=False, labels=IncomeBand.levels())
        return pd.DataFrame(
            {
                "income": income,
                "i_0": (income == 0).astype(int),
                "i_m": i_m,
                "i_l": income * (1 - i_m),
                "i_c": as_category(bands.astype(object), IncomeBand, yem.index),
            },
            index=yem.index,
        )

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        missing = [col for col in RAW_COLUMNS if col not in df.columns]
        if missing:
            raise SchemaError(f"Cannot recode features, missing columns: {missing}")

        idx = df.index
        les = df["les"]

        if df["lcr01"].isna().any():
            raise RecodeError("Column 'lcr01' has missing caring codes")

        out = df[["year", "idhh", "idperson", "uc_income", "lba_income", "uc_receipt"]].copy()
        out["age"] = df["dag"]
        out["citizenship"] = as_category(
            np.where(df["dcz"] == 1, Citizenship.UK.value, Citizenship.OTHER.value),
            Citizenship, idx,
        )
        out["disability"] = as_category(
            strict_map(df["ddi"], {0: Disability.NOT_DISABLED, 1: Disability.DISABLED}, "ddi"),
            Disability, idx,
        )
        out["employment"] = as_category(
            catch_all_map(les, EMPLOYMENT_CODES, Employment.OTHER), Employment, idx
        )
        out["student"] = (les == STUDENT_CODE).astype(int)
        out["education"] = as_category(
            catch_all_map(df["dec"], EDUCATION_CODES, Education.NONE), Education, idx
        )
        out["gender"] = as_category(
            strict_map(df["dgn"], {0: Gender.FEMALE, 1: Gender.MALE}, "dgn"), Gender, idx
        )
        out["marital_status"] = as_category(
            strict_map(df["dms"].where(df["dms"] != 0, 1), MARITAL_CODES, "dms"),
            MaritalStatus, idx,
        )
        out["region"] = pd.Series(
            pd.Categorical(strict_map(df["drgn1"], REGION_CODES, "drgn1"), categories=REGION_LETTERS),
            index=idx,
        )
        out["employment_length"] = self._employment_length(les, df["liwwh"])
        out["seeking_work"] = as_category(
            strict_map(df["lowas"], {0: YesNo.NO, 1: YesNo.YES}, "lowas"), YesNo, idx
        )
        out["children"] = bucket_count(df["children"])
        out = out.join(self._income_features(df["yem"]))
        out["housing_tenure"] = as_category(
            catch_all_map(df["amrtn"], TENURE_CODES, HousingTenure.OTHER), HousingTenure, idx
        )
        out["household_responsibility"] = as_category(
            strict_map(df["dhr"], {0: YesNo.NO, 1: YesNo.YES}, "dhr"), YesNo, idx
        )
        out["caring"] = as_category(
            np.where(df["lcr01"] == 0, YesNo.NO.value, YesNo.YES.value), YesNo, idx
        )

        self.logger.info(f"Recoded {len(out):,} person rows into {len(OUTPUT_COLUMNS)} columns")
        return out[OUTPUT_COLUMNS]
