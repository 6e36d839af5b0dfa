import numpy as np
import pandas as pd
import pytest

from conftest import make_combined
from ukmod_receipt.exceptions import SchemaError
from ukmod_receipt.feature_recoder import FeatureRecoder
from ukmod_receipt.table_builder import ModelTableBuilder


def _recoded():
    rows = [
        # household 1: two employed adults, one unemployed adult, a child
        {"idperson": 1, "idhh": 1, "dag": 35, "les": 1, "lba_income": 100.0, "uc_income": 50.0, "uc_receipt": 0},
        {"idperson": 2, "idhh": 1, "dag": 40, "les": 2, "lba_income": 20.0, "uc_income": 80.0, "uc_receipt": 0},
        {"idperson": 3, "idhh": 1, "dag": 19, "les": 5, "lba_income": 0.0, "uc_income": 10.0, "uc_receipt": 1},
        {"idperson": 4, "idhh": 1, "dag": 9, "les": 0, "liwwh": 0, "lba_income": 0.0, "uc_income": 0.0, "uc_receipt": 0},
        # household 2: a student and a pensioner on the age boundaries
        {"idperson": 5, "idhh": 2, "dag": 17, "les": 6, "lba_income": 5.0, "uc_income": 0.0, "uc_receipt": 0},
        {"idperson": 6, "idhh": 2, "dag": 66, "les": 4, "lba_income": 7.0, "uc_income": 0.0, "uc_receipt": 0},
        {"idperson": 7, "idhh": 2, "dag": 18, "les": 7, "lba_income": 1.0, "uc_income": 0.0, "uc_receipt": np.nan},
    ]
    return FeatureRecoder().transform(make_combined(rows))


def test_working_age_filter_excludes_17_and_66():
    out = ModelTableBuilder().build(_recoded())
    assert out["idperson"].tolist() == [1, 2, 3, 7]
    assert out["age"].between(18, 65).all()


def test_household_responses_are_aggregated_before_filtering():
    out = ModelTableBuilder().build(_recoded()).set_index("idperson")

    assert out.loc[1, "lba_income"] == 120.0
    assert out.loc[1, "uc_income"] == 80.0
    assert out.loc[1, "uc_receipt"] == 1
    # filtered-out members still count towards the household sum
    assert out.loc[7, "lba_income"] == 13.0
    assert out.loc[7, "uc_receipt"] == 0


def test_household_fields_identical_within_household():
    out = ModelTableBuilder().build(_recoded())
    household_cols = ["lba_income", "uc_income", "uc_receipt", "n_hh_emp", "n_hh_unemp", "n_hh_inact"]
    for col in household_cols:
        assert (out.groupby(["year", "idhh"])[col].nunique(dropna=False) == 1).all(), col


def test_employment_counts_are_bucketed():
    out = ModelTableBuilder().build(_recoded()).set_index("idperson")

    for col in ["n_hh_emp", "n_hh_unemp", "n_hh_inact"]:
        assert set(out[col].astype(str)) <= {"0", "1", "2+"}
        assert list(out[col].cat.categories) == ["0", "1", "2+"]

    assert out.loc[1, "n_hh_emp"] == "2+"
    assert out.loc[1, "n_hh_unemp"] == "1"
    assert out.loc[1, "n_hh_inact"] == "0"
    # student (les 6) and inactive (les 7) both count as Inactive
    assert out.loc[7, "n_hh_inact"] == "2+"
    assert out.loc[7, "n_hh_emp"] == "0"


def test_person_in_employed_household_flag():
    out = ModelTableBuilder().build(_recoded()).set_index("idperson")
    assert out["person_in_employed_household"].to_dict() == {1: 1, 2: 1, 3: 0, 7: 0}


def test_build_does_not_mutate_input():
    recoded = _recoded()
    before = recoded.copy(deep=True)
    ModelTableBuilder().build(recoded)
    pd.testing.assert_frame_equal(recoded, before)


def test_missing_household_id_raises():
    recoded = _recoded()
    recoded.loc[2, "idhh"] = np.nan
    with pytest.raises(SchemaError, match="idhh"):
        ModelTableBuilder().build(recoded)
