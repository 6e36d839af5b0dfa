import numpy as np
import pandas as pd
import pytest

BENEFIT_COLUMNS = [
    "bho_s", "bmu_s", "boamt_s", "boamtmm_s", "boamtxp_s", "bsauc_s", "brduc_s",
    "bfamt_s", "bsadi_s", "bsa_s", "bwkmt_s", "brd_s",
]

PERSON_DEFAULTS = {
    "dag": 30,
    "dcz": 1,
    "ddi": 0,
    "les": 1,
    "dec": 4,
    "dgn": 1,
    "dms": 1,
    "drgn1": 1,
    "liwwh": 30,
    "lowas": 0,
    "yem": 1500.0,
    "amrtn": 1,
    "dhr": 1,
    "lcr01": 0,
}


def make_people(rows):
    """Person rows with UKMOD defaults; each row needs idperson and idhh."""
    records = []
    for row in rows:
        record = dict(PERSON_DEFAULTS)
        record.update({col: 0.0 for col in BENEFIT_COLUMNS})
        record.update(row)
        records.append(record)
    return pd.DataFrame(records)


def make_combined(rows, year=2020):
    """Rows shaped like the merger output (with children already counted)."""
    df = make_people(rows)
    df.insert(0, "year", year)
    for col, default in (("uc_income", 0.0), ("lba_income", 0.0), ("uc_receipt", 0), ("children", 0)):
        if col not in df.columns:
            df[col] = default
    return df


@pytest.fixture
def small_scenario():
    """Year 2020: household 1 is a working adult and a child, household 2 one adult.

    The child's UC entitlement makes household 1 a recipient even though the
    child is outside working age; household 2's adult receives UC directly.
    """
    lba = make_people(
        [
            {"idperson": 1, "idhh": 1, "dag": 30, "les": 1, "bho_s": 100.0},
            {"idperson": 2, "idhh": 1, "dag": 10, "les": 0, "liwwh": 0, "yem": 0.0},
            {"idperson": 3, "idhh": 2, "dag": 45, "les": 5, "yem": 0.0, "bsa_s": 250.0, "brd_s": 50.0},
        ]
    )
    uc = make_people(
        [
            {"idperson": 1, "idhh": 1, "bsauc_s": 0.0},
            {"idperson": 2, "idhh": 1, "bsauc_s": 200.0, "brduc_s": 20.0},
            {"idperson": 3, "idhh": 2, "bsauc_s": 500.0, "brduc_s": 100.0},
        ]
    )
    return {(2020, "UCAon"): uc, (2020, "LBAon"): lba}


@pytest.fixture
def scenario_dir(tmp_path, small_scenario):
    input_dir = tmp_path / "ukmod_out"
    input_dir.mkdir()
    for (year, policy), df in small_scenario.items():
        df.to_csv(input_dir / f"uk_{year}_{policy}.txt", sep="\t", index=False)
    return input_dir


@pytest.fixture
def synthetic_scenarios():
    """Two years of random households large enough to fit and score a model."""
    rng = np.random.default_rng(0)
    tables = {}
    for year in (2020, 2021):
        n = 120
        idhh = np.repeat(np.arange(1, n // 2 + 1), 2)
        employed = rng.integers(0, 2, n)
        rows = [
            {
                "idperson": i + 1,
                "idhh": int(idhh[i]),
                "dag": int(rng.integers(10, 70)),
                "les": 1 if employed[i] else 5,
                "dgn": int(rng.integers(0, 2)),
                "drgn1": int(rng.integers(1, 13)),
                "yem": float(rng.integers(0, 4000)) if employed[i] else 0.0,
            }
            for i in range(n)
        ]
        lba = make_people(rows)
        uc = make_people(rows)
        uc["bsauc_s"] = np.where(employed == 0, 400.0, 0.0)
        tables[(year, "LBAon")] = lba
        tables[(year, "UCAon")] = uc
    return tables
