import pandas as pd
import pytest

from ukmod_receipt.data_loader import DataLoader, parse_scenario_key
from ukmod_receipt.exceptions import LoadError


def test_parse_scenario_key_reads_year_and_policy():
    assert parse_scenario_key("uk_2021_LBAon.txt") == (2021, "LBAon")


@pytest.mark.parametrize("name", ["uk_2021.txt", "uk_21_UCAon.txt", "uk_2021_UCAon", "notes.md"])
def test_parse_scenario_key_rejects_unexpected_names(name):
    with pytest.raises(LoadError):
        parse_scenario_key(name)


def test_data_loader_keys_tables_by_year_and_policy(scenario_dir, small_scenario):
    tables = DataLoader(str(scenario_dir), n_jobs=1).load()

    assert set(tables) == {(2020, "UCAon"), (2020, "LBAon")}
    pd.testing.assert_frame_equal(
        tables[(2020, "LBAon")], small_scenario[(2020, "LBAon")], check_dtype=False
    )


def test_data_loader_fails_on_misnamed_file(scenario_dir):
    (scenario_dir / "readme.txt").write_text("not a scenario")
    with pytest.raises(LoadError):
        DataLoader(str(scenario_dir)).load()


def test_data_loader_fails_on_empty_file(scenario_dir):
    (scenario_dir / "uk_2021_UCAon.txt").write_text("")
    with pytest.raises(LoadError):
        DataLoader(str(scenario_dir)).load()


def test_data_loader_fails_on_missing_required_column(scenario_dir):
    with pytest.raises(LoadError, match="missing columns"):
        DataLoader(
            str(scenario_dir), required_columns={"UCAon": ["idperson", "not_a_column"]}
        ).load()


def test_data_loader_fails_on_duplicate_scenario(scenario_dir):
    (scenario_dir / "uk_2020_UCAon.csv").write_text("idperson\n1\n")
    with pytest.raises(LoadError, match="Duplicate"):
        DataLoader(str(scenario_dir)).load()


def test_data_loader_fails_on_empty_or_missing_directory(tmp_path):
    with pytest.raises(LoadError):
        DataLoader(str(tmp_path)).load()
    with pytest.raises(LoadError):
        DataLoader(str(tmp_path / "absent")).load()


def test_data_loader_fails_on_non_numeric_cell(scenario_dir):
    path = scenario_dir / "uk_2020_LBAon.txt"
    df = pd.read_csv(path, sep="\t")
    df["dag"] = df["dag"].astype(object)
    df.loc[0, "dag"] = "thirty"
    df.to_csv(path, sep="\t", index=False)

    with pytest.raises(LoadError, match="dag"):
        DataLoader(str(scenario_dir), n_jobs=1).load()
