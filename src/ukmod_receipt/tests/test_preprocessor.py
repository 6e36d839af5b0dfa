import pandas as pd
import pytest

from ukmod_receipt.exceptions import SchemaError
from ukmod_receipt.preprocessor import Preprocessor


def _make_small_X():
    return pd.DataFrame(
        {
            "age": [25, 40, 60],
            "student": [0, 1, 0],
            "gender": pd.Categorical(["Male", "Female", "Male"], categories=["Female", "Male"]),
            "children": pd.Categorical(["0", "0", "1"], categories=["0", "1", "2+"]),
            "unused": [1, 2, 3],
        }
    )


def test_preprocessor_one_hot_uses_all_declared_levels():
    X = _make_small_X()
    transformer = Preprocessor(["age", "student", "gender", "children"]).build(X)

    Xt = transformer.fit_transform(X)
    # 2 numeric + 2 gender levels + 3 children levels (one never observed)
    assert Xt.shape == (3, 7)


def test_preprocessor_dummy_columns_stable_across_subsets():
    X = _make_small_X()
    features = ["age", "gender", "children"]

    full = Preprocessor(features).build(X).fit_transform(X)
    subset = Preprocessor(features).build(X.iloc[:2]).fit_transform(X.iloc[:2])
    assert full.shape[1] == subset.shape[1]


def test_preprocessor_drops_columns_outside_formula():
    X = _make_small_X()
    transformer = Preprocessor(["age", "gender"]).build(X)
    assert transformer.fit_transform(X).shape == (3, 3)


def test_preprocessor_groups_are_named():
    transformer = Preprocessor(["age", "gender"]).build(_make_small_X())
    names = [name for name, _, _ in transformer.transformers]
    assert names == ["num", "cat"]


def test_preprocessor_missing_feature_raises():
    with pytest.raises(SchemaError):
        Preprocessor(["age", "region"]).build(_make_small_X())
