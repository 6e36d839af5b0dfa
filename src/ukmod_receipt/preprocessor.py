from __future__ import annotations

from typing import Optional

import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.preprocessing import OneHotEncoder

from ukmod_receipt.exceptions import SchemaError
from ukmod_receipt.utils.logger import get_logger


class Preprocessor:
    """Builds the model matrix: one-hot categoricals, numeric columns as-is."""

    def __init__(self, features: list[str], verbose: bool = False):
        """
        Parameters
        ----------
        features:
            Right-hand side of the model formula, in order.
        verbose:
            If True, logs detected feature groups.
        """
        self.features = list(features)
        self.verbose = verbose
        self.logger = get_logger(self.__class__.__name__)
        self.transformer: Optional[ColumnTransformer] = None

    def build(self, X: pd.DataFrame) -> ColumnTransformer:
        """Build (but do not fit) the transformer for the formula columns of ``X``."""
        missing = [col for col in self.features if col not in X.columns]
        if missing:
            raise SchemaError(f"Model features not found in table: {missing}")

        categorical_cols = [
            col for col in self.features if isinstance(X[col].dtype, pd.CategoricalDtype)
        ]
        numeric_cols = [col for col in self.features if col not in categorical_cols]

        # Levels come from the categorical dtype, not from the rows present, so
        # every resample yields the same dummy columns.
        encoder = OneHotEncoder(
            categories=[list(X[col].cat.categories) for col in categorical_cols],
            handle_unknown="ignore",
            sparse_output=True,
        )

        self.transformer = ColumnTransformer(
            transformers=[
                ("num", "passthrough", numeric_cols),
                ("cat", encoder, categorical_cols),
            ],
            remainder="drop",
        )

        if self.verbose:
            self.logger.info(
                f"Columns detected: numeric={len(numeric_cols)}, categorical={len(categorical_cols)}"
            )

        return self.transformer
