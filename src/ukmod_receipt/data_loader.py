import os
import re
from typing import Dict, Iterable, Mapping, Optional, Tuple

import pandas as pd
from joblib import Parallel, delayed

from .exceptions import LoadError
from .utils.logger import get_logger

ScenarioKey = Tuple[int, str]

FILENAME_PATTERN = re.compile(
    r"^(?P<prefix>[^_]+)_(?P<year>\d{4})_(?P<policy>[A-Za-z0-9]+)\.(?P<ext>\w+)$"
)


def parse_scenario_key(filename: str) -> ScenarioKey:
    """Parse ``(year, policy)`` from ``<prefix>_<year>_<policy>.<ext>``."""
    match = FILENAME_PATTERN.match(filename)
    if match is None:
        raise LoadError(
            f"File name {filename!r} does not match <prefix>_<year>_<policy>.<ext>"
        )
    return int(match.group("year")), match.group("policy")


def _read_table(path: str, sep: str, required: Iterable[str]) -> pd.DataFrame:
    try:
        df = pd.read_csv(path, sep=sep)
    except (OSError, UnicodeDecodeError, pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise LoadError(f"Could not read scenario file {path}: {exc}") from exc

    missing = [col for col in required if col not in df.columns]
    if missing:
        raise LoadError(f"Scenario file {path} is missing columns: {missing}")

    # UKMOD output is numeric throughout; text in a cell means a malformed file.
    non_numeric = [col for col in df.columns if not pd.api.types.is_numeric_dtype(df[col])]
    if non_numeric:
        raise LoadError(f"Scenario file {path} has non-numeric values in columns: {non_numeric}")
    return df


class DataLoader:
    """Loads every UKMOD scenario file in a directory, keyed by (year, policy)."""

    def __init__(
        self,
        input_dir: str,
        sep: str = "\t",
        required_columns: Optional[Mapping[str, Iterable[str]]] = None,
        n_jobs: int = -1,
    ):
        self.input_dir = input_dir
        self.sep = sep
        self.required_columns = dict(required_columns or {})
        self.n_jobs = n_jobs
        self.logger = get_logger(self.__class__.__name__)

    def _discover(self) -> Dict[ScenarioKey, str]:
        if not os.path.isdir(self.input_dir):
            raise LoadError(f"Input directory not found: {self.input_dir}")

        files: Dict[ScenarioKey, str] = {}
        for name in sorted(os.listdir(self.input_dir)):
            path = os.path.join(self.input_dir, name)
            if not os.path.isfile(path):
                continue
            key = parse_scenario_key(name)
            if key in files:
                raise LoadError(
                    f"Duplicate scenario {key}: {os.path.basename(files[key])} and {name}"
                )
            files[key] = path

        if not files:
            raise LoadError(f"No scenario files found in {self.input_dir}")
        return files

    def load(self) -> Dict[ScenarioKey, pd.DataFrame]:
        files = self._discover()
        keys = list(files)

        # I/O bound, so threads are enough; any failure aborts the whole load.
        tables = Parallel(n_jobs=self.n_jobs, prefer="threads")(
            delayed(_read_table)(files[key], self.sep, self.required_columns.get(key[1], ()))
            for key in keys
        )

        result = dict(zip(keys, tables))
        for (year, policy), df in result.items():
            self.logger.info(f"Loaded {year} {policy}: {df.shape[0]:,} rows x {df.shape[1]} cols")
        return result
