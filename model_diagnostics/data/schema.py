"""
Explicit column schema and the numeric feature table fed to the analyzers.

The schema is a static list of (name, kind) pairs supplied by the caller.
Only ``numeric`` columns make it into a FeatureTable.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..exceptions import MalformedInput

logger = logging.getLogger(__name__)

FLOAT32_MAX = float(np.finfo(np.float32).max)


class ColumnKind(str, Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    TEXT = "text"
    LABEL = "label"
    IGNORED = "ignored"


@dataclass(frozen=True)
class ColumnSpec:
    """A single column of the input data set."""
    name: str
    kind: ColumnKind

    def __post_init__(self):
        # Accept plain strings from config files
        object.__setattr__(self, 'kind', ColumnKind(self.kind))


def numeric_columns(schema: Sequence[ColumnSpec]) -> List[str]:
    """Names of the numeric columns, in schema order."""
    return [spec.name for spec in schema if spec.kind == ColumnKind.NUMERIC]


def infer_schema(
    df: pd.DataFrame,
    label: Optional[str] = None,
    categorical: Iterable[str] = ()
) -> List[ColumnSpec]:
    """
    Build a schema from a DataFrame's dtypes, with manual overrides.

    Numeric-looking columns listed in ``categorical`` are moved to the
    categorical kind (e.g. passenger class stored as 1/2/3).

    Parameters
    ----------
    df : DataFrame
        Raw data set.
    label : str, optional
        Label column, excluded from the numeric features.
    categorical : iterable of str
        Columns to force to categorical.

    Returns
    -------
    schema : list of ColumnSpec
    """
    forced = set(categorical)
    unknown = forced.difference(df.columns)
    if unknown:
        raise MalformedInput(f"Categorical override for unknown columns: {sorted(unknown)}")
    if label is not None and label not in df.columns:
        raise MalformedInput(f"Label column '{label}' not in data")

    schema = []
    for name in df.columns:
        if name == label:
            kind = ColumnKind.LABEL
        elif name in forced:
            kind = ColumnKind.CATEGORICAL
        elif pd.api.types.is_bool_dtype(df[name]):
            kind = ColumnKind.CATEGORICAL
        elif pd.api.types.is_numeric_dtype(df[name]):
            kind = ColumnKind.NUMERIC
        else:
            kind = ColumnKind.TEXT
        schema.append(ColumnSpec(str(name), kind))

    return schema


DEFAULT_TITANIC_SCHEMA: Tuple[ColumnSpec, ...] = (
    ColumnSpec("Survived", ColumnKind.LABEL),
    ColumnSpec("Pclass", ColumnKind.NUMERIC),
    ColumnSpec("Sex", ColumnKind.TEXT),
    ColumnSpec("Age", ColumnKind.NUMERIC),
    ColumnSpec("SibSp", ColumnKind.NUMERIC),
    ColumnSpec("Parch", ColumnKind.NUMERIC),
    ColumnSpec("Fare", ColumnKind.NUMERIC),
)


@dataclass(frozen=True, eq=False)
class FeatureTable:
    """
    Rectangular table of numeric feature columns.

    ``columns[i]`` holds the values of ``header[i]``; every column has the
    same number of rows. Arrays are stored read-only.
    """
    header: Tuple[str, ...]
    columns: Tuple[np.ndarray, ...] = field(repr=False)

    def __post_init__(self):
        header = tuple(str(h) for h in self.header)
        columns = tuple(np.array(c, dtype=np.float64) for c in self.columns)

        if len(columns) != len(header):
            raise MalformedInput(
                f"Header has {len(header)} names but {len(columns)} columns were given"
            )
        if any(not name for name in header):
            raise MalformedInput("Column names must be non-empty")
        if len(set(header)) != len(header):
            raise MalformedInput(f"Duplicate column names in header: {list(header)}")

        lengths = {len(c) for c in columns}
        if len(lengths) > 1:
            raise MalformedInput(f"Columns have unequal lengths: {sorted(lengths)}")

        for name, col in zip(header, columns):
            if col.ndim != 1:
                raise MalformedInput(f"Column '{name}' is not one-dimensional")
            if not np.all(np.isfinite(col)):
                raise MalformedInput(f"Column '{name}' contains non-finite values")
            if col.size and np.max(np.abs(col)) > FLOAT32_MAX:
                raise MalformedInput(f"Column '{name}' exceeds single-precision range")
            col.setflags(write=False)

        object.__setattr__(self, 'header', header)
        object.__setattr__(self, 'columns', columns)

    @property
    def n_columns(self) -> int:
        return len(self.header)

    @property
    def n_rows(self) -> int:
        return len(self.columns[0]) if self.columns else 0

    def column(self, name: str) -> np.ndarray:
        try:
            return self.columns[self.header.index(name)]
        except ValueError:
            raise MalformedInput(f"Unknown column '{name}'") from None

    def to_array(self) -> np.ndarray:
        """Values as an array of shape (n_rows, n_columns)."""
        if not self.columns:
            return np.empty((0, 0))
        return np.column_stack(self.columns)

    @classmethod
    def from_dict(cls, data: Dict[str, Sequence[float]]) -> "FeatureTable":
        return cls(header=tuple(data.keys()), columns=tuple(data.values()))

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        schema: Sequence[ColumnSpec],
        dropna: bool = True
    ) -> "FeatureTable":
        """
        Extract the numeric columns named by ``schema``.

        Parameters
        ----------
        df : DataFrame
            Raw data set.
        schema : sequence of ColumnSpec
            Which columns are numeric. Other kinds are skipped.
        dropna : bool
            Drop rows with a missing numeric value. When False, missing
            values raise MalformedInput.

        Returns
        -------
        table : FeatureTable
        """
        names = numeric_columns(schema)
        missing = [n for n in names if n not in df.columns]
        if missing:
            raise MalformedInput(f"Schema columns missing from data: {missing}")

        for name in names:
            if not pd.api.types.is_numeric_dtype(df[name]) or pd.api.types.is_bool_dtype(df[name]):
                raise MalformedInput(
                    f"Column '{name}' is declared numeric but has dtype {df[name].dtype}"
                )

        numeric = df[names].astype(np.float64)
        if dropna:
            n_before = len(numeric)
            numeric = numeric.dropna()
            n_dropped = n_before - len(numeric)
            if n_dropped:
                logger.info("Dropped %d of %d rows with missing numeric values", n_dropped, n_before)

        values = numeric.to_numpy()
        logger.debug("Feature table: %d rows x %d numeric columns", len(numeric), len(names))
        return cls(header=tuple(names), columns=tuple(values[:, i] for i in range(len(names))))
