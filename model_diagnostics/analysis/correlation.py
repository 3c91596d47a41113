"""
Pearson correlation matrix over numeric feature columns.

Flags highly correlated (multicollinear) pairs as removal candidates and
classifies each cell into one of ten display bands.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..data.schema import FeatureTable
from ..exceptions import DegenerateVariance, InsufficientData, MalformedInput

logger = logging.getLogger(__name__)

ZERO_VARIANCE_POLICIES = ("zero", "raise")


@dataclass(frozen=True, eq=False)
class CorrelationMatrix:
    """
    Square, symmetric correlation matrix with a unit diagonal.

    Index with integer pairs or column names: ``m[0, 1]`` or ``m["Age", "Fare"]``.
    """
    header: Tuple[str, ...]
    values: np.ndarray

    def __post_init__(self):
        values = np.array(self.values, dtype=np.float64)
        header = tuple(self.header)
        if values.shape != (len(header), len(header)):
            raise MalformedInput(
                f"Matrix shape {values.shape} does not match {len(header)} header names"
            )
        values.setflags(write=False)
        object.__setattr__(self, 'header', header)
        object.__setattr__(self, 'values', values)

    @property
    def size(self) -> int:
        return len(self.header)

    def _index(self, key: Union[int, str]) -> int:
        if isinstance(key, str):
            try:
                return self.header.index(key)
            except ValueError:
                raise MalformedInput(f"Unknown column '{key}'") from None
        return int(key)

    def __getitem__(self, key) -> float:
        i, j = key
        return float(self.values[self._index(i), self._index(j)])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.values, index=list(self.header), columns=list(self.header))


@dataclass(frozen=True)
class CorrelatedPair:
    feature_i: str
    feature_j: str
    correlation: float


@dataclass(frozen=True)
class CorrelationBand:
    """Half-open display band [lower, upper) with its console colours."""
    index: int
    lower: float
    upper: float
    foreground: str
    background: Optional[str] = None


# Ten bands of width 0.2 across [-1, 1); 1.0 itself falls in the top band
BANDS: Tuple[CorrelationBand, ...] = (
    CorrelationBand(0, -1.0, -0.8, "red"),
    CorrelationBand(1, -0.8, -0.6, "yellow"),
    CorrelationBand(2, -0.6, -0.4, "green"),
    CorrelationBand(3, -0.4, -0.2, "blue"),
    CorrelationBand(4, -0.2, 0.0, "gray"),
    CorrelationBand(5, 0.0, 0.2, "gray", "black"),
    CorrelationBand(6, 0.2, 0.4, "blue", "dark_blue"),
    CorrelationBand(7, 0.4, 0.6, "green", "dark_green"),
    CorrelationBand(8, 0.6, 0.8, "yellow", "dark_yellow"),
    CorrelationBand(9, 0.8, 1.0, "red", "dark_red"),
)

# Diagonal cells, whatever their value
DIAGONAL_STYLE = ("gray", "dark_gray")

_BAND_EDGES = np.array([band.upper for band in BANDS[:-1]])


def band_for(value: float) -> CorrelationBand:
    """Display band of a correlation value in [-1, 1]."""
    if not -1.0 <= value <= 1.0:
        raise MalformedInput(f"Correlation {value} outside [-1, 1]")
    return BANDS[int(np.digitize(value, _BAND_EDGES))]


def pearson_matrix(
    table: FeatureTable,
    on_zero_variance: str = "zero"
) -> CorrelationMatrix:
    """
    Pearson correlation of every pair of columns.

    Parameters
    ----------
    table : FeatureTable
    on_zero_variance : {'zero', 'raise'}
        For a constant column: report 0.0 against every other column, or
        raise DegenerateVariance.

    Returns
    -------
    matrix : CorrelationMatrix
    """
    if on_zero_variance not in ZERO_VARIANCE_POLICIES:
        raise MalformedInput(
            f"on_zero_variance must be one of {ZERO_VARIANCE_POLICIES}, got {on_zero_variance!r}"
        )
    if table.n_columns == 0:
        raise InsufficientData("No numeric columns to correlate")
    if table.n_rows == 0:
        raise InsufficientData("No rows to correlate")

    X = table.to_array()
    centered = X - X.mean(axis=0)
    norms = np.sqrt(np.sum(centered ** 2, axis=0))

    # Checked on the raw values; centering leaves rounding noise in constant columns
    constant = np.all(X == X[0], axis=0)
    if constant.any():
        names = [table.header[i] for i in np.flatnonzero(constant)]
        if on_zero_variance == "raise":
            raise DegenerateVariance(f"Zero-variance columns: {names}")
        logger.warning("Zero-variance columns %s; their correlations are reported as 0.0", names)

    safe_norms = np.where(constant, 1.0, norms)
    normalized = centered / safe_norms
    corr = normalized.T @ normalized

    corr = (corr + corr.T) / 2
    corr = np.clip(corr, -1.0, 1.0)
    corr[constant, :] = 0.0
    corr[:, constant] = 0.0
    np.fill_diagonal(corr, 1.0)

    logger.debug("Correlation matrix computed over %d rows x %d columns",
                 table.n_rows, table.n_columns)
    return CorrelationMatrix(header=table.header, values=corr)


def _check_threshold(threshold: float) -> None:
    if not 0.0 <= threshold <= 1.0:
        raise MalformedInput(f"Correlation threshold must be in [0, 1], got {threshold}")


def find_correlated_pairs(
    matrix: CorrelationMatrix,
    threshold: float = 0.9
) -> List[CorrelatedPair]:
    """
    Off-diagonal pairs with ``abs(corr) > threshold``.

    Scans the upper triangle row by row; results keep that order.
    """
    _check_threshold(threshold)

    pairs = []
    for i in range(matrix.size):
        for j in range(i + 1, matrix.size):
            value = matrix.values[i, j]
            if abs(value) > threshold:
                pairs.append(CorrelatedPair(matrix.header[i], matrix.header[j], float(value)))

    return pairs


@dataclass(frozen=True)
class CorrelationReport:
    matrix: CorrelationMatrix
    pairs: Tuple[CorrelatedPair, ...]
    threshold: float


def analyze_correlations(
    table: FeatureTable,
    threshold: float = 0.9,
    on_zero_variance: str = "zero"
) -> CorrelationReport:
    """Correlation matrix plus the pairs above ``threshold``."""
    _check_threshold(threshold)

    matrix = pearson_matrix(table, on_zero_variance=on_zero_variance)
    pairs = tuple(find_correlated_pairs(matrix, threshold))

    if pairs:
        logger.info("%d highly correlated feature pairs (threshold %s)", len(pairs), threshold)

    return CorrelationReport(matrix=matrix, pairs=pairs, threshold=threshold)


def pairs_to_frame(pairs: Sequence[CorrelatedPair]) -> pd.DataFrame:
    return pd.DataFrame(
        [(p.feature_i, p.feature_j, p.correlation) for p in pairs],
        columns=['feature_i', 'feature_j', 'correlation']
    )
