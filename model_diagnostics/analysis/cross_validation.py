"""
Cross-validation summaries.

Aggregates a metric across folds into mean, sample standard deviation and
the half-width of a normal-approximation 95% confidence interval.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Union

import numpy as np
import pandas as pd

from ..exceptions import InsufficientData, MalformedInput

logger = logging.getLogger(__name__)

# z-score used for the cross-validation CI half-width
CI95_Z = 1.96

FoldMetrics = Union[Mapping[str, Sequence[float]], Sequence[Mapping[str, float]]]


@dataclass(frozen=True)
class FoldSummary:
    """Summary of one metric over all folds."""
    metric: str
    mean: float
    stddev: float   # sample (n-1) standard deviation
    ci95: float     # half-width, mean +/- ci95
    n_folds: int


def summarize_folds(
    values: Sequence[float],
    metric: str = "metric"
) -> FoldSummary:
    """
    Summarize one metric's per-fold values.

    Parameters
    ----------
    values : sequence of float
        One value per fold.
    metric : str
        Metric name carried into the summary.

    Returns
    -------
    summary : FoldSummary

    Raises
    ------
    InsufficientData
        If no folds are given.
    MalformedInput
        If a value is NaN or infinite.
    """
    values = np.asarray(values, dtype=np.float64).ravel()
    n = len(values)

    if n == 0:
        raise InsufficientData(f"No folds for metric '{metric}'")
    if not np.all(np.isfinite(values)):
        raise MalformedInput(f"Non-finite fold value for metric '{metric}'")

    mean = float(np.sum(values) / n)

    if n == 1:
        # Spread is undefined for a single fold
        logger.warning("Only one fold for metric '%s'; stddev and ci95 set to 0", metric)
        return FoldSummary(metric=metric, mean=mean, stddev=0.0, ci95=0.0, n_folds=1)

    stddev = float(np.sqrt(np.sum((values - mean) ** 2) / (n - 1)))
    ci95 = CI95_Z * stddev / np.sqrt(n)

    return FoldSummary(
        metric=metric,
        mean=mean,
        stddev=stddev,
        ci95=float(ci95),
        n_folds=n
    )


def _by_metric(fold_metrics: FoldMetrics) -> Dict[str, List[float]]:
    """Normalize either input shape to metric -> list of fold values."""
    if isinstance(fold_metrics, Mapping):
        return {str(k): list(v) for k, v in fold_metrics.items()}

    folds = list(fold_metrics)
    if not folds:
        raise InsufficientData("No folds given")

    names: List[str] = []
    for fold in folds:
        for name in fold:
            if name not in names:
                names.append(name)

    by_metric = {name: [] for name in names}
    for i, fold in enumerate(folds):
        missing = [name for name in names if name not in fold]
        if missing:
            raise MalformedInput(f"Fold {i} is missing metrics: {missing}")
        for name in names:
            by_metric[name].append(fold[name])

    return by_metric


def summarize_cross_validation(fold_metrics: FoldMetrics) -> List[FoldSummary]:
    """
    Summarize every metric of a cross-validation run.

    Parameters
    ----------
    fold_metrics : mapping or sequence
        Either metric -> per-fold values, or one metric -> value mapping
        per fold.

    Returns
    -------
    summaries : list of FoldSummary
        In order of first appearance of each metric.
    """
    by_metric = _by_metric(fold_metrics)
    if not by_metric:
        raise InsufficientData("No metrics given")

    summaries = [summarize_folds(values, metric=name) for name, values in by_metric.items()]
    logger.debug("Summarized %d metrics over cross-validation folds", len(summaries))
    return summaries


def fold_summary_to_dict(summary: FoldSummary) -> Dict:
    """Convert FoldSummary to dictionary."""
    return {
        "metric": summary.metric,
        "mean": summary.mean,
        "stddev": summary.stddev,
        "ci95": summary.ci95,
        "n_folds": summary.n_folds
    }


def fold_summaries_to_frame(summaries: Sequence[FoldSummary]) -> pd.DataFrame:
    """Summaries as a DataFrame indexed by metric."""
    df = pd.DataFrame([fold_summary_to_dict(s) for s in summaries],
                      columns=["metric", "mean", "stddev", "ci95", "n_folds"])
    return df.set_index("metric")
