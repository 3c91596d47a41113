"""
Permutation feature importance aggregation.

Encoded sub-features (e.g. one-hot levels keyed "Pclass.1", "Pclass.2")
are collapsed under their source column, then ranked ascending so the
features whose removal costs least come first.

1. Key normalization: "<base>.<variant>" -> base
2. Grouping: means and standard errors are summed per base feature
3. Ranking and flagging of removal candidates
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Union

import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score

from ..exceptions import InsufficientData, MalformedInput

logger = logging.getLogger(__name__)

# z-score used for the displayed PFI interval; differs from CI95_Z on purpose
PFI_INTERVAL_Z = 1.95


class FeatureKey(NamedTuple):
    """Source column and encoded variant of a model input slot."""
    base_feature: str
    encoded_variant: Optional[str] = None


@dataclass(frozen=True)
class ImportanceEntry:
    """Permutation result for one model input slot."""
    raw_key: Union[str, FeatureKey]
    mean: float
    standard_error: float


@dataclass(frozen=True)
class AggregatedImportance:
    """Importance of a source column, summed over its encoded variants."""
    base_feature: str
    mean: float
    standard_error: float
    n_variants: int = 1


@dataclass(frozen=True)
class RankedImportance:
    rank: int
    base_feature: str
    mean: float
    interval_half_width: float
    is_removal_candidate: bool


ImportanceInput = Union[
    Mapping[Union[str, FeatureKey], object],
    Iterable[ImportanceEntry]
]


def parse_feature_key(raw_key: Union[str, FeatureKey]) -> FeatureKey:
    """
    Split a raw key on its first dot.

    >>> parse_feature_key("Pclass.1")
    FeatureKey(base_feature='Pclass', encoded_variant='1')
    """
    if isinstance(raw_key, FeatureKey):
        key = raw_key
    else:
        base, sep, variant = str(raw_key).partition(".")
        key = FeatureKey(base, variant if sep else None)

    if not key.base_feature:
        raise MalformedInput(f"Feature key {raw_key!r} has no base feature segment")
    return key


def _to_entry(key, value) -> ImportanceEntry:
    if isinstance(value, ImportanceEntry):
        return value
    if isinstance(value, Mapping):
        try:
            return ImportanceEntry(key, float(value["mean"]), float(value["standard_error"]))
        except KeyError as e:
            raise MalformedInput(f"Importance for {key!r} is missing {e}") from None
    try:
        mean, standard_error = value
    except (TypeError, ValueError):
        raise MalformedInput(
            f"Importance for {key!r} must be (mean, standard_error), got {value!r}"
        ) from None
    return ImportanceEntry(key, float(mean), float(standard_error))


def _entries(importances: ImportanceInput) -> List[ImportanceEntry]:
    if isinstance(importances, Mapping):
        return [_to_entry(k, v) for k, v in importances.items()]
    entries = list(importances)
    for e in entries:
        if not isinstance(e, ImportanceEntry):
            raise MalformedInput(f"Expected ImportanceEntry, got {e!r}")
    return entries


def aggregate_importance(importances: ImportanceInput) -> List[AggregatedImportance]:
    """
    Collapse sub-feature results under their base feature.

    Means and standard errors are summed (not averaged or pooled).

    Parameters
    ----------
    importances : mapping or iterable
        raw key -> (mean, standard_error) / {"mean", "standard_error"} /
        ImportanceEntry, or an iterable of ImportanceEntry.

    Returns
    -------
    aggregated : list of AggregatedImportance
        Sorted ascending by mean, ties broken by feature name.
    """
    groups: "OrderedDict[str, List[ImportanceEntry]]" = OrderedDict()
    for entry in _entries(importances):
        if not (np.isfinite(entry.mean) and np.isfinite(entry.standard_error)):
            raise MalformedInput(f"Non-finite importance for {entry.raw_key!r}")
        base = parse_feature_key(entry.raw_key).base_feature
        groups.setdefault(base, []).append(entry)

    aggregated = [
        AggregatedImportance(
            base_feature=base,
            mean=float(sum(e.mean for e in entries)),
            standard_error=float(sum(e.standard_error for e in entries)),
            n_variants=len(entries)
        )
        for base, entries in groups.items()
    ]
    aggregated.sort(key=lambda a: (a.mean, a.base_feature))

    logger.debug("Aggregated %d importance entries into %d features",
                 sum(a.n_variants for a in aggregated), len(aggregated))
    return aggregated


def rank_importance(
    importances: ImportanceInput,
    threshold: float = 0.01
) -> List[RankedImportance]:
    """
    Rank aggregated importances and flag removal candidates.

    Parameters
    ----------
    importances : mapping or iterable
        See aggregate_importance.
    threshold : float
        Features with ``abs(mean) < threshold`` are removal candidates.

    Returns
    -------
    ranked : list of RankedImportance
        Rank 1 is the lowest mean.
    """
    if threshold < 0 or not np.isfinite(threshold):
        raise MalformedInput(f"Threshold must be a non-negative number, got {threshold}")

    ranked = []
    for rank, agg in enumerate(aggregate_importance(importances), start=1):
        ranked.append(RankedImportance(
            rank=rank,
            base_feature=agg.base_feature,
            mean=agg.mean,
            interval_half_width=PFI_INTERVAL_Z * agg.standard_error,
            is_removal_candidate=abs(agg.mean) < threshold
        ))

    n_candidates = sum(r.is_removal_candidate for r in ranked)
    if n_candidates:
        logger.info("%d of %d features are removal candidates (threshold %s)",
                    n_candidates, len(ranked), threshold)
    return ranked


def compute_permutation_importance(
    model,
    X: np.ndarray,
    y: np.ndarray,
    feature_names: Sequence[str],
    metric_fn: Optional[Callable[[np.ndarray, np.ndarray], float]] = None,
    n_permutations: int = 5,
    random_state: int = 1
) -> Dict[str, ImportanceEntry]:
    """
    Permutation importance of an already-fitted model.

    Each column is shuffled ``n_permutations`` times; the importance is the
    change in the metric (permuted minus baseline), so important features
    get negative values for higher-is-better metrics.

    Parameters
    ----------
    model : object with ``predict``
        Fitted model; it is never refit.
    X : array of shape (n_samples, n_features)
    y : array of shape (n_samples,)
    feature_names : list of feature names, one per column of X
    metric_fn : callable(y_true, y_pred) -> float, defaults to accuracy
    n_permutations : number of shuffles per feature
    random_state : random seed

    Returns
    -------
    importances : dict
        feature name -> ImportanceEntry with mean delta and its standard error
    """
    X = np.asarray(X)
    y = np.asarray(y)

    if X.ndim != 2 or X.shape[1] != len(feature_names):
        raise MalformedInput(
            f"X has shape {X.shape} but {len(feature_names)} feature names were given"
        )
    if len(y) != X.shape[0]:
        raise MalformedInput(f"X has {X.shape[0]} rows but y has {len(y)}")
    if X.shape[0] == 0:
        raise InsufficientData("No rows to permute")
    if n_permutations < 1:
        raise InsufficientData("n_permutations must be at least 1")

    if metric_fn is None:
        metric_fn = accuracy_score

    rng = np.random.RandomState(random_state)
    baseline_score = metric_fn(y, model.predict(X))

    results = {}

    for i, name in enumerate(feature_names):
        deltas = []

        for _ in range(n_permutations):
            X_permuted = X.copy()
            rng.shuffle(X_permuted[:, i])

            perm_score = metric_fn(y, model.predict(X_permuted))
            deltas.append(perm_score - baseline_score)

        deltas = np.array(deltas)
        if n_permutations > 1:
            standard_error = np.std(deltas, ddof=1) / np.sqrt(n_permutations)
        else:
            standard_error = 0.0

        results[name] = ImportanceEntry(
            raw_key=name,
            mean=float(np.mean(deltas)),
            standard_error=float(standard_error)
        )

    logger.debug("Permutation importance computed for %d features (%d permutations each)",
                 len(feature_names), n_permutations)
    return results


def importance_to_frame(ranked: Sequence[RankedImportance]) -> pd.DataFrame:
    """Ranked importances as a DataFrame indexed by rank."""
    df = pd.DataFrame(
        [{
            'rank': r.rank,
            'feature': r.base_feature,
            'mean': r.mean,
            'interval_half_width': r.interval_half_width,
            'removal_candidate': r.is_removal_candidate
        } for r in ranked],
        columns=['rank', 'feature', 'mean', 'interval_half_width', 'removal_candidate']
    )
    return df.set_index('rank')
