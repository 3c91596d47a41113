"""
Multi-class classification metrics for a fitted model's scored output.

These are the per-fold values fed to the cross-validation summarizer.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np
from sklearn.metrics import accuracy_score, balanced_accuracy_score, log_loss

from ..exceptions import InsufficientData, MalformedInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationMetrics:
    """Evaluation metrics of a multi-class classifier."""
    micro_accuracy: float       # fraction of rows classified correctly
    macro_accuracy: float       # mean per-class recall
    log_loss: float
    log_loss_reduction: float   # relative improvement over the class-prior predictor


def compute_classification_metrics(
    y_true: Sequence,
    proba: np.ndarray,
    labels: Optional[Sequence] = None
) -> ClassificationMetrics:
    """
    Compute classification metrics from predicted class probabilities.

    Parameters
    ----------
    y_true : array of shape (n_samples,)
        True labels.
    proba : array of shape (n_samples, n_classes)
        Predicted probabilities, one column per entry of ``labels``.
    labels : sequence, optional
        Class labels in column order. Defaults to the sorted unique labels
        of ``y_true``.

    Returns
    -------
    metrics : ClassificationMetrics
    """
    y_true = np.asarray(y_true)
    proba = np.asarray(proba, dtype=np.float64)

    if len(y_true) == 0:
        raise InsufficientData("No rows to evaluate")
    if proba.ndim != 2 or proba.shape[0] != len(y_true):
        raise MalformedInput(
            f"Expected probabilities of shape ({len(y_true)}, n_classes), got {proba.shape}"
        )

    labels = np.unique(y_true) if labels is None else np.asarray(labels)
    if len(labels) < 2:
        raise InsufficientData("At least two class labels are needed for log loss")
    if proba.shape[1] != len(labels):
        raise MalformedInput(
            f"{proba.shape[1]} probability columns for {len(labels)} class labels"
        )

    y_pred = labels[np.argmax(proba, axis=1)]

    micro = accuracy_score(y_true, y_pred)
    macro = balanced_accuracy_score(y_true, y_pred)
    loss = log_loss(y_true, proba, labels=labels)

    # Log loss of always predicting the training class frequencies
    _, counts = np.unique(y_true, return_counts=True)
    priors = counts / counts.sum()
    prior_loss = float(-np.sum(priors * np.log(priors)))

    if prior_loss == 0:
        logger.warning("Single class in y_true; log-loss reduction set to 0")
        reduction = 0.0
    else:
        reduction = (prior_loss - loss) / prior_loss

    return ClassificationMetrics(
        micro_accuracy=float(micro),
        macro_accuracy=float(macro),
        log_loss=float(loss),
        log_loss_reduction=float(reduction)
    )


def metrics_to_dict(metrics: ClassificationMetrics) -> Dict[str, float]:
    """Convert ClassificationMetrics to a dictionary keyed by display name."""
    return {
        "MicroAccuracy": metrics.micro_accuracy,
        "MacroAccuracy": metrics.macro_accuracy,
        "LogLoss": metrics.log_loss,
        "LogLossReduction": metrics.log_loss_reduction
    }
