"""
Tests for classification metrics.
"""

import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from model_diagnostics.analysis.classification import (
    compute_classification_metrics,
    metrics_to_dict,
)
from model_diagnostics.analysis.cross_validation import summarize_cross_validation
from model_diagnostics.exceptions import InsufficientData, MalformedInput


class TestClassificationMetrics:
    """Tests for compute_classification_metrics."""

    def test_perfect_predictions(self):
        y = np.array([0, 1, 2, 1])
        proba = np.eye(3)[y] * 0.98 + 0.01 / 1.5
        proba = proba / proba.sum(axis=1, keepdims=True)
        metrics = compute_classification_metrics(y, proba)
        assert metrics.micro_accuracy == 1.0
        assert metrics.macro_accuracy == 1.0
        assert metrics.log_loss < 0.1
        assert metrics.log_loss_reduction > 0.9

    def test_micro_vs_macro(self):
        """Test macro accuracy averages per-class recall."""
        y = np.array([0, 0, 0, 1])
        proba = np.array([[0.9, 0.1]] * 4)
        metrics = compute_classification_metrics(y, proba)
        assert metrics.micro_accuracy == pytest.approx(0.75)
        assert metrics.macro_accuracy == pytest.approx(0.5)

    def test_prior_predictor_has_no_reduction(self):
        """Test predicting the class frequencies gives zero reduction."""
        y = np.array([0, 0, 0, 1])
        proba = np.array([[0.75, 0.25]] * 4)
        metrics = compute_classification_metrics(y, proba)
        assert metrics.log_loss_reduction == pytest.approx(0.0, abs=1e-9)

    def test_string_labels(self):
        y = np.array(['no', 'yes', 'yes'])
        proba = np.array([[0.8, 0.2], [0.3, 0.7], [0.4, 0.6]])
        metrics = compute_classification_metrics(y, proba, labels=['no', 'yes'])
        assert metrics.micro_accuracy == 1.0

    def test_shape_mismatch(self):
        with pytest.raises(MalformedInput):
            compute_classification_metrics([0, 1], np.array([[0.5, 0.5]]))
        with pytest.raises(MalformedInput):
            compute_classification_metrics([0, 1], np.array([[0.2, 0.3, 0.5], [0.2, 0.3, 0.5]]))

    def test_empty(self):
        with pytest.raises(InsufficientData):
            compute_classification_metrics([], np.empty((0, 2)))

    def test_single_class(self):
        with pytest.raises(InsufficientData):
            compute_classification_metrics([1, 1, 1], np.array([[1.0]] * 3))

    def test_single_class_with_explicit_labels(self):
        """Test a fold holding one class still scores against both labels."""
        metrics = compute_classification_metrics(
            [0, 0], np.array([[0.9, 0.1], [0.8, 0.2]]), labels=[0, 1]
        )
        assert metrics.micro_accuracy == 1.0
        assert metrics.log_loss_reduction == 0.0

    def test_folds_feed_summary(self):
        """Test per-fold metric dicts go straight into the CV summary."""
        np.random.seed(42)
        folds = []
        for _ in range(5):
            y = np.random.randint(0, 2, size=50)
            proba = np.clip(np.eye(2)[y] * 0.6 + np.random.rand(50, 2) * 0.4, 0.01, None)
            proba = proba / proba.sum(axis=1, keepdims=True)
            folds.append(metrics_to_dict(compute_classification_metrics(y, proba)))

        summaries = summarize_cross_validation(folds)
        assert [s.metric for s in summaries] == [
            'MicroAccuracy', 'MacroAccuracy', 'LogLoss', 'LogLossReduction'
        ]
        assert all(s.n_folds == 5 for s in summaries)
