"""
Tests for console report formatting.
"""

import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from model_diagnostics.analysis.classification import ClassificationMetrics
from model_diagnostics.analysis.correlation import CorrelatedPair, CorrelationMatrix, pearson_matrix
from model_diagnostics.analysis.cross_validation import summarize_cross_validation
from model_diagnostics.analysis.feature_importance import rank_importance
from model_diagnostics.reporting.console import (
    colorize,
    format_classification_metrics,
    format_cross_validation,
    format_importance,
    format_correlation_matrix,
    format_correlated_pairs,
    SEPARATOR,
)


class TestCrossValidationReport:
    """Tests for the cross-validation table."""

    def test_three_decimals(self, fold_metrics):
        summaries = summarize_cross_validation(fold_metrics)
        lines = format_cross_validation(summaries).splitlines()
        assert lines[0] == SEPARATOR
        assert lines[-1] == SEPARATOR
        s = summaries[0]
        row = next(line for line in lines if 'MicroAccuracy' in line)
        assert row == f"       {'MicroAccuracy':>18} {s.mean:18.3f} {s.stddev:18.3f} {s.ci95:18.3f}"

    def test_header(self, fold_metrics):
        text = format_cross_validation(summarize_cross_validation(fold_metrics))
        assert 'ConfInterval(95%)' in text
        assert 'StdDev' in text


class TestClassificationReport:

    def test_columns(self):
        metrics = ClassificationMetrics(0.81234, 0.79, 0.45678, 0.3)
        text = format_classification_metrics(metrics)
        assert '0.812' in text
        assert '0.457' in text
        assert 'LogLossReduction' in text


class TestImportanceReport:
    """Tests for the PFI table."""

    def test_candidate_rows(self, raw_importance):
        ranked = rank_importance(raw_importance, threshold=0.01)
        text = format_importance(ranked, 0.01)
        fare = next(line for line in text.splitlines() if 'Fare' in line)
        assert fare.endswith('(candidate for deletion!)')
        assert '0.00200' in fare

    def test_regular_rows(self, raw_importance):
        ranked = rank_importance(raw_importance, threshold=0.01)
        text = format_importance(ranked, 0.01)
        sex = next(line for line in text.splitlines() if 'Sex' in line)
        assert sex == f"  {1:3d}. {'Sex':<15} {-0.2:15.4f} {1.95 * 0.018:15.4f}"

    def test_threshold_in_title(self, raw_importance):
        text = format_importance(rank_importance(raw_importance), 0.01)
        assert 'threshold: 0.01' in text

    def test_color(self, raw_importance):
        ranked = rank_importance(raw_importance, threshold=0.01)
        plain = format_importance(ranked, 0.01, color=False)
        colored = format_importance(ranked, 0.01, color=True)
        assert '\033[' not in plain
        assert '\033[91m' in colored


class TestCorrelationReport:
    """Tests for the matrix grid and pair list."""

    def test_grid_layout(self, correlated_table):
        matrix = pearson_matrix(correlated_table)
        lines = format_correlation_matrix(matrix, 0.9, color=False).splitlines()
        assert lines[4] == " " * 12 + f"{'x':>9}{'y':>9}{'z':>9}"
        assert lines[5] == f"{'x':>12}" + "".join(f"{v:9.4f}" for v in matrix.values[0])
        assert lines[6].startswith(f"{'y':>12}{1.0:9.4f}{1.0:9.4f}")

    def test_long_names_truncated(self):
        matrix = CorrelationMatrix(
            header=('VeryLongFeatureName',),
            values=[[1.0]]
        )
        lines = format_correlation_matrix(matrix, 0.9, color=False).splitlines()
        assert lines[4] == " " * 12 + "VeryLongF"
        assert lines[5].startswith("VeryLongFeat")

    def test_diagonal_style(self, correlated_table):
        text = format_correlation_matrix(pearson_matrix(correlated_table), 0.9)
        assert colorize(f"{1.0:9.4f}", "gray", "dark_gray") in text

    def test_legend(self, correlated_table):
        text = format_correlation_matrix(
            pearson_matrix(correlated_table), 0.9, color=False, show_legend=True
        )
        assert 'Legend' in text
        assert '0.8 : 1.0' in text

    def test_pairs(self):
        pairs = [CorrelatedPair('Pclass', 'Fare', -0.91234)]
        text = format_correlated_pairs(pairs)
        row = next(line for line in text.splitlines() if 'vs.' in line and 'Pclass' in line)
        assert row == f"  {1:3d}. {'Pclass':<15} vs. {'Fare':<15} {-0.9123:15.4f}"

    def test_no_pairs(self):
        text = format_correlated_pairs([])
        assert text.splitlines()[-1] == SEPARATOR
