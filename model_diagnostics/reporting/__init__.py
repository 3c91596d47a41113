"""Console report formatting."""

from .console import (
    colorize,
    format_classification_metrics,
    format_cross_validation,
    format_importance,
    format_correlation_matrix,
    format_correlated_pairs,
    SEPARATOR
)
