"""
Error taxonomy for the diagnostics engine.

All errors derive from ValueError so callers that already guard bad input
with ``except ValueError`` keep working.
"""


class DiagnosticsError(ValueError):
    """Base class for diagnostics failures."""


class InsufficientData(DiagnosticsError):
    """Fewer samples than a statistic needs (no folds, no rows)."""


class DegenerateVariance(DiagnosticsError):
    """A column or fold set has zero variance and the caller asked to fail."""


class MalformedInput(DiagnosticsError):
    """Shape or key mismatch in caller-supplied data."""
