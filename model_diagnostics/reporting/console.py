"""
Fixed-width text reports for the console.

Every function returns a string; printing is left to the caller.
"""

from typing import Optional, Sequence

from ..analysis.classification import ClassificationMetrics
from ..analysis.correlation import (
    BANDS, DIAGONAL_STYLE, CorrelatedPair, CorrelationMatrix, band_for
)
from ..analysis.cross_validation import FoldSummary
from ..analysis.feature_importance import RankedImportance

SEPARATOR = "-" * 82

_FOREGROUND = {
    "black": 30, "dark_red": 31, "dark_green": 32, "dark_yellow": 33,
    "dark_blue": 34, "gray": 37, "dark_gray": 90, "red": 91, "green": 92,
    "yellow": 93, "blue": 94, "white": 97,
}
_RESET = "\033[0m"


def colorize(text: str, foreground: str, background: Optional[str] = None) -> str:
    """Wrap text in ANSI colour codes."""
    codes = [str(_FOREGROUND[foreground])]
    if background is not None:
        codes.append(str(_FOREGROUND[background] + 10))
    return f"\033[{';'.join(codes)}m{text}{_RESET}"


def format_classification_metrics(metrics: ClassificationMetrics) -> str:
    lines = [
        SEPARATOR,
        f"       {'MicroAccuracy':>18} {'MacroAccuracy':>18} {'LogLoss':>18} {'LogLossReduction':>18}",
        f"       {metrics.micro_accuracy:18.3f} {metrics.macro_accuracy:18.3f} "
        f"{metrics.log_loss:18.3f} {metrics.log_loss_reduction:18.3f}",
        SEPARATOR,
    ]
    return "\n".join(lines)


def format_cross_validation(
    summaries: Sequence[FoldSummary],
    title: str = "Cross validation metrics multi-class classification model (against all dataset)"
) -> str:
    """Table of mean, stddev and CI half-width per metric, 3 decimals."""
    lines = [
        SEPARATOR,
        f" {title}",
        f"       {'':>18} {'Avg':>18} {'StdDev':>18} {'ConfInterval(95%)':>18}",
    ]
    for s in summaries:
        lines.append(f"       {s.metric:>18} {s.mean:18.3f} {s.stddev:18.3f} {s.ci95:18.3f}")
    lines.append(SEPARATOR)
    return "\n".join(lines)


def format_importance(
    ranked: Sequence[RankedImportance],
    threshold: float,
    metric_name: str = "MicroAccuracy",
    color: bool = False
) -> str:
    """
    Ranked permutation importance table.

    Removal candidates get five decimals and a trailing marker, the rest
    four.
    """
    lines = [
        " PFI (permutation feature importance)",
        SEPARATOR,
        f" PFI (by {metric_name}), threshold: {threshold}",
        SEPARATOR,
        f"  {'No':>4} {'Feature':<15} {metric_name:>15} {'95% Mean':>15}",
    ]
    for r in ranked:
        if r.is_removal_candidate:
            line = (f"  {r.rank:3d}. {r.base_feature:<15} {r.mean:15.5f} "
                    f"{r.interval_half_width:15.5f} (candidate for deletion!)")
            lines.append(colorize(line, "red") if color else line)
        else:
            lines.append(f"  {r.rank:3d}. {r.base_feature:<15} {r.mean:15.4f} "
                         f"{r.interval_half_width:15.4f}")
    lines.append(SEPARATOR)
    return "\n".join(lines)


def format_correlation_matrix(
    matrix: CorrelationMatrix,
    threshold: float,
    color: bool = True,
    show_legend: bool = False
) -> str:
    """Matrix grid with each cell coloured by its band."""
    lines = [
        " CORRELATION MATRIX",
        SEPARATOR,
        f" Correlation Matrix, threshold: {threshold}",
        SEPARATOR,
        " " * 12 + "".join(f"{name[:9]:>9}" for name in matrix.header),
    ]

    for i, row_name in enumerate(matrix.header):
        cells = []
        for j in range(matrix.size):
            value = matrix.values[i, j]
            cell = f"{value:9.4f}"
            if color:
                if i == j:
                    cell = colorize(cell, *DIAGONAL_STYLE)
                else:
                    band = band_for(value)
                    cell = colorize(cell, band.foreground, band.background)
            cells.append(cell)
        lines.append(f"{row_name[:12]:>12}" + "".join(cells))

    lines.append(SEPARATOR)

    if show_legend:
        lines.append("  Legend:")
        for band in BANDS:
            swatch = " " + "█" * 7
            if color:
                swatch = colorize(swatch, band.foreground, band.background)
            lines.append(f"{swatch} {band.lower:4.1f} : {band.upper:3.1f}")

    return "\n".join(lines)


def format_correlated_pairs(
    pairs: Sequence[CorrelatedPair],
    color: bool = False
) -> str:
    """Highly correlated pairs, in the order they were found."""
    lines = [
        "  We can remove one of the next high correlated features!",
        "    - closer to  0 => low correlated features",
        "    - closer to  1 => direct high correlated features",
        "    - closer to -1 => inverted high correlated features",
        SEPARATOR,
        f"  {'No':>4} {'Feature':<15} vs. {'Feature':<15} {'Rate':>15}",
    ]
    for no, p in enumerate(pairs, start=1):
        line = f"  {no:3d}. {p.feature_i:<15} vs. {p.feature_j:<15} {p.correlation:15.4f}"
        lines.append(colorize(line, "red") if color else line)
    lines.append(SEPARATOR)
    return "\n".join(lines)
