#!/usr/bin/env python3
"""
Run model diagnostics.

Reads the outputs of a finished training run and prints three reports:
1. Cross-validation summary (mean, stddev, 95% CI per metric)
2. Permutation feature importance with removal candidates
3. Correlation matrix of the numeric features with highly correlated pairs

Each report is independent; a failing one is logged and skipped.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import argparse
import json
import logging
import pandas as pd

from model_diagnostics.analysis import (
    summarize_cross_validation, fold_summary_to_dict,
    rank_importance, analyze_correlations
)
from model_diagnostics.data.schema import FeatureTable, infer_schema
from model_diagnostics.exceptions import DiagnosticsError
from model_diagnostics.reporting import (
    format_cross_validation, format_importance,
    format_correlation_matrix, format_correlated_pairs
)
from model_diagnostics.utils.helpers import load_config, save_results, config_to_dict

logger = logging.getLogger("run_diagnostics")


def load_json(path: str):
    with open(path, "r") as f:
        return json.load(f)


def run_cross_validation(folds_path: str, results: dict) -> None:
    summaries = summarize_cross_validation(load_json(folds_path))
    print(format_cross_validation(summaries))
    results["cross_validation"] = [fold_summary_to_dict(s) for s in summaries]


def run_importance(importance_path: str, config, results: dict) -> None:
    ranked = rank_importance(load_json(importance_path), threshold=config.pfi_threshold)
    print(format_importance(ranked, config.pfi_threshold, color=config.color))
    results["permutation_importance"] = [
        {
            "rank": r.rank,
            "feature": r.base_feature,
            "mean": r.mean,
            "interval_half_width": r.interval_half_width,
            "removal_candidate": r.is_removal_candidate
        }
        for r in ranked
    ]


def run_correlation(data_path: str, config, results: dict) -> None:
    df = pd.read_csv(data_path)
    schema = infer_schema(df, label=config.label, categorical=config.categorical)
    table = FeatureTable.from_dataframe(df, schema)

    report = analyze_correlations(
        table,
        threshold=config.correlation_threshold,
        on_zero_variance=config.zero_variance
    )
    print(format_correlation_matrix(
        report.matrix, report.threshold,
        color=config.color, show_legend=config.show_legend
    ))
    print(format_correlated_pairs(report.pairs, color=config.color))

    results["correlation"] = {
        "header": list(report.matrix.header),
        "matrix": report.matrix.values.tolist(),
        "pairs": [[p.feature_i, p.feature_j, p.correlation] for p in report.pairs]
    }


def main(args):
    config = load_config(args.config)
    logger.info("Loaded config from %s", args.config)

    results = {"config": config_to_dict(config)}
    steps = [
        ("cross-validation summary", args.folds, lambda p: run_cross_validation(p, results)),
        ("permutation importance", args.importance, lambda p: run_importance(p, config, results)),
        ("correlation matrix", args.data, lambda p: run_correlation(p, config, results)),
    ]

    n_failed = 0
    for name, path, step in steps:
        if path is None:
            logger.debug("Skipping %s: no input given", name)
            continue
        try:
            step(path)
        except DiagnosticsError as e:
            n_failed += 1
            logger.error("%s failed: %s", name, e)

    if args.output_dir:
        filepath = save_results(results, args.output_dir)
        print(f"\nResults saved to {filepath}")

    return 1 if n_failed else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run model diagnostics")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/default.yaml",
        help="Path to config file"
    )
    parser.add_argument(
        "--folds",
        type=str,
        default=None,
        help="JSON file with per-fold metrics"
    )
    parser.add_argument(
        "--importance",
        type=str,
        default=None,
        help="JSON file with raw permutation importance results"
    )
    parser.add_argument(
        "--data",
        type=str,
        default=None,
        help="CSV file with the training data"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory to save results as JSON"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(asctime)s %(levelname).3s] %(message)s",
        datefmt="%H:%M:%S"
    )

    sys.exit(main(args))
