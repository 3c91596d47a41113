"""Cross-validation, permutation importance and correlation analysis."""

from .cross_validation import (
    summarize_folds,
    summarize_cross_validation,
    fold_summary_to_dict,
    fold_summaries_to_frame,
    FoldSummary,
    CI95_Z
)

from .classification import (
    compute_classification_metrics,
    metrics_to_dict,
    ClassificationMetrics
)

from .feature_importance import (
    parse_feature_key,
    aggregate_importance,
    rank_importance,
    compute_permutation_importance,
    importance_to_frame,
    FeatureKey,
    ImportanceEntry,
    AggregatedImportance,
    RankedImportance,
    PFI_INTERVAL_Z
)

from .correlation import (
    pearson_matrix,
    find_correlated_pairs,
    analyze_correlations,
    band_for,
    pairs_to_frame,
    CorrelationMatrix,
    CorrelatedPair,
    CorrelationBand,
    CorrelationReport,
    BANDS
)
