"""Gene dependency comparison between HR-deficient and HR-proficient samples."""

from depmap_hr_pipeline.dependency.models import (
    ComparisonResult,
    GroupSummary,
    LinearModelResult,
    ModelCoefficient,
    ModelFit,
    WelchTestResult,
)
from depmap_hr_pipeline.dependency.transform import (
    extract_gene_scores,
    join_dependency,
    load_gene_scores,
    resolve_gene_column,
    score_column_symbol,
)
from depmap_hr_pipeline.dependency.statistics import (
    classify_significance,
    compare_groups,
    fit_group_model,
    split_groups,
    summarize_groups,
    summary_records,
    welch_t_test,
)
from depmap_hr_pipeline.dependency.load import (
    RESULTS_FILENAME,
    SUMMARY_FILENAME,
    dependency_filename,
    save_comparison,
    save_dependency_table,
    save_summary,
)

__all__ = [
    "ComparisonResult",
    "GroupSummary",
    "LinearModelResult",
    "ModelCoefficient",
    "ModelFit",
    "WelchTestResult",
    "score_column_symbol",
    "resolve_gene_column",
    "extract_gene_scores",
    "load_gene_scores",
    "join_dependency",
    "summarize_groups",
    "summary_records",
    "split_groups",
    "welch_t_test",
    "fit_group_model",
    "classify_significance",
    "compare_groups",
    "SUMMARY_FILENAME",
    "RESULTS_FILENAME",
    "dependency_filename",
    "save_dependency_table",
    "save_summary",
    "save_comparison",
]
