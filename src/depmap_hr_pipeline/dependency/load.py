"""Persist dependency comparison artifacts."""

from pathlib import Path

import polars as pl
import structlog

from depmap_hr_pipeline.dependency.models import ComparisonResult
from depmap_hr_pipeline.output.writers import write_results_bundle, write_table
from depmap_hr_pipeline.persistence import ProvenanceTracker

logger = structlog.get_logger()

SUMMARY_FILENAME = "summary_statistics.csv"
RESULTS_FILENAME = "statistical_results.json"


def dependency_filename(target_gene: str) -> str:
    """e.g. ``parp1_dependency_with_hr_status.csv``"""
    return f"{target_gene.lower()}_dependency_with_hr_status.csv"


def save_dependency_table(
    df: pl.DataFrame,
    results_dir: Path,
    target_gene: str,
    score_column: str,
    provenance: ProvenanceTracker,
) -> dict:
    """Write the joined HR status + score table."""
    provenance.record_step("join_dependency_scores", {
        "target_gene": target_gene,
        "score_column": score_column,
        "sample_count": df.height,
    })
    paths = write_table(
        df,
        Path(results_dir) / dependency_filename(target_gene),
        provenance=provenance,
        description=f"{score_column} dependency score joined to HR status",
    )
    logger.info("dependency_table_saved", path=str(paths["csv"]), rows=df.height)
    return paths


def save_summary(
    summary: pl.DataFrame,
    results_dir: Path,
    provenance: ProvenanceTracker,
) -> dict:
    """Write the per-group summary statistics table."""
    provenance.record_step("summarize_groups", {
        "groups": summary["status_label"].to_list(),
        "counts": summary["n"].to_list(),
    })
    return write_table(
        summary,
        Path(results_dir) / SUMMARY_FILENAME,
        provenance=provenance,
        description="Dependency score summary statistics by HR status",
    )


def save_comparison(
    result: ComparisonResult,
    results_dir: Path,
    provenance: ProvenanceTracker,
) -> Path:
    """Write the statistical results bundle as JSON."""
    provenance.record_step("compare_groups", {
        "p_value": result.t_test.p_value,
        "slope": result.linear_model.slope,
        "significance": result.significance,
    })
    path = write_results_bundle(result, Path(results_dir) / RESULTS_FILENAME)
    logger.info("comparison_saved", path=str(path), significance=result.significance)
    return path
