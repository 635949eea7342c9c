"""Load cell line metadata and narrow it to the target lineage cohort."""

from pathlib import Path

import polars as pl
import structlog

from depmap_hr_pipeline.cohort.models import MODEL_COLUMN_VARIANTS, REQUIRED_SAMPLE_COLUMNS
from depmap_hr_pipeline.tables import require_columns, scan_depmap_csv, standardize_columns

logger = structlog.get_logger()


def parse_model_table(csv_path: Path) -> pl.LazyFrame:
    """Parse DepMap Model.csv into a LazyFrame of standard Sample columns.

    Args:
        csv_path: Path to Model.csv

    Returns:
        LazyFrame with sample_id, display_name, lineage and whichever
        optional demographic columns the file carries

    Raises:
        ArtifactIOError: If the file does not exist
        SchemaError: If ModelID, StrippedCellLineName or OncotreeLineage is missing
    """
    logger.info("model_parse_start", path=str(csv_path))
    lf = scan_depmap_csv(csv_path)
    return standardize_columns(lf, MODEL_COLUMN_VARIANTS, REQUIRED_SAMPLE_COLUMNS, "Model.csv")


def filter_cohort(
    samples: pl.DataFrame | pl.LazyFrame,
    lineage: str,
    lineage_column: str = "lineage",
) -> pl.DataFrame:
    """Keep samples whose lineage equals ``lineage`` exactly.

    All columns and the input row order are preserved. Zero matches is a
    valid, empty cohort.

    Args:
        samples: Sample table
        lineage: Target lineage value (e.g. "Breast")
        lineage_column: Column holding the lineage

    Returns:
        Materialized cohort DataFrame

    Raises:
        SchemaError: If the lineage column is absent
    """
    require_columns(samples, [lineage_column], "sample metadata")

    cohort = samples.lazy().filter(pl.col(lineage_column) == lineage).collect()

    if cohort.height == 0:
        logger.warning("cohort_empty", lineage=lineage)
    else:
        logger.info("cohort_filtered", lineage=lineage, sample_count=cohort.height)

    return cohort


def process_cohort(csv_path: Path, lineage: str) -> pl.DataFrame:
    """Parse Model.csv and filter it to the ``lineage`` cohort."""
    return filter_cohort(parse_model_table(csv_path), lineage)
