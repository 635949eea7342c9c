"""Persist and reload the cohort subset."""

from pathlib import Path

import polars as pl
import structlog

from depmap_hr_pipeline.cohort.models import REQUIRED_SAMPLE_COLUMNS
from depmap_hr_pipeline.output.writers import write_table
from depmap_hr_pipeline.persistence import ProvenanceTracker
from depmap_hr_pipeline.tables import require_columns, scan_depmap_csv

logger = structlog.get_logger()

COHORT_FILENAME = "cohort_samples.csv"


def save_cohort(
    cohort: pl.DataFrame,
    output_path: Path,
    provenance: ProvenanceTracker,
    lineage: str,
    source_count: int | None = None,
) -> dict:
    """Write the cohort table and record the filtering step."""
    provenance.record_step("filter_cohort", {
        "lineage": lineage,
        "input_count": source_count,
        "output_count": cohort.height,
    })

    paths = write_table(
        cohort,
        output_path,
        provenance=provenance,
        description=f"DepMap cell line models with lineage == {lineage!r}",
    )

    logger.info("cohort_saved", path=str(paths["csv"]), sample_count=cohort.height)
    return paths


def load_cohort(csv_path: Path) -> pl.DataFrame:
    """Read a persisted cohort table.

    Raises:
        ArtifactIOError: If the file does not exist
        SchemaError: If a standard sample column is missing
    """
    lf = scan_depmap_csv(csv_path)
    require_columns(lf, REQUIRED_SAMPLE_COLUMNS, Path(csv_path).name)
    return lf.collect()
