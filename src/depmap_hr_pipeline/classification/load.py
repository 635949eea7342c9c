"""Persist and reload the HR status classification."""

from pathlib import Path

import polars as pl
import structlog

from depmap_hr_pipeline.classification.models import EVIDENCE_SEPARATOR, HR_STATUS_COLUMNS
from depmap_hr_pipeline.errors import SchemaError
from depmap_hr_pipeline.output.writers import write_table
from depmap_hr_pipeline.persistence import ProvenanceTracker
from depmap_hr_pipeline.tables import require_columns, scan_depmap_csv

logger = structlog.get_logger()

HR_STATUS_FILENAME = "hr_status.csv"
HR_MUTATIONS_FILENAME = "hr_mutations.csv"


def save_hr_status(
    status: pl.DataFrame,
    qualifying: pl.DataFrame,
    results_dir: Path,
    provenance: ProvenanceTracker,
) -> dict:
    """Write the HR status table and the qualifying mutation events.

    Returns:
        Dict with "hr_status" and "hr_mutations" path dicts (csv + provenance)
    """
    results_dir = Path(results_dir)
    deficient = status.filter(pl.col("is_deficient")).height

    provenance.record_step("classify_hr_status", {
        "cohort_size": status.height,
        "deficient_count": deficient,
        "proficient_count": status.height - deficient,
        "qualifying_mutations": qualifying.height,
    })

    status_paths = write_table(
        format_evidence_genes(status),
        results_dir / HR_STATUS_FILENAME,
        provenance=provenance,
        description="HR status per cohort sample (evidence_genes comma-joined)",
    )
    mutation_paths = write_table(
        qualifying,
        results_dir / HR_MUTATIONS_FILENAME,
        provenance=provenance,
        description="Damaging mutations in HR panel genes within the cohort",
    )

    logger.info(
        "hr_status_saved",
        path=str(status_paths["csv"]),
        deficient=deficient,
        proficient=status.height - deficient,
    )

    return {"hr_status": status_paths, "hr_mutations": mutation_paths}


def format_evidence_genes(df: pl.DataFrame) -> pl.DataFrame:
    """Join the evidence_genes list into its ", "-separated table form."""
    return df.with_columns(pl.col("evidence_genes").list.join(EVIDENCE_SEPARATOR))


def parse_evidence_genes(df: pl.DataFrame) -> pl.DataFrame:
    """Turn the comma-joined evidence_genes column back into a sorted list."""
    return df.with_columns(
        pl.col("evidence_genes")
        .fill_null("")
        .str.split(EVIDENCE_SEPARATOR.strip())
        .list.eval(pl.element().str.strip_chars().filter(pl.element().str.strip_chars() != ""))
        .list.sort()
        .alias("evidence_genes")
    )


def load_hr_status(csv_path: Path) -> pl.DataFrame:
    """Read a persisted HR status table back into its in-memory form.

    Raises:
        ArtifactIOError: If the file does not exist
        SchemaError: If status columns are missing or is_deficient is not boolean
    """
    csv_path = Path(csv_path)
    df = scan_depmap_csv(csv_path).collect()
    require_columns(df, HR_STATUS_COLUMNS, csv_path.name)

    flags = df["is_deficient"].str.to_lowercase()
    invalid = flags.filter(~flags.is_in(["true", "false"]) | flags.is_null())
    if invalid.len() > 0:
        raise SchemaError(
            csv_path.name,
            detail=f"is_deficient must be true/false, found {invalid.unique().to_list()[:5]}",
        )

    df = df.with_columns((flags == "true").alias("is_deficient"))
    return parse_evidence_genes(df)
