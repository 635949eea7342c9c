"""CSV artifact writer with YAML provenance sidecar, plus JSON results bundle."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import polars as pl
import yaml
from pydantic import BaseModel

from depmap_hr_pipeline.errors import ArtifactIOError
from depmap_hr_pipeline.persistence.provenance import ProvenanceTracker

LIST_SEPARATOR = ", "


def serialize_list_columns(df: pl.DataFrame, separator: str = LIST_SEPARATOR) -> pl.DataFrame:
    """Join every list-of-string column into a delimited string for CSV output."""
    list_columns = [name for name, dtype in df.schema.items() if isinstance(dtype, pl.List)]
    if not list_columns:
        return df
    return df.with_columns(
        [pl.col(name).cast(pl.List(pl.String)).list.join(separator) for name in list_columns]
    )


def sidecar_path_for(output_path: Path) -> Path:
    return output_path.with_suffix(".provenance.yaml")


def write_table(
    df: pl.DataFrame | pl.LazyFrame,
    output_path: Path,
    provenance: Optional[ProvenanceTracker] = None,
    description: str = "",
) -> dict:
    """
    Write a pipeline table as CSV with a YAML provenance sidecar.

    Args:
        df: Table to write. List columns are joined with ", ".
        output_path: Destination CSV path (parent directories are created)
        provenance: Optional tracker whose metadata is embedded in the sidecar
        description: Free-text description stored in the sidecar

    Returns:
        Dictionary with output file paths:
        {"csv": Path to CSV, "provenance": Path to YAML sidecar}

    Raises:
        ArtifactIOError: If either file cannot be written
    """
    output_path = Path(output_path)

    if isinstance(df, pl.LazyFrame):
        df = df.collect()

    provenance_path = sidecar_path_for(output_path)

    metadata = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "description": description,
        "output_file": output_path.name,
        "row_count": df.height,
        "column_count": len(df.columns),
        "column_names": df.columns,
    }
    if provenance is not None:
        metadata["provenance"] = provenance.create_metadata()

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        serialize_list_columns(df).write_csv(output_path, include_header=True)
        with open(provenance_path, "w") as f:
            yaml.safe_dump(metadata, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise ArtifactIOError(output_path, f"write failed: {e}") from e

    return {
        "csv": output_path,
        "provenance": provenance_path,
    }


def write_results_bundle(result: BaseModel, output_path: Path) -> Path:
    """
    Write a pydantic results model as indented JSON.

    Raises:
        ArtifactIOError: If the file cannot be written
    """
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(result.model_dump_json(indent=2))
    except OSError as e:
        raise ArtifactIOError(output_path, f"write failed: {e}") from e
    return output_path
