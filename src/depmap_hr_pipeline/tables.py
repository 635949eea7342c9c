"""Shared helpers for scanning DepMap CSV tables and checking their schema."""

from pathlib import Path

import polars as pl
import structlog

from depmap_hr_pipeline.errors import ArtifactIOError, SchemaError

logger = structlog.get_logger()

NULL_VALUES = ["NA", ""]

DOWNLOAD_HINT = "Run 'depmap-hr download' (or the preceding pipeline stage) first."


def scan_depmap_csv(path: Path) -> pl.LazyFrame:
    """Lazily scan a DepMap CSV with every column read as text.

    Raises:
        ArtifactIOError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise ArtifactIOError(path, "file not found", remediation=DOWNLOAD_HINT)

    return pl.scan_csv(path, infer_schema_length=0, null_values=NULL_VALUES)


def column_names(frame: pl.DataFrame | pl.LazyFrame) -> list[str]:
    if isinstance(frame, pl.LazyFrame):
        return frame.collect_schema().names()
    return frame.columns


def require_columns(
    frame: pl.DataFrame | pl.LazyFrame,
    columns: list[str],
    table: str,
) -> None:
    """Raise SchemaError naming every required column absent from ``frame``."""
    present = set(column_names(frame))
    missing = [c for c in columns if c not in present]
    if missing:
        raise SchemaError(table, missing)


def standardize_columns(
    frame: pl.DataFrame | pl.LazyFrame,
    variants: dict[str, list[str]],
    required: list[str],
    table: str,
) -> pl.LazyFrame:
    """Select and rename source columns to their standard names.

    For each standard name the first matching source variant wins;
    standard names with no match are left out unless required.

    Args:
        frame: Raw table
        variants: Standard name -> accepted source column names
        required: Standard names that must be present
        table: Table name for error messages

    Returns:
        LazyFrame holding only the mapped columns, renamed

    Raises:
        SchemaError: If a required standard column has no source column
    """
    lf = frame.lazy()
    actual_columns = column_names(lf)

    column_mapping = {}
    for our_name, candidates in variants.items():
        for candidate in candidates:
            if candidate in actual_columns:
                column_mapping[our_name] = candidate
                break

    missing = [name for name in required if name not in column_mapping]
    if missing:
        logger.error(
            "table_schema_mismatch",
            table=table,
            missing=missing,
            actual_columns=actual_columns[:10],
        )
        raise SchemaError(
            table,
            [variants[name][0] for name in missing],
        )

    logger.debug("table_column_mapping", table=table, mapping=column_mapping)

    return lf.select([pl.col(src).alias(ours) for ours, src in column_mapping.items()])
