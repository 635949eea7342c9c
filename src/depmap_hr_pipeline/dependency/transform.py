"""Resolve the target gene column, extract its scores and join them to HR status."""

from pathlib import Path
from typing import Iterable

import polars as pl
import structlog

from depmap_hr_pipeline.dependency.models import SCORE_COLUMN_PATTERN
from depmap_hr_pipeline.errors import (
    AmbiguousGeneColumnError,
    GeneNotFoundError,
    SchemaError,
)
from depmap_hr_pipeline.tables import column_names, require_columns, scan_depmap_csv

logger = structlog.get_logger()


def score_column_symbol(column: str) -> str | None:
    """Return the gene symbol part of a ``"SYMBOL (ID)"`` column name."""
    match = SCORE_COLUMN_PATTERN.match(column)
    if match is None:
        return None
    return match.group("symbol")


def resolve_gene_column(
    columns: Iterable[str],
    gene: str,
    exclude: Iterable[str] = (),
) -> str:
    """Find the unique score column for ``gene``.

    The symbol before the parenthetical ID must equal ``gene`` exactly
    (case-insensitive), so "PARP1" never matches "PARP10 (84875)".

    Args:
        columns: Column names of the score matrix
        gene: Target gene symbol
        exclude: Columns never considered (e.g. the sample ID column)

    Returns:
        The matching column name

    Raises:
        GeneNotFoundError: No column matches
        AmbiguousGeneColumnError: More than one column matches
    """
    target = gene.strip().upper()
    excluded = set(exclude)

    matches = []
    for column in columns:
        if column in excluded:
            continue
        symbol = score_column_symbol(column)
        if symbol is not None and symbol.upper() == target:
            matches.append(column)

    if not matches:
        raise GeneNotFoundError(
            gene,
            remediation=(
                "Check 'dependency.target_gene' against the CRISPRGeneEffect.csv "
                "header; symbols can change between DepMap releases."
            ),
        )
    if len(matches) > 1:
        raise AmbiguousGeneColumnError(gene, matches)

    logger.info("gene_column_resolved", gene=gene, column=matches[0])
    return matches[0]


def extract_gene_scores(
    matrix: pl.DataFrame | pl.LazyFrame,
    gene: str,
    id_column: str = "ModelID",
) -> tuple[pl.DataFrame, str]:
    """Pull one gene's scores out of a wide score matrix.

    Only the ID column and the resolved gene column are materialized.

    Args:
        matrix: Score matrix, one row per sample, one column per gene
        gene: Target gene symbol
        id_column: Sample key column in the matrix

    Returns:
        Tuple of (DataFrame with sample_id and float score, resolved column name).
        Unparseable scores become null.

    Raises:
        SchemaError: If the ID column is missing or sample IDs repeat
        GeneNotFoundError: If the gene column cannot be resolved
    """
    lf = matrix.lazy()
    require_columns(lf, [id_column], "dependency score matrix")

    column = resolve_gene_column(column_names(lf), gene, exclude=[id_column])

    scores = lf.select(
        pl.col(id_column).cast(pl.String).alias("sample_id"),
        pl.col(column).cast(pl.Float64, strict=False).alias("score"),
    ).collect()

    if scores["sample_id"].is_duplicated().any():
        raise SchemaError(
            "dependency score matrix",
            detail=f"{id_column} is not unique",
        )

    logger.info(
        "gene_scores_extracted",
        column=column,
        sample_count=scores.height,
        null_scores=scores["score"].null_count(),
    )

    return scores, column


def load_gene_scores(
    csv_path: Path,
    gene: str,
    id_column: str = "ModelID",
) -> tuple[pl.DataFrame, str]:
    """Read one gene's scores from CRISPRGeneEffect.csv (column-pruned)."""
    logger.info("gene_effect_parse_start", path=str(csv_path), gene=gene)
    return extract_gene_scores(scan_depmap_csv(csv_path), gene, id_column=id_column)


def join_dependency(hr_status: pl.DataFrame, scores: pl.DataFrame) -> pl.DataFrame:
    """Inner-join HR status with dependency scores.

    Samples absent from the score matrix, or whose score is null/NaN, are
    dropped. HR status row order is kept and ``score`` is appended.

    Raises:
        SchemaError: If either table lacks its key or value columns
    """
    require_columns(hr_status, ["sample_id", "status_label"], "HR status")
    require_columns(scores, ["sample_id", "score"], "dependency scores")

    joined = (
        hr_status.with_row_index("_order")
        .join(scores.select("sample_id", "score"), on="sample_id", how="inner")
        .filter(pl.col("score").is_not_null() & pl.col("score").is_not_nan())
        .sort("_order")
        .drop("_order")
    )

    logger.info(
        "dependency_joined",
        cohort_size=hr_status.height,
        with_score=joined.height,
        dropped=hr_status.height - joined.height,
    )

    return joined
