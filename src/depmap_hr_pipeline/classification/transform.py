"""Classify cohort samples as HR-deficient or HR-proficient from mutation calls."""

from pathlib import Path
from typing import Iterable, Literal

import polars as pl
import structlog

from depmap_hr_pipeline.classification.models import (
    DAMAGING_CATEGORIES,
    HR_GENES,
    MUTATION_COLUMN_VARIANTS,
    REQUIRED_MUTATION_COLUMNS,
    STATUS_DEFICIENT,
    STATUS_PROFICIENT,
)
from depmap_hr_pipeline.errors import SchemaError
from depmap_hr_pipeline.tables import require_columns, scan_depmap_csv, standardize_columns

logger = structlog.get_logger()

MatchMode = Literal["exact", "substring"]


def parse_mutation_table(csv_path: Path) -> pl.LazyFrame:
    """Parse OmicsSomaticMutations.csv, pruned to the four columns used here.

    Args:
        csv_path: Path to the mutation table

    Returns:
        LazyFrame with sample_id, gene_symbol, impact_category and
        (when present) protein_change

    Raises:
        ArtifactIOError: If the file does not exist
        SchemaError: If ModelID, HugoSymbol or VariantInfo is missing
    """
    logger.info("mutation_parse_start", path=str(csv_path))
    lf = scan_depmap_csv(csv_path)
    return standardize_columns(
        lf, MUTATION_COLUMN_VARIANTS, REQUIRED_MUTATION_COLUMNS, "OmicsSomaticMutations.csv"
    )


def damaging_category_expr(
    categories: Iterable[str],
    match_mode: MatchMode = "exact",
) -> pl.Expr:
    """Build the impact category predicate.

    Matching is case-insensitive and uniform across categories:
    "exact" is set membership, "substring" is containment for every
    category. Null categories never match.
    """
    categories = [c.strip().lower() for c in categories]
    impact = pl.col("impact_category").str.to_lowercase()

    if match_mode == "exact":
        return impact.is_in(categories)
    if match_mode == "substring":
        return pl.any_horizontal([impact.str.contains(c, literal=True) for c in categories])
    raise ValueError(f"Unknown category match mode: {match_mode!r}")


def filter_damaging_mutations(
    mutations: pl.DataFrame | pl.LazyFrame,
    cohort_ids: Iterable[str],
    gene_panel: Iterable[str] = HR_GENES,
    damaging_categories: Iterable[str] = DAMAGING_CATEGORIES,
    match_mode: MatchMode = "exact",
) -> pl.DataFrame:
    """Keep cohort mutation events in panel genes with a damaging impact.

    All three predicates are applied to individual events before any
    grouping, so a sample whose panel mutations are all non-damaging
    contributes nothing.

    Args:
        mutations: Mutation events with standard column names
        cohort_ids: Sample IDs of the cohort
        gene_panel: Gene symbols considered
        damaging_categories: Impact categories considered damaging
        match_mode: Category matching mode ("exact" or "substring")

    Returns:
        Distinct qualifying events (input order kept)

    Raises:
        SchemaError: If a required mutation column is absent
    """
    require_columns(mutations, REQUIRED_MUTATION_COLUMNS, "mutation events")

    cohort_frame = pl.DataFrame(
        {"sample_id": list(cohort_ids)},
        schema={"sample_id": pl.String},
    )

    qualifying = (
        mutations.lazy()
        .with_columns(pl.col("sample_id").cast(pl.String))
        .join(cohort_frame.lazy(), on="sample_id", how="semi")
        .filter(pl.col("gene_symbol").is_in(list(gene_panel)))
        .filter(damaging_category_expr(damaging_categories, match_mode))
        .unique(maintain_order=True)
        .collect()
    )

    logger.info(
        "hr_mutations_filtered",
        mutation_count=qualifying.height,
        sample_count=qualifying["sample_id"].n_unique(),
    )

    return qualifying


def build_hr_status(cohort: pl.DataFrame, qualifying: pl.DataFrame) -> pl.DataFrame:
    """Reduce qualifying events to one HR status row per cohort sample.

    Every cohort sample appears exactly once, in cohort order, with its
    original columns plus is_deficient, status_label and evidence_genes
    (distinct gene symbols, sorted; empty list when proficient).
    """
    # Left join at event level so unmutated samples still form a group
    evidence = (
        cohort.lazy()
        .select("sample_id")
        .join(qualifying.lazy().select("sample_id", "gene_symbol"), on="sample_id", how="left")
        .group_by("sample_id")
        .agg(pl.col("gene_symbol").drop_nulls().unique().sort().alias("evidence_genes"))
        .collect()
    )

    return (
        cohort.with_row_index("_order")
        .join(evidence, on="sample_id", how="left")
        .sort("_order")
        .drop("_order")
        .with_columns(
            (pl.col("evidence_genes").list.len() > 0).alias("is_deficient"),
        )
        .with_columns(
            pl.when(pl.col("is_deficient"))
            .then(pl.lit(STATUS_DEFICIENT))
            .otherwise(pl.lit(STATUS_PROFICIENT))
            .alias("status_label"),
        )
        .select(cohort.columns + ["is_deficient", "status_label", "evidence_genes"])
    )


def classify_hr_status(
    cohort: pl.DataFrame | pl.LazyFrame,
    mutations: pl.DataFrame | pl.LazyFrame,
    gene_panel: Iterable[str] = HR_GENES,
    damaging_categories: Iterable[str] = DAMAGING_CATEGORIES,
    match_mode: MatchMode = "exact",
) -> tuple[pl.DataFrame, pl.DataFrame]:
    """Classify every cohort sample by HR status.

    Args:
        cohort: Cohort sample table (must carry sample_id)
        mutations: Mutation events with standard column names
        gene_panel: HR gene panel
        damaging_categories: Impact categories considered damaging
        match_mode: Category matching mode

    Returns:
        Tuple of (hr_status, qualifying_mutations). hr_status has one row
        per cohort sample.

    Raises:
        SchemaError: If required columns are missing or sample_id repeats
    """
    require_columns(cohort, ["sample_id"], "cohort")
    if isinstance(cohort, pl.LazyFrame):
        cohort = cohort.collect()
    cohort = cohort.with_columns(pl.col("sample_id").cast(pl.String))

    duplicated = cohort.filter(pl.col("sample_id").is_duplicated())["sample_id"].unique().to_list()
    if duplicated:
        raise SchemaError(
            "cohort",
            detail=f"sample_id is not unique: {', '.join(sorted(duplicated)[:10])}",
        )

    gene_panel = list(gene_panel)
    qualifying = filter_damaging_mutations(
        mutations,
        cohort["sample_id"].to_list(),
        gene_panel=gene_panel,
        damaging_categories=damaging_categories,
        match_mode=match_mode,
    )

    status = build_hr_status(cohort, qualifying)

    deficient = status.filter(pl.col("is_deficient")).height
    logger.info(
        "hr_status_classified",
        cohort_size=cohort.height,
        deficient=deficient,
        proficient=status.height - deficient,
        panel_size=len(gene_panel),
    )

    return status, qualifying
