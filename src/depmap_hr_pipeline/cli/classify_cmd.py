"""Classify command: label cohort samples HR-deficient or HR-proficient."""

import logging
from pathlib import Path
from typing import Optional

import click
import polars as pl

from depmap_hr_pipeline.acquisition.models import MUTATIONS_FILENAME
from depmap_hr_pipeline.classification import (
    classify_hr_status,
    parse_mutation_table,
    save_hr_status,
)
from depmap_hr_pipeline.cli.common import fail, load_effective_config, split_list_option
from depmap_hr_pipeline.cohort import COHORT_FILENAME, load_cohort
from depmap_hr_pipeline.config.schema import PipelineConfig
from depmap_hr_pipeline.persistence import ProvenanceTracker

logger = logging.getLogger(__name__)


def run_classify_stage(
    config: PipelineConfig,
    provenance: ProvenanceTracker,
    cohort: Optional[pl.DataFrame] = None,
) -> pl.DataFrame:
    """Classify the cohort and persist status plus qualifying mutations.

    Args:
        config: Effective configuration
        provenance: Tracker for this run
        cohort: Cohort table; read from the data directory when None

    Returns:
        HR status table (one row per cohort sample)
    """
    data_dir = Path(config.data_dir)
    settings = config.classification

    if cohort is None:
        cohort = load_cohort(data_dir / COHORT_FILENAME)

    click.echo(f"  Gene panel ({len(settings.gene_panel)}): {', '.join(settings.gene_panel)}")
    click.echo(
        f"  Damaging categories ({settings.category_match} match): "
        f"{', '.join(settings.damaging_categories)}"
    )

    mutations = parse_mutation_table(data_dir / MUTATIONS_FILENAME)
    status, qualifying = classify_hr_status(
        cohort,
        mutations,
        gene_panel=settings.gene_panel,
        damaging_categories=settings.damaging_categories,
        match_mode=settings.category_match,
    )

    paths = save_hr_status(status, qualifying, config.results_dir, provenance)

    deficient = status.filter(pl.col("is_deficient")).height
    click.echo(click.style(
        f"  HR-deficient: {deficient}, HR-proficient: {status.height - deficient}",
        fg='green'
    ))
    click.echo(f"  Qualifying mutations: {qualifying.height}")
    click.echo(f"  Saved: {paths['hr_status']['csv']}")
    return status


@click.command('classify')
@click.option(
    '--gene-panel',
    type=str,
    default=None,
    help='Comma-separated HR gene symbols (overrides classification.gene_panel)'
)
@click.option(
    '--damaging-categories',
    type=str,
    default=None,
    help='Comma-separated impact categories (overrides classification.damaging_categories)'
)
@click.option(
    '--category-match',
    type=click.Choice(['exact', 'substring']),
    default=None,
    help='Impact category matching mode'
)
@click.pass_context
def classify(ctx, gene_panel, damaging_categories, category_match):
    """Classify cohort cell lines by HR status.

    A sample is HR-deficient when it carries at least one mutation in a
    panel gene whose impact category is damaging; every other cohort
    sample is HR-proficient.

    Examples:

        depmap-hr classify

        depmap-hr classify --gene-panel BRCA1,BRCA2,PALB2
    """
    click.echo(click.style("=== HR Status Classification ===", bold=True))
    click.echo()

    try:
        config = load_effective_config(ctx, {
            'classification.gene_panel': split_list_option(gene_panel),
            'classification.damaging_categories': split_list_option(damaging_categories),
            'classification.category_match': category_match,
        })
        provenance = ProvenanceTracker.from_config(config)
        run_classify_stage(config, provenance)
    except Exception as e:
        fail("Classify command", e)
