"""Cohort command: narrow DepMap model metadata to one lineage."""

import logging
from pathlib import Path

import click
import polars as pl

from depmap_hr_pipeline.acquisition.models import MODEL_FILENAME
from depmap_hr_pipeline.cli.common import fail, load_effective_config
from depmap_hr_pipeline.cohort import (
    COHORT_FILENAME,
    filter_cohort,
    parse_model_table,
    save_cohort,
)
from depmap_hr_pipeline.config.schema import PipelineConfig
from depmap_hr_pipeline.persistence import ProvenanceTracker

logger = logging.getLogger(__name__)


def run_cohort_stage(config: PipelineConfig, provenance: ProvenanceTracker) -> pl.DataFrame:
    """Parse Model.csv, filter it to the configured lineage and persist the cohort."""
    data_dir = Path(config.data_dir)
    lineage = config.cohort.lineage

    samples = parse_model_table(data_dir / MODEL_FILENAME).collect()
    click.echo(f"  Parsed {samples.height} cell line models")

    cohort = filter_cohort(samples, lineage)

    paths = save_cohort(
        cohort,
        data_dir / COHORT_FILENAME,
        provenance,
        lineage=lineage,
        source_count=samples.height,
    )

    if cohort.height == 0:
        click.echo(click.style(
            f"  No models with lineage {lineage!r}; the cohort is empty",
            fg='yellow'
        ))
    else:
        click.echo(click.style(
            f"  Cohort: {cohort.height} {lineage} cell lines",
            fg='green'
        ))
    click.echo(f"  Saved: {paths['csv']}")
    return cohort


@click.command('cohort')
@click.option(
    '--lineage',
    type=str,
    default=None,
    help='OncotreeLineage value to keep (overrides cohort.lineage)'
)
@click.pass_context
def cohort(ctx, lineage):
    """Filter cell line models to the target lineage cohort.

    Matching is exact on the lineage value. An empty cohort is written
    as an empty table with a warning.

    Examples:

        depmap-hr cohort

        depmap-hr cohort --lineage "Ovary/Fallopian Tube"
    """
    click.echo(click.style("=== Cohort Selection ===", bold=True))
    click.echo()

    try:
        config = load_effective_config(ctx, {'cohort.lineage': lineage})
        provenance = ProvenanceTracker.from_config(config)
        run_cohort_stage(config, provenance)
    except Exception as e:
        fail("Cohort command", e)
