"""Run command: execute every stage in order with one provenance record."""

import logging
from pathlib import Path

import click

from depmap_hr_pipeline.cli.classify_cmd import run_classify_stage
from depmap_hr_pipeline.cli.cohort_cmd import run_cohort_stage
from depmap_hr_pipeline.cli.common import fail, load_effective_config
from depmap_hr_pipeline.cli.compare_cmd import run_compare_stage
from depmap_hr_pipeline.cli.download_cmd import run_download_stage
from depmap_hr_pipeline.persistence import ProvenanceTracker

logger = logging.getLogger(__name__)


@click.command('run')
@click.option(
    '--skip-download',
    is_flag=True,
    help='Use the tables already in the data directory'
)
@click.option(
    '--skip-plots',
    is_flag=True,
    help='Skip plot generation'
)
@click.option('--release', type=str, default=None, help='DepMap release folder')
@click.option('--lineage', type=str, default=None, help='Cohort lineage')
@click.option('--target-gene', type=str, default=None, help='Gene to compare')
@click.pass_context
def run(ctx, skip_download, skip_plots, release, lineage, target_gene):
    """Run the full pipeline: download, cohort, classify, compare.

    Each stage writes the same artifacts as its standalone command; the
    first failing stage stops the run with exit code 1.

    Examples:

        depmap-hr run

        depmap-hr run --skip-download --lineage "Ovary/Fallopian Tube"
    """
    click.echo(click.style("=== DepMap HR Dependency Pipeline ===", bold=True))
    click.echo()

    stage = "Configuration"
    try:
        config = load_effective_config(ctx, {
            'depmap.release': release,
            'cohort.lineage': lineage,
            'dependency.target_gene': target_gene,
        })
        provenance = ProvenanceTracker.from_config(config)

        if skip_download:
            click.echo(click.style("Step 1: Skipping download (--skip-download)", fg='yellow'))
        else:
            stage = "Download"
            click.echo(click.style("Step 1: Downloading DepMap tables...", bold=True))
            run_download_stage(config, provenance)
        click.echo()

        stage = "Cohort selection"
        click.echo(click.style("Step 2: Selecting cohort...", bold=True))
        cohort = run_cohort_stage(config, provenance)
        click.echo()

        stage = "HR classification"
        click.echo(click.style("Step 3: Classifying HR status...", bold=True))
        hr_status = run_classify_stage(config, provenance, cohort=cohort)
        click.echo()

        stage = "Dependency comparison"
        click.echo(click.style("Step 4: Comparing dependency...", bold=True))
        run_compare_stage(config, provenance, hr_status=hr_status, skip_plots=skip_plots)
        click.echo()

        provenance_path = provenance.save_sidecar(Path(config.results_dir) / "pipeline_run")
        click.echo(f"Provenance: {provenance_path}")
        click.echo(click.style("Pipeline complete!", fg='green', bold=True))

    except Exception as e:
        fail(stage, e)
