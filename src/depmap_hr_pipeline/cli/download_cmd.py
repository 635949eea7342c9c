"""Download command: fetch the DepMap release tables.

Commands for:
- Fetching gene effect, model metadata, mutation and expression tables
- Skipping files already present in the data directory
- Reporting partial failures with a remediation hint
"""

import logging
from pathlib import Path

import click

from depmap_hr_pipeline.acquisition import (
    DEPMAP_DATASETS,
    download_datasets,
    summarize_downloads,
)
from depmap_hr_pipeline.cli.common import fail, load_effective_config
from depmap_hr_pipeline.config.schema import PipelineConfig
from depmap_hr_pipeline.persistence import ProvenanceTracker

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    'downloaded': 'green',
    'skipped': 'cyan',
    'failed': 'red',
}


def run_download_stage(
    config: PipelineConfig,
    provenance: ProvenanceTracker,
    required_only: bool = False,
) -> dict:
    """Download every dataset of the configured release and report the outcome.

    Returns:
        Summary dict from summarize_downloads
    """
    data_dir = Path(config.data_dir)
    datasets = [d for d in DEPMAP_DATASETS if d.required or not required_only]

    click.echo(f"  Release: {config.depmap.release}")
    click.echo(f"  Data directory: {data_dir}")
    click.echo()

    outcomes = download_datasets(
        data_dir,
        base_url=config.depmap.base_url,
        release=config.depmap.release,
        datasets=datasets,
        timeout=config.depmap.timeout_seconds,
        max_attempts=config.depmap.max_attempts,
    )

    for outcome in outcomes:
        status = click.style(f"{outcome.status:<10}", fg=STATUS_COLORS[outcome.status])
        click.echo(f"  {status} {outcome.dataset.filename}")
        if outcome.error is not None:
            click.echo(click.style(f"             {outcome.error}", fg='red'))

    summary = summarize_downloads(outcomes)

    provenance.record_step('download_depmap', {
        'release': config.depmap.release,
        'downloaded': summary['downloaded'],
        'skipped': summary['skipped'],
        'failed': summary['failed'],
    })
    provenance_path = provenance.save_sidecar(data_dir / "depmap_download")

    click.echo()
    click.echo(f"Successfully downloaded/found {summary['succeeded']}/{summary['total']} files")

    if summary['failed']:
        hints = {
            o.error.remediation for o in outcomes
            if o.error is not None and getattr(o.error, 'remediation', None)
        }
        click.echo(click.style(
            f"Failed: {', '.join(summary['failed'])}",
            fg='yellow'
        ))
        if summary['missing_required']:
            click.echo(click.style(
                f"Later stages need: {', '.join(summary['missing_required'])}",
                fg='yellow'
            ))
        for hint in sorted(hints):
            click.echo(click.style(f"  Hint: {hint}", fg='yellow'))

    click.echo(f"Provenance: {provenance_path}")
    return summary


@click.command('download')
@click.option(
    '--release',
    type=str,
    default=None,
    help='DepMap release folder, e.g. public_24Q4 (overrides depmap.release)'
)
@click.option(
    '--required-only',
    is_flag=True,
    help='Skip optional datasets (gene expression)'
)
@click.pass_context
def download(ctx, release, required_only):
    """Download DepMap release tables into the data directory.

    Files that already exist are skipped without any network access.
    A failed file does not stop the batch; the command reports how many
    files are available and exits 0 so later stages can report exactly
    which input is missing.

    Examples:

        depmap-hr download

        depmap-hr download --release public_24Q4
    """
    click.echo(click.style("=== DepMap Data Acquisition ===", bold=True))
    click.echo()

    try:
        config = load_effective_config(ctx, {'depmap.release': release})
        provenance = ProvenanceTracker.from_config(config)
        run_download_stage(config, provenance, required_only=required_only)
    except Exception as e:
        fail("Download command", e)
