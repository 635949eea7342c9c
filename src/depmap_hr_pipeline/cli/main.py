"""Main CLI entry point for depmap-hr.

Provides command group with global options and subcommands for pipeline stages.
"""

import logging
from pathlib import Path

import click

from depmap_hr_pipeline import __version__
from depmap_hr_pipeline.config.loader import load_config
from depmap_hr_pipeline.cli.download_cmd import download
from depmap_hr_pipeline.cli.cohort_cmd import cohort
from depmap_hr_pipeline.cli.classify_cmd import classify
from depmap_hr_pipeline.cli.compare_cmd import compare
from depmap_hr_pipeline.cli.run_cmd import run


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    envvar='DEPMAP_HR_CONFIG',
    help='Path to pipeline configuration YAML file (built-in defaults if omitted)'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.version_option(__version__, prog_name='depmap-hr')
@click.pass_context
def cli(ctx, config, verbose):
    """depmap-hr: Do HR-deficient cancer cell lines depend more on PARP1?

    Downloads DepMap tables, selects a lineage cohort, classifies each cell
    line by homologous recombination status from damaging mutations in an
    HR gene panel, and compares target gene dependency between the groups.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display pipeline information and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"depmap-hr v{__version__}")
    click.echo(f"Config: {config_path or 'built-in defaults'}")
    click.echo()

    try:
        config = load_config(config_path)

        click.echo(f"Config Hash: {config.config_hash()[:16]}...")
        click.echo()

        click.echo(click.style("DepMap Source:", bold=True))
        click.echo(f"  Release: {config.depmap.release}")
        click.echo(f"  Base URL: {config.depmap.base_url}")
        click.echo(f"  Timeout: {config.depmap.timeout_seconds}s")
        click.echo(f"  Max Attempts: {config.depmap.max_attempts}")
        click.echo()

        click.echo(click.style("Paths:", bold=True))
        click.echo(f"  Data Directory: {config.data_dir}")
        click.echo(f"  Results Directory: {config.results_dir}")
        click.echo()

        click.echo(click.style("Analysis:", bold=True))
        click.echo(f"  Cohort Lineage: {config.cohort.lineage}")
        click.echo(f"  HR Gene Panel: {', '.join(config.classification.gene_panel)}")
        click.echo(
            f"  Damaging Categories: {', '.join(config.classification.damaging_categories)} "
            f"({config.classification.category_match} match)"
        )
        click.echo(f"  Target Gene: {config.dependency.target_gene}")
        click.echo(f"  Alpha: {config.dependency.alpha}")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


# Register commands
cli.add_command(download)
cli.add_command(cohort)
cli.add_command(classify)
cli.add_command(compare)
cli.add_command(run)


if __name__ == '__main__':
    cli()
