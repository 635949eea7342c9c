"""Compare command: test whether HR-deficient lines depend more on the target gene.

Commands for:
- Extracting the target gene's dependency scores
- Joining scores to HR status and summarizing each group
- One-tailed Welch t-test and linear model fit
- Dependency plots
"""

import logging
from pathlib import Path
from typing import Optional

import click
import polars as pl

from depmap_hr_pipeline.acquisition.models import GENE_EFFECT_FILENAME
from depmap_hr_pipeline.classification import HR_STATUS_FILENAME, load_hr_status
from depmap_hr_pipeline.cli.common import fail, load_effective_config
from depmap_hr_pipeline.config.schema import PipelineConfig
from depmap_hr_pipeline.dependency import (
    ComparisonResult,
    compare_groups,
    join_dependency,
    load_gene_scores,
    save_comparison,
    save_dependency_table,
    save_summary,
    summarize_groups,
)
from depmap_hr_pipeline.output.visualizations import generate_all_plots
from depmap_hr_pipeline.persistence import ProvenanceTracker

logger = logging.getLogger(__name__)

SIGNIFICANCE_TEXT = {
    'highly_significant': ("HIGHLY SIGNIFICANT (p < 0.001)", 'green'),
    'significant': ("SIGNIFICANT", 'green'),
    'not_significant': ("NOT SIGNIFICANT", 'yellow'),
    'undefined': ("UNDEFINED (p-value could not be computed)", 'yellow'),
}


def _fmt(value: Optional[float], fmt: str = ".4f") -> str:
    if value is None:
        return "NA"
    return format(value, fmt)


def _echo_summary(summary: pl.DataFrame) -> None:
    click.echo(f"  {'group':<12}{'n':>5}{'mean':>10}{'median':>10}{'sd':>10}{'se':>10}")
    for row in summary.to_dicts():
        click.echo(
            f"  {row['status_label']:<12}{row['n']:>5}"
            f"{_fmt(row['mean']):>10}{_fmt(row['median']):>10}"
            f"{_fmt(row['stddev']):>10}{_fmt(row['stderr']):>10}"
        )


def _echo_result(result: ComparisonResult, lineage: str) -> None:
    test = result.t_test
    model = result.linear_model
    level = int(round(test.confidence_level * 100))

    click.echo(click.style("One-tailed Welch t-test (deficient < proficient):", bold=True))
    click.echo(f"  t = {test.statistic:.4f}, df = {test.df:.2f}, p = {test.p_value:.3e}")
    click.echo(f"  Mean difference (deficient - proficient): {test.estimate:.4f}")
    click.echo(f"  {level}% CI: ({test.conf_low}, {test.conf_high:.4f})")
    click.echo()

    click.echo(click.style(f"Linear model ({model.formula}):", bold=True))
    click.echo(f"  Intercept ({model.reference_level} mean): {model.intercept:.4f}")
    click.echo(
        f"  Slope: {model.slope:.4f} "
        f"({level}% CI {model.slope_conf_low:.4f} to {model.slope_conf_high:.4f})"
    )
    click.echo(f"  R-squared: {model.r_squared:.4f} (adjusted {model.adj_r_squared:.4f})")
    click.echo()

    text, color = SIGNIFICANCE_TEXT[result.significance]
    click.echo(click.style(f"Result: {text}", fg=color, bold=True))
    if result.significance == 'undefined':
        click.echo(
            f"  The t-test is undefined for these {result.target_gene} scores "
            "(no variance within either group); no conclusion is drawn."
        )
    elif result.significance == 'not_significant':
        click.echo(
            f"  No significant difference in {result.target_gene} dependency between "
            f"HR-deficient and HR-proficient {lineage} cell lines (alpha = {result.alpha})."
        )
    else:
        click.echo(
            f"  HR-deficient {lineage} cell lines show greater {result.target_gene} "
            f"dependency (mean difference {result.mean_difference:.4f})."
        )


def run_compare_stage(
    config: PipelineConfig,
    provenance: ProvenanceTracker,
    hr_status: Optional[pl.DataFrame] = None,
    skip_plots: bool = False,
) -> ComparisonResult:
    """Join the target gene's scores to HR status and compare the two groups.

    The group summary is written before the variance-based tests so it is
    available even when a group is too small to test.

    Args:
        config: Effective configuration
        provenance: Tracker for this run
        hr_status: HR status table; read from the results directory when None
        skip_plots: Do not render plots

    Returns:
        ComparisonResult bundle
    """
    data_dir = Path(config.data_dir)
    results_dir = Path(config.results_dir)
    settings = config.dependency

    if hr_status is None:
        hr_status = load_hr_status(results_dir / HR_STATUS_FILENAME)

    scores, score_column = load_gene_scores(
        data_dir / GENE_EFFECT_FILENAME,
        settings.target_gene,
        id_column=settings.score_id_column,
    )
    click.echo(f"  Target gene column: {score_column}")

    joined = join_dependency(hr_status, scores)
    click.echo(f"  Samples with a {settings.target_gene} score: {joined.height}/{hr_status.height}")
    save_dependency_table(joined, results_dir, settings.target_gene, score_column, provenance)

    summary = summarize_groups(joined)
    save_summary(summary, results_dir, provenance)
    click.echo()
    _echo_summary(summary)
    click.echo()

    result = compare_groups(
        joined,
        target_gene=settings.target_gene,
        score_column=score_column,
        confidence_level=settings.confidence_level,
        alpha=settings.alpha,
    )
    results_path = save_comparison(result, results_dir, provenance)

    _echo_result(result, config.cohort.lineage)
    click.echo()
    click.echo(f"  Results: {results_path}")

    if skip_plots:
        click.echo(click.style("  Skipping plots (--skip-plots)", fg='yellow'))
    else:
        plots = generate_all_plots(
            joined,
            results_dir / "plots",
            target_gene=settings.target_gene,
            p_value=result.t_test.p_value,
            threshold=settings.dependency_threshold,
        )
        provenance.record_step('generate_plots', {
            'plots': sorted(plots),
        })
        click.echo(f"  Plots: {len(plots)} written to {results_dir / 'plots'}")

    return result


@click.command('compare')
@click.option(
    '--target-gene',
    type=str,
    default=None,
    help='Gene whose dependency is compared (overrides dependency.target_gene)'
)
@click.option(
    '--skip-plots',
    is_flag=True,
    help='Skip plot generation'
)
@click.pass_context
def compare(ctx, target_gene, skip_plots):
    """Compare target gene dependency between HR-deficient and HR-proficient lines.

    Runs a one-tailed Welch t-test (deficient scores lower) and a linear
    model of score on HR status, then writes the joined table, group
    summary, JSON results bundle and plots.

    Examples:

        depmap-hr compare

        depmap-hr compare --target-gene PARP2 --skip-plots
    """
    click.echo(click.style("=== Dependency Comparison ===", bold=True))
    click.echo()

    try:
        config = load_effective_config(ctx, {'dependency.target_gene': target_gene})
        provenance = ProvenanceTracker.from_config(config)
        run_compare_stage(config, provenance, skip_plots=skip_plots)
    except Exception as e:
        fail("Compare command", e)
