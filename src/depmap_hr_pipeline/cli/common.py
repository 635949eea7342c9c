"""Helpers shared by the stage commands."""

import logging
import sys
from typing import Any, Optional

import click

from depmap_hr_pipeline.config.loader import load_config_with_overrides
from depmap_hr_pipeline.config.schema import PipelineConfig

logger = logging.getLogger(__name__)


def split_list_option(value: Optional[str]) -> Optional[list[str]]:
    """Turn a comma-separated CLI value into a list (None stays None)."""
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def load_effective_config(ctx: click.Context, overrides: dict[str, Any]) -> PipelineConfig:
    """Load the --config file (or defaults) and apply CLI flag overrides."""
    config_path = ctx.obj['config_path']

    click.echo("Loading configuration...")
    config = load_config_with_overrides(config_path, overrides)
    click.echo(click.style(
        f"  Config loaded: {config_path or 'built-in defaults'}",
        fg='green'
    ))
    click.echo(f"  Config hash: {config.config_hash()[:16]}...")
    click.echo()
    return config


def fail(label: str, error: Exception) -> None:
    """Print a failure with its remediation hint, log the traceback and exit 1.

    Must be called from inside an ``except`` block.
    """
    click.echo(click.style(f"{label} failed: {error}", fg='red'), err=True)

    remediation = getattr(error, 'remediation', None)
    if remediation:
        click.echo(click.style(f"  Hint: {remediation}", fg='yellow'), err=True)

    logger.exception(f"{label} failed")
    sys.exit(1)
