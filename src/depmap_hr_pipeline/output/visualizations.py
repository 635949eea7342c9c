"""Visualization of dependency scores by HR status."""

import logging
import math
from pathlib import Path
from typing import Optional

import matplotlib
import polars as pl

# Use Agg backend (non-interactive, safe for headless/CLI use)
matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import seaborn as sns  # noqa: E402

from depmap_hr_pipeline.classification.models import (  # noqa: E402
    STATUS_DEFICIENT,
    STATUS_LABELS,
    STATUS_PROFICIENT,
)

logger = logging.getLogger(__name__)

STATUS_PALETTE = {
    STATUS_DEFICIENT: "#E74C3C",
    STATUS_PROFICIENT: "#3498DB",
}


def _score_label(target_gene: str) -> str:
    return f"{target_gene} dependency score (gene effect)"


def _present_labels(pdf) -> list[str]:
    present = set(pdf["status_label"].unique())
    return [label for label in STATUS_LABELS if label in present]


def _status_frame(df: pl.DataFrame):
    return df.select("status_label", "score").to_pandas()


def _save(fig, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=300, bbox_inches="tight")
    # Close figure to prevent memory leak
    plt.close(fig)
    return output_path


def _draw_violin(ax, pdf, target_gene: str, p_value: Optional[float], threshold: float) -> None:
    order = _present_labels(pdf)

    sns.violinplot(
        data=pdf,
        x="status_label",
        y="score",
        hue="status_label",
        order=order,
        hue_order=order,
        palette=STATUS_PALETTE,
        inner="quart",
        alpha=0.5,
        legend=False,
        ax=ax,
    )
    sns.stripplot(
        data=pdf,
        x="status_label",
        y="score",
        order=order,
        color="black",
        alpha=0.6,
        size=4,
        jitter=0.15,
        ax=ax,
    )
    # Group mean +/- standard error
    for position, label in enumerate(order):
        values = pdf.loc[pdf["status_label"] == label, "score"]
        stderr = values.std(ddof=1) / len(values) ** 0.5 if len(values) >= 2 else None
        ax.errorbar(
            position,
            values.mean(),
            yerr=stderr,
            fmt="D",
            color="black",
            capsize=6,
            zorder=3,
        )

    ax.axhline(threshold, linestyle="--", color="gray", alpha=0.5)
    ax.set_xlabel("HR status")
    ax.set_ylabel(_score_label(target_gene))

    title = f"{target_gene} dependency by HR status"
    if p_value is not None and not math.isnan(p_value):
        title += f"\none-tailed Welch t-test p = {p_value:.2e}"
    ax.set_title(title)


def _draw_boxplot(ax, pdf, target_gene: str) -> None:
    order = _present_labels(pdf)

    sns.boxplot(
        data=pdf,
        x="status_label",
        y="score",
        hue="status_label",
        order=order,
        hue_order=order,
        palette=STATUS_PALETTE,
        showfliers=False,
        legend=False,
        ax=ax,
    )
    sns.stripplot(
        data=pdf,
        x="status_label",
        y="score",
        order=order,
        color="black",
        alpha=0.5,
        jitter=0.2,
        ax=ax,
    )

    ax.set_xlabel("HR status")
    ax.set_ylabel(_score_label(target_gene))
    ax.set_title(f"{target_gene} dependency by HR status")


def _draw_density(ax, pdf, target_gene: str) -> None:
    for label in _present_labels(pdf):
        values = pdf.loc[pdf["status_label"] == label, "score"]
        color = STATUS_PALETTE[label]
        if len(values) >= 2:
            sns.kdeplot(x=values, fill=True, alpha=0.4, color=color, label=label, ax=ax)
        ax.axvline(values.mean(), linestyle="--", linewidth=1.5, color=color)

    ax.set_xlabel(_score_label(target_gene))
    ax.set_ylabel("Density")
    ax.set_title(f"Distribution of {target_gene} dependency scores (dashed: group means)")
    ax.legend(title="HR status")


def plot_dependency_violin(
    df: pl.DataFrame,
    output_path: Path,
    target_gene: str = "PARP1",
    p_value: Optional[float] = None,
    threshold: float = -0.5,
) -> Path:
    """
    Violin plot per HR status with individual samples and mean +/- SE.

    Args:
        df: Dependency table with status_label and score columns
        output_path: Path where PNG will be saved
        target_gene: Gene symbol used in labels
        p_value: One-tailed t-test p-value for the subtitle, if available
        threshold: Dependency threshold drawn as a dashed line

    Returns:
        Path to the saved PNG file
    """
    pdf = _status_frame(df)

    sns.set_theme(style="whitegrid", context="paper")
    fig, ax = plt.subplots(figsize=(8, 6))
    _draw_violin(ax, pdf, target_gene, p_value, threshold)

    _save(fig, output_path)
    logger.info(f"Saved violin plot to {output_path}")
    return output_path


def plot_dependency_boxplot(
    df: pl.DataFrame,
    output_path: Path,
    target_gene: str = "PARP1",
) -> Path:
    """Box plot per HR status with jittered samples."""
    fig, ax = plt.subplots(figsize=(7, 5))
    _draw_boxplot(ax, _status_frame(df), target_gene)

    _save(fig, output_path)
    logger.info(f"Saved box plot to {output_path}")
    return output_path


def plot_dependency_density(
    df: pl.DataFrame,
    output_path: Path,
    target_gene: str = "PARP1",
) -> Path:
    """
    Score density per HR status with dashed group-mean lines.

    Notes:
        - Groups with fewer than 2 samples get a mean line but no density
    """
    fig, ax = plt.subplots(figsize=(8, 5))
    _draw_density(ax, _status_frame(df), target_gene)

    _save(fig, output_path)
    logger.info(f"Saved density plot to {output_path}")
    return output_path


def plot_ranked_samples(
    df: pl.DataFrame,
    output_path: Path,
    target_gene: str = "PARP1",
    threshold: float = -0.5,
) -> Path:
    """One point per sample, ordered by score, colored by HR status."""
    ranked = df.sort("score").with_row_index("rank")
    pdf = ranked.select("rank", "status_label", "score").to_pandas()

    fig, ax = plt.subplots(figsize=(10, 6))

    sns.scatterplot(
        data=pdf,
        x="rank",
        y="score",
        hue="status_label",
        hue_order=_present_labels(pdf),
        palette=STATUS_PALETTE,
        s=40,
        alpha=0.7,
        ax=ax,
    )

    ax.axhline(threshold, linestyle="--", color="gray")
    ax.set_xticks([])
    ax.set_xlabel("Cell line (ordered by dependency)")
    ax.set_ylabel(_score_label(target_gene))
    ax.set_title(f"{target_gene} dependency across cohort cell lines")
    ax.legend(title="HR status")

    _save(fig, output_path)
    logger.info(f"Saved ranked sample plot to {output_path}")
    return output_path


def plot_summary_panel(
    df: pl.DataFrame,
    output_path: Path,
    target_gene: str = "PARP1",
    p_value: Optional[float] = None,
    threshold: float = -0.5,
) -> Path:
    """
    Combined figure: violin and density side by side, box plot underneath.

    Args:
        df: Dependency table with status_label and score columns
        output_path: Path where PNG will be saved
        target_gene: Gene symbol used in labels
        p_value: One-tailed t-test p-value for the violin subtitle
        threshold: Dependency threshold drawn on the violin panel

    Returns:
        Path to the saved PNG file
    """
    pdf = _status_frame(df)

    fig, axes = plt.subplot_mosaic(
        [["violin", "density"], ["boxplot", "boxplot"]],
        figsize=(14, 10),
        layout="constrained",
    )
    _draw_violin(axes["violin"], pdf, target_gene, p_value, threshold)
    _draw_density(axes["density"], pdf, target_gene)
    _draw_boxplot(axes["boxplot"], pdf, target_gene)
    fig.suptitle(f"{target_gene} dependency in HR-deficient vs HR-proficient cell lines")

    _save(fig, output_path)
    logger.info(f"Saved summary panel to {output_path}")
    return output_path


def generate_all_plots(
    df: pl.DataFrame,
    output_dir: Path,
    target_gene: str = "PARP1",
    p_value: Optional[float] = None,
    threshold: float = -0.5,
) -> dict[str, Path]:
    """
    Generate all dependency plots.

    Args:
        df: Dependency table with status_label and score columns
        output_dir: Directory where plots will be saved
        target_gene: Gene symbol used in file names and labels
        p_value: Optional t-test p-value for the violin subtitle
        threshold: Dependency threshold reference line

    Returns:
        Dictionary mapping plot name to file path

    Notes:
        - Wraps each plot in try/except to continue on individual failures
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    prefix = target_gene.lower()

    plot_jobs = {
        "violin": lambda path: plot_dependency_violin(df, path, target_gene, p_value, threshold),
        "boxplot": lambda path: plot_dependency_boxplot(df, path, target_gene),
        "density": lambda path: plot_dependency_density(df, path, target_gene),
        "all_lines": lambda path: plot_ranked_samples(df, path, target_gene, threshold),
        "summary_panel": lambda path: plot_summary_panel(df, path, target_gene, p_value, threshold),
    }

    plots = {}
    for name, job in plot_jobs.items():
        try:
            plots[name] = job(output_dir / f"{prefix}_dependency_{name}.png")
        except Exception as e:
            logger.warning(f"Failed to create {name} plot: {e}")
            plt.close("all")

    logger.info(f"Generated {len(plots)} plots in {output_dir}")
    return plots
