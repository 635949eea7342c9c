"""Group statistics, one-tailed Welch test and group-membership linear model."""

import numpy as np
import polars as pl
import structlog
from scipy import stats

from depmap_hr_pipeline.classification.models import (
    STATUS_DEFICIENT,
    STATUS_LABELS,
    STATUS_PROFICIENT,
)
from depmap_hr_pipeline.dependency.models import (
    HIGHLY_SIGNIFICANT_P,
    ComparisonResult,
    GroupSummary,
    LinearModelResult,
    ModelCoefficient,
    ModelFit,
    Significance,
    WelchTestResult,
)
from depmap_hr_pipeline.errors import InsufficientDataError
from depmap_hr_pipeline.tables import require_columns

logger = structlog.get_logger(__name__)

MIN_GROUP_SIZE = 2


def _valid_scores(df: pl.DataFrame) -> pl.DataFrame:
    require_columns(df, ["status_label", "score"], "dependency table")
    return df.filter(pl.col("score").is_not_null() & pl.col("score").is_not_nan())


def summarize_groups(df: pl.DataFrame) -> pl.DataFrame:
    """
    Descriptive statistics of score per HR status group.

    Args:
        df: Dependency table with status_label and score columns

    Returns:
        DataFrame with exactly two rows (deficient, proficient) and columns
        status_label, n, mean, median, stddev, stderr

    Notes:
        - Missing scores are ignored
        - stddev is the sample standard deviation (n-1 denominator)
        - stddev/stderr are null when n < 2; mean/median are null when n == 0
    """
    scores = _valid_scores(df)

    per_group = scores.group_by("status_label").agg(
        pl.len().cast(pl.Int64).alias("n"),
        pl.col("score").mean().alias("mean"),
        pl.col("score").median().alias("median"),
        pl.when(pl.len() >= MIN_GROUP_SIZE)
        .then(pl.col("score").std(ddof=1))
        .otherwise(pl.lit(None, dtype=pl.Float64))
        .alias("stddev"),
    )

    labels = pl.DataFrame({"status_label": list(STATUS_LABELS)}).with_row_index("_order")

    summary = (
        labels.join(per_group, on="status_label", how="left")
        .sort("_order")
        .drop("_order")
        .with_columns(pl.col("n").fill_null(0))
        .with_columns(
            (pl.col("stddev") / pl.col("n").cast(pl.Float64).sqrt()).alias("stderr")
        )
    )

    for row in summary.to_dicts():
        logger.info("group_summary", **row)

    return summary


def summary_records(summary: pl.DataFrame) -> list[GroupSummary]:
    """Convert a summary table into GroupSummary models."""
    return [GroupSummary(**row) for row in summary.to_dicts()]


def split_groups(df: pl.DataFrame) -> tuple[np.ndarray, np.ndarray]:
    """
    Split scores into (deficient, proficient) arrays.

    Raises:
        InsufficientDataError: If either group has fewer than 2 scores
    """
    scores = _valid_scores(df)

    groups = {}
    for label in (STATUS_DEFICIENT, STATUS_PROFICIENT):
        values = scores.filter(pl.col("status_label") == label)["score"].to_numpy()
        if len(values) < MIN_GROUP_SIZE:
            logger.error("insufficient_group_size", group=label, n=len(values))
            raise InsufficientDataError(label, len(values), MIN_GROUP_SIZE)
        groups[label] = values.astype(np.float64)

    return groups[STATUS_DEFICIENT], groups[STATUS_PROFICIENT]


def welch_t_test(df: pl.DataFrame, confidence_level: float = 0.95) -> WelchTestResult:
    """
    One-tailed Welch t-test: is the deficient mean score below the proficient one?

    Args:
        df: Dependency table with status_label and score columns
        confidence_level: Level of the one-sided confidence interval

    Returns:
        WelchTestResult (estimate = deficient mean - proficient mean)

    Raises:
        InsufficientDataError: If either group has fewer than 2 scores
    """
    deficient, proficient = split_groups(df)

    result = stats.ttest_ind(deficient, proficient, equal_var=False, alternative="less")
    ci = result.confidence_interval(confidence_level=confidence_level)

    test = WelchTestResult(
        statistic=float(result.statistic),
        p_value=float(result.pvalue),
        df=float(result.df),
        estimate=float(deficient.mean() - proficient.mean()),
        mean_deficient=float(deficient.mean()),
        mean_proficient=float(proficient.mean()),
        confidence_level=confidence_level,
        conf_low=float(ci.low),
        conf_high=float(ci.high),
    )

    logger.info(
        "welch_t_test_complete",
        statistic=round(test.statistic, 4),
        p_value=test.p_value,
        df=round(test.df, 2),
        conf_high=round(test.conf_high, 4),
    )

    return test


def fit_group_model(df: pl.DataFrame, confidence_level: float = 0.95) -> LinearModelResult:
    """
    Fit score ~ HR status by ordinary least squares.

    The predictor is 1 for proficient samples and 0 for deficient ones, so
    the intercept is the deficient mean and the slope is
    mean(proficient) - mean(deficient).

    Args:
        df: Dependency table with status_label and score columns
        confidence_level: Level of the two-sided coefficient intervals

    Returns:
        LinearModelResult with coefficient table and fit metrics

    Raises:
        InsufficientDataError: If either group has fewer than 2 scores
    """
    deficient, proficient = split_groups(df)

    x = np.concatenate([np.zeros(len(deficient)), np.ones(len(proficient))])
    y = np.concatenate([deficient, proficient])
    n_obs = len(y)
    df_residual = n_obs - 2

    fit = stats.linregress(x, y)
    t_crit = stats.t.ppf(0.5 + confidence_level / 2, df_residual)

    residuals = y - (fit.intercept + fit.slope * x)
    sigma = float(np.sqrt(np.sum(residuals ** 2) / df_residual))

    with np.errstate(divide="ignore", invalid="ignore"):
        slope_t = np.float64(fit.slope) / np.float64(fit.stderr)
        intercept_t = np.float64(fit.intercept) / np.float64(fit.intercept_stderr)
    intercept_p = float(2 * stats.t.sf(abs(intercept_t), df_residual))

    coefficients = [
        ModelCoefficient(
            term="(Intercept)",
            estimate=float(fit.intercept),
            std_error=float(fit.intercept_stderr),
            statistic=float(intercept_t),
            p_value=intercept_p,
            conf_low=float(fit.intercept - t_crit * fit.intercept_stderr),
            conf_high=float(fit.intercept + t_crit * fit.intercept_stderr),
        ),
        ModelCoefficient(
            term=f"status_label{STATUS_PROFICIENT}",
            estimate=float(fit.slope),
            std_error=float(fit.stderr),
            statistic=float(slope_t),
            p_value=float(fit.pvalue),
            conf_low=float(fit.slope - t_crit * fit.stderr),
            conf_high=float(fit.slope + t_crit * fit.stderr),
        ),
    ]

    r_squared = float(fit.rvalue ** 2)
    adj_r_squared = 1.0 - (1.0 - r_squared) * (n_obs - 1) / df_residual

    model = LinearModelResult(
        formula="score ~ status_label",
        reference_level=STATUS_DEFICIENT,
        intercept=coefficients[0].estimate,
        slope=coefficients[1].estimate,
        slope_conf_low=coefficients[1].conf_low,
        slope_conf_high=coefficients[1].conf_high,
        r_squared=r_squared,
        adj_r_squared=adj_r_squared,
        coefficients=coefficients,
        fit=ModelFit(
            r_squared=r_squared,
            adj_r_squared=adj_r_squared,
            sigma=sigma,
            statistic=float(slope_t ** 2),
            p_value=float(fit.pvalue),
            df_residual=df_residual,
            n_obs=n_obs,
        ),
    )

    logger.info(
        "linear_model_complete",
        intercept=round(model.intercept, 4),
        slope=round(model.slope, 4),
        r_squared=round(r_squared, 4),
        adj_r_squared=round(adj_r_squared, 4),
    )

    return model


def classify_significance(p_value: float, alpha: float = 0.05) -> Significance:
    """Map a p-value to a significance call.

    A NaN p-value (e.g. no variance in either group) is reported as
    "undefined" rather than as a negative result.
    """
    if np.isnan(p_value):
        return "undefined"
    if p_value < HIGHLY_SIGNIFICANT_P:
        return "highly_significant"
    if p_value < alpha:
        return "significant"
    return "not_significant"


def compare_groups(
    df: pl.DataFrame,
    target_gene: str,
    score_column: str,
    confidence_level: float = 0.95,
    alpha: float = 0.05,
) -> ComparisonResult:
    """
    Run the full HR-deficient vs HR-proficient comparison.

    Composes: summarize_groups -> welch_t_test -> fit_group_model

    Raises:
        InsufficientDataError: If either group has fewer than 2 scores
    """
    summary = summarize_groups(df)
    t_test = welch_t_test(df, confidence_level=confidence_level)
    linear_model = fit_group_model(df, confidence_level=confidence_level)

    return ComparisonResult(
        target_gene=target_gene,
        score_column=score_column,
        n_samples=int(summary["n"].sum()),
        summary_statistics=summary_records(summary),
        t_test=t_test,
        linear_model=linear_model,
        mean_difference=abs(t_test.estimate),
        alpha=alpha,
        significance=classify_significance(t_test.p_value, alpha),
    )
