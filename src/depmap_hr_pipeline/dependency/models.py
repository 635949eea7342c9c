"""Data models for the dependency comparison between HR groups."""

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# DepMap gene effect columns look like "PARP1 (142)": symbol, then Entrez ID
SCORE_COLUMN_PATTERN = re.compile(r"^\s*(?P<symbol>[^\s(]+)\s*(?:\((?P<entrez_id>[^)]*)\))?\s*$")

Significance = Literal["highly_significant", "significant", "not_significant", "undefined"]

HIGHLY_SIGNIFICANT_P = 0.001


class _StatsModel(BaseModel):
    # Undefined statistics (NaN, one-sided infinite bounds) survive JSON as strings
    model_config = ConfigDict(ser_json_inf_nan="strings")


class GroupSummary(_StatsModel):
    """Descriptive statistics for one HR status group.

    stddev uses the sample (n-1) denominator; stddev and stderr are None
    when n < 2, mean and median are None when n == 0.
    """

    status_label: str
    n: int = Field(ge=0)
    mean: float | None = None
    median: float | None = None
    stddev: float | None = None
    stderr: float | None = None


class WelchTestResult(_StatsModel):
    """One-tailed Welch two-sample t-test.

    Alternative: mean(deficient) < mean(proficient). ``estimate`` is
    mean(deficient) - mean(proficient); the confidence interval is
    one-sided, so ``conf_low`` is -inf.
    """

    method: str = "Welch two-sample t-test"
    alternative: str = "less"
    statistic: float
    p_value: float
    df: float
    estimate: float
    mean_deficient: float
    mean_proficient: float
    confidence_level: float
    conf_low: float
    conf_high: float


class ModelCoefficient(_StatsModel):
    """One row of the coefficient table of the linear model."""

    term: str
    estimate: float
    std_error: float
    statistic: float
    p_value: float
    conf_low: float
    conf_high: float


class ModelFit(_StatsModel):
    """Goodness of fit of the linear model."""

    r_squared: float
    adj_r_squared: float
    sigma: float
    statistic: float
    p_value: float
    df_residual: int
    n_obs: int


class LinearModelResult(_StatsModel):
    """OLS fit of score on HR group membership.

    The deficient group is the baseline, so ``intercept`` is the deficient
    mean and ``slope`` is mean(proficient) - mean(deficient). A positive
    slope means deficient samples are more dependent, the same direction
    as the t-test alternative.
    """

    formula: str
    reference_level: str
    intercept: float
    slope: float
    slope_conf_low: float
    slope_conf_high: float
    r_squared: float
    adj_r_squared: float
    coefficients: list[ModelCoefficient]
    fit: ModelFit


class ComparisonResult(_StatsModel):
    """Statistical results bundle for one pipeline run."""

    target_gene: str
    score_column: str
    n_samples: int
    summary_statistics: list[GroupSummary]
    t_test: WelchTestResult
    linear_model: LinearModelResult
    mean_difference: float
    alpha: float
    significance: Significance
