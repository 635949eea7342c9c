"""Unit tests for group summaries, the Welch test and the group linear model."""

import math

import polars as pl
import pytest

from depmap_hr_pipeline.dependency import (
    classify_significance,
    compare_groups,
    fit_group_model,
    summarize_groups,
    summary_records,
    welch_t_test,
)
from depmap_hr_pipeline.errors import InsufficientDataError


def _dependency_frame(deficient: list[float], proficient: list[float]) -> pl.DataFrame:
    return pl.DataFrame({
        "sample_id": [f"D{i}" for i in range(len(deficient))] + [f"P{i}" for i in range(len(proficient))],
        "status_label": ["deficient"] * len(deficient) + ["proficient"] * len(proficient),
        "score": deficient + proficient,
    })


@pytest.fixture
def separated() -> pl.DataFrame:
    """Deficient lines clearly more dependent (more negative) than proficient ones."""
    return _dependency_frame([-0.8, -0.6, -0.4], [-0.1, 0.0, 0.1])


@pytest.fixture
def singleton() -> pl.DataFrame:
    """Only one deficient observation."""
    return _dependency_frame([-0.7], [-0.1, 0.0, 0.1])


def test_summarize_groups(separated: pl.DataFrame):
    summary = summarize_groups(separated)

    assert summary["status_label"].to_list() == ["deficient", "proficient"]
    assert summary["n"].to_list() == [3, 3]

    deficient = summary.row(0, named=True)
    assert deficient["mean"] == pytest.approx(-0.6)
    assert deficient["median"] == pytest.approx(-0.6)
    assert deficient["stddev"] == pytest.approx(0.2)
    assert deficient["stderr"] == pytest.approx(0.2 / math.sqrt(3))


def test_summarize_groups_singleton(singleton: pl.DataFrame):
    """Mean and n exist for a one-sample group; spread is undefined."""
    summary = summarize_groups(singleton)
    deficient = summary.row(0, named=True)

    assert deficient["n"] == 1
    assert deficient["mean"] == pytest.approx(-0.7)
    assert deficient["stddev"] is None
    assert deficient["stderr"] is None


def test_summarize_groups_empty_group():
    df = _dependency_frame([], [-0.1, 0.0])

    summary = summarize_groups(df)
    deficient = summary.row(0, named=True)

    assert summary.height == 2
    assert deficient["n"] == 0
    assert deficient["mean"] is None


def test_summarize_ignores_nan_scores():
    df = _dependency_frame([-0.5, float("nan"), -0.7], [0.0, 0.1])

    summary = summarize_groups(df)

    assert summary["n"].to_list() == [2, 2]
    assert summary["mean"][0] == pytest.approx(-0.6)


def test_summary_records(separated: pl.DataFrame):
    records = summary_records(summarize_groups(separated))

    assert [r.status_label for r in records] == ["deficient", "proficient"]
    assert records[1].mean == pytest.approx(0.0)


def test_welch_sign_convention(separated: pl.DataFrame):
    """Deficient lower than proficient gives a small one-tailed p-value."""
    result = welch_t_test(separated)

    assert result.p_value < 0.05
    assert result.statistic < 0
    assert result.estimate == pytest.approx(-0.6)
    assert result.mean_deficient == pytest.approx(-0.6)
    assert result.mean_proficient == pytest.approx(0.0)
    assert result.df == pytest.approx(2.941, abs=1e-3)
    assert result.alternative == "less"


def test_welch_one_sided_interval(separated: pl.DataFrame):
    result = welch_t_test(separated, confidence_level=0.95)

    assert result.conf_low == -math.inf
    assert result.estimate < result.conf_high < 0


def test_welch_reversed_groups_not_significant():
    df = _dependency_frame([-0.1, 0.0, 0.1], [-0.8, -0.6, -0.4])

    result = welch_t_test(df)

    assert result.p_value > 0.5


def test_group_model_slope_sign(separated: pl.DataFrame):
    """Slope is proficient minus deficient mean, positive here."""
    model = fit_group_model(separated)

    assert model.slope > 0
    assert model.slope == pytest.approx(0.6)
    assert model.intercept == pytest.approx(-0.6)
    assert model.reference_level == "deficient"
    assert model.r_squared == pytest.approx(0.54 / 0.64)
    assert model.adj_r_squared == pytest.approx(1 - (1 - 0.54 / 0.64) * 5 / 4)
    assert model.slope_conf_low < model.slope < model.slope_conf_high


def test_group_model_coefficient_table(separated: pl.DataFrame):
    model = fit_group_model(separated)

    assert [c.term for c in model.coefficients] == ["(Intercept)", "status_labelproficient"]
    slope = model.coefficients[1]
    assert slope.statistic == pytest.approx(slope.estimate / slope.std_error)
    assert model.fit.n_obs == 6
    assert model.fit.df_residual == 4
    assert model.fit.statistic == pytest.approx(slope.statistic ** 2)
    assert model.fit.p_value == pytest.approx(slope.p_value)
    # sigma^2 = pooled within-group variance = (2*0.04 + 2*0.01) / 4
    assert model.fit.sigma == pytest.approx(math.sqrt(0.025))


def test_insufficient_data_guard(singleton: pl.DataFrame):
    with pytest.raises(InsufficientDataError) as exc_info:
        welch_t_test(singleton)
    assert exc_info.value.group == "deficient"
    assert exc_info.value.n == 1

    with pytest.raises(InsufficientDataError):
        fit_group_model(singleton)

    with pytest.raises(InsufficientDataError):
        compare_groups(singleton, "PARP1", "PARP1 (142)")


def test_classify_significance():
    assert classify_significance(0.0001) == "highly_significant"
    assert classify_significance(0.01) == "significant"
    assert classify_significance(0.2) == "not_significant"
    assert classify_significance(0.03, alpha=0.01) == "not_significant"
    assert classify_significance(float("nan")) == "undefined"


def test_compare_groups(separated: pl.DataFrame):
    result = compare_groups(separated, "PARP1", "PARP1 (142)")

    assert result.target_gene == "PARP1"
    assert result.score_column == "PARP1 (142)"
    assert result.n_samples == 6
    assert result.significance == "significant"
    assert result.mean_difference == pytest.approx(0.6)
    assert result.linear_model.slope == pytest.approx(-result.t_test.estimate)


def test_compare_groups_constant_scores_undefined():
    """Identical constant scores give a NaN p-value, reported as undefined."""
    df = _dependency_frame([-0.5, -0.5, -0.5], [-0.5, -0.5])

    result = compare_groups(df, "PARP1", "PARP1 (142)")

    assert math.isnan(result.t_test.p_value)
    assert result.significance == "undefined"
    assert result.mean_difference == pytest.approx(0.0)
