"""Unit tests for cohort selection from DepMap model metadata."""

from pathlib import Path

import polars as pl
import pytest

from depmap_hr_pipeline.cohort import (
    filter_cohort,
    load_cohort,
    parse_model_table,
    process_cohort,
    save_cohort,
)
from depmap_hr_pipeline.config.schema import PipelineConfig
from depmap_hr_pipeline.errors import ArtifactIOError, SchemaError
from depmap_hr_pipeline.persistence import ProvenanceTracker


@pytest.fixture
def model_csv(tmp_path: Path) -> Path:
    """Create a small Model.csv with DepMap column names.

    Covers:
    - Breast and non-breast lineages, interleaved
    - Lineage with different case ("breast") which must not match
    - Missing demographics (NA / empty)
    - Extra columns that are pruned
    """
    csv_path = tmp_path / "Model.csv"
    csv_path.write_text(
        "ModelID,CellLineName,StrippedCellLineName,OncotreeLineage,OncotreePrimaryDisease,Age,Sex,PatientRace,GrowthPattern\n"
        "ACH-000001,MCF-7,MCF7,Breast,Invasive Breast Carcinoma,69,Female,caucasian,Adherent\n"
        "ACH-000002,A549,A549,Lung,Non-Small Cell Lung Cancer,58,Male,caucasian,Adherent\n"
        "ACH-000003,HCC1937,HCC1937,Breast,Invasive Breast Carcinoma,23,Female,NA,Adherent\n"
        "ACH-000004,odd,ODD,breast,Invasive Breast Carcinoma,,Female,,Adherent\n"
        "ACH-000005,MDA-MB-436,MDAMB436,Breast,Invasive Breast Carcinoma,43,Female,caucasian,Adherent\n"
    )
    return csv_path


def test_parse_model_table_standard_columns(model_csv: Path):
    lf = parse_model_table(model_csv)

    assert isinstance(lf, pl.LazyFrame)
    df = lf.collect()
    assert df.columns == [
        "sample_id", "display_name", "lineage", "primary_disease", "age", "sex", "ethnicity",
    ]
    assert df.height == 5
    assert "GrowthPattern" not in df.columns


def test_parse_model_table_prefers_stripped_name(model_csv: Path):
    df = parse_model_table(model_csv).collect()

    assert df["display_name"].to_list()[0] == "MCF7"


def test_parse_model_table_null_handling(model_csv: Path):
    """NA and empty demographics become null, and values stay text."""
    df = parse_model_table(model_csv).collect()

    row3 = df.filter(pl.col("sample_id") == "ACH-000003")
    assert row3["ethnicity"][0] is None
    assert row3["age"][0] == "23"

    row4 = df.filter(pl.col("sample_id") == "ACH-000004")
    assert row4["age"][0] is None


def test_parse_model_table_missing_required_column(tmp_path: Path):
    csv_path = tmp_path / "Model.csv"
    csv_path.write_text("ModelID,StrippedCellLineName\nACH-1,X\n")

    with pytest.raises(SchemaError) as exc_info:
        parse_model_table(csv_path)

    assert exc_info.value.missing == ["OncotreeLineage"]
    assert "OncotreeLineage" in str(exc_info.value)


def test_parse_model_table_missing_file(tmp_path: Path):
    with pytest.raises(ArtifactIOError) as exc_info:
        parse_model_table(tmp_path / "Model.csv")

    assert exc_info.value.path == tmp_path / "Model.csv"
    assert "download" in exc_info.value.remediation


def test_filter_cohort_exact_match_keeps_order(model_csv: Path):
    cohort = filter_cohort(parse_model_table(model_csv), "Breast")

    assert cohort["sample_id"].to_list() == ["ACH-000001", "ACH-000003", "ACH-000005"]
    assert cohort.columns == parse_model_table(model_csv).collect().columns


def test_filter_cohort_no_match_is_empty(model_csv: Path):
    cohort = filter_cohort(parse_model_table(model_csv), "Bone")

    assert cohort.height == 0
    assert "sample_id" in cohort.columns


def test_filter_cohort_custom_lineage_column():
    samples = pl.DataFrame({
        "sample_id": ["a", "b"],
        "tissue": ["Skin", "Breast"],
    })

    cohort = filter_cohort(samples, "Breast", lineage_column="tissue")

    assert cohort["sample_id"].to_list() == ["b"]


def test_filter_cohort_missing_lineage_column():
    samples = pl.DataFrame({"sample_id": ["a"], "display_name": ["A"]})

    with pytest.raises(SchemaError) as exc_info:
        filter_cohort(samples, "Breast")

    assert exc_info.value.missing == ["lineage"]


def test_process_cohort(model_csv: Path):
    cohort = process_cohort(model_csv, "Lung")

    assert cohort["display_name"].to_list() == ["A549"]


def test_save_and_load_cohort(model_csv: Path, tmp_path: Path):
    cohort = process_cohort(model_csv, "Breast")
    provenance = ProvenanceTracker("0.1.0", PipelineConfig())
    output_path = tmp_path / "out" / "cohort_samples.csv"

    paths = save_cohort(cohort, output_path, provenance, lineage="Breast", source_count=5)

    assert paths["csv"].exists()
    assert paths["provenance"].exists()
    assert provenance.get_steps()[-1]["step_name"] == "filter_cohort"
    assert provenance.get_steps()[-1]["details"]["output_count"] == 3

    reloaded = load_cohort(output_path)
    assert reloaded["sample_id"].to_list() == cohort["sample_id"].to_list()
    assert reloaded.columns == cohort.columns
