"""Tests for CSV/YAML artifact writers and the dependency results bundle."""

import json
from pathlib import Path

import polars as pl
import pytest
import yaml

from depmap_hr_pipeline.config.schema import PipelineConfig
from depmap_hr_pipeline.dependency import (
    GroupSummary,
    compare_groups,
    dependency_filename,
    save_comparison,
    save_dependency_table,
    save_summary,
    summarize_groups,
)
from depmap_hr_pipeline.errors import ArtifactIOError
from depmap_hr_pipeline.output.writers import (
    serialize_list_columns,
    write_results_bundle,
    write_table,
)
from depmap_hr_pipeline.persistence import ProvenanceTracker


@pytest.fixture
def provenance() -> ProvenanceTracker:
    return ProvenanceTracker("0.1.0", PipelineConfig())


@pytest.fixture
def dependency_df() -> pl.DataFrame:
    return pl.DataFrame({
        "sample_id": ["A", "B", "C", "D", "E", "F"],
        "is_deficient": [True, True, True, False, False, False],
        "status_label": ["deficient"] * 3 + ["proficient"] * 3,
        "evidence_genes": [["BRCA1"], ["BRCA2", "PALB2"], ["ATM"], [], [], []],
        "score": [-0.8, -0.6, -0.4, -0.1, 0.0, 0.1],
    })


def test_serialize_list_columns(dependency_df: pl.DataFrame):
    flat = serialize_list_columns(dependency_df)

    assert flat.schema["evidence_genes"] == pl.String
    assert flat["evidence_genes"].to_list()[:2] == ["BRCA1", "BRCA2, PALB2"]
    assert flat["evidence_genes"].to_list()[3] == ""


def test_serialize_without_list_columns_unchanged():
    df = pl.DataFrame({"a": [1, 2]})

    assert serialize_list_columns(df) is df


def test_write_table_creates_csv_and_sidecar(tmp_path: Path, dependency_df, provenance):
    provenance.record_step("unit_test", {"rows": dependency_df.height})

    paths = write_table(
        dependency_df,
        tmp_path / "nested" / "table.csv",
        provenance=provenance,
        description="test table",
    )

    assert paths["csv"].exists()
    assert paths["provenance"] == tmp_path / "nested" / "table.provenance.yaml"

    reread = pl.read_csv(paths["csv"])
    assert reread.height == 6
    assert reread["evidence_genes"][1] == "BRCA2, PALB2"

    with open(paths["provenance"]) as f:
        metadata = yaml.safe_load(f)
    assert metadata["description"] == "test table"
    assert metadata["row_count"] == 6
    assert metadata["column_names"] == dependency_df.columns
    assert metadata["provenance"]["depmap_release"] == "public_24Q2"
    assert metadata["provenance"]["processing_steps"][0]["step_name"] == "unit_test"


def test_write_table_without_provenance(tmp_path: Path):
    paths = write_table(pl.DataFrame({"a": [1]}).lazy(), tmp_path / "a.csv")

    with open(paths["provenance"]) as f:
        metadata = yaml.safe_load(f)
    assert "provenance" not in metadata
    assert metadata["row_count"] == 1


def test_write_table_unwritable(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    with pytest.raises(ArtifactIOError) as exc_info:
        write_table(pl.DataFrame({"a": [1]}), blocker / "a.csv")

    assert exc_info.value.path == blocker / "a.csv"


def test_dependency_filename():
    assert dependency_filename("PARP1") == "parp1_dependency_with_hr_status.csv"


def test_save_dependency_artifacts(tmp_path: Path, dependency_df, provenance):
    table_paths = save_dependency_table(dependency_df, tmp_path, "PARP1", "PARP1 (142)", provenance)
    summary_paths = save_summary(summarize_groups(dependency_df), tmp_path, provenance)

    assert table_paths["csv"].name == "parp1_dependency_with_hr_status.csv"
    summary = pl.read_csv(summary_paths["csv"])
    assert summary["status_label"].to_list() == ["deficient", "proficient"]
    assert summary["n"].to_list() == [3, 3]

    steps = [s["step_name"] for s in provenance.get_steps()]
    assert steps == ["join_dependency_scores", "summarize_groups"]


def test_save_comparison_json(tmp_path: Path, dependency_df, provenance):
    """Results bundle is valid JSON; the open one-sided bound is kept, not replaced."""
    result = compare_groups(dependency_df, "PARP1", "PARP1 (142)")

    path = save_comparison(result, tmp_path, provenance)

    assert path.name == "statistical_results.json"
    with open(path) as f:
        bundle = json.load(f)
    assert bundle["target_gene"] == "PARP1"
    assert bundle["significance"] == "significant"
    assert bundle["t_test"]["conf_low"] == "-Infinity"
    assert bundle["t_test"]["p_value"] == pytest.approx(result.t_test.p_value)
    assert bundle["linear_model"]["slope"] == pytest.approx(0.6)
    assert len(bundle["summary_statistics"]) == 2
    assert provenance.get_steps()[-1]["step_name"] == "compare_groups"


def test_write_results_bundle_keeps_nulls(tmp_path: Path):
    path = write_results_bundle(
        GroupSummary(status_label="deficient", n=1, mean=-0.7, median=-0.7),
        tmp_path / "group.json",
    )

    data = json.loads(path.read_text())
    assert data["stddev"] is None
    assert data["n"] == 1
