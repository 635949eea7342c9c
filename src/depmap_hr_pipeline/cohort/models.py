"""Data models for DepMap cell line model metadata."""

from pydantic import BaseModel

# Standard column name -> accepted source column names (DepMap Model.csv first)
MODEL_COLUMN_VARIANTS = {
    "sample_id": ["ModelID", "sample_id"],
    "display_name": ["StrippedCellLineName", "CellLineName", "display_name"],
    "lineage": ["OncotreeLineage", "lineage"],
    "primary_disease": ["OncotreePrimaryDisease", "primary_disease"],
    "age": ["Age", "age"],
    "sex": ["Sex", "sex"],
    "ethnicity": ["PatientRace", "ethnicity"],
}

REQUIRED_SAMPLE_COLUMNS = ["sample_id", "display_name", "lineage"]


class SampleRecord(BaseModel):
    """One cell line model.

    Attributes:
        sample_id: DepMap model ID (e.g. ACH-000019), unique key
        display_name: Stripped cell line name (e.g. MCF7)
        lineage: Oncotree lineage used for cohort selection
        primary_disease: Oncotree primary disease
        age, sex, ethnicity: Demographic passthrough, never computed on
    """

    sample_id: str
    display_name: str
    lineage: str
    primary_disease: str | None = None
    age: str | None = None
    sex: str | None = None
    ethnicity: str | None = None
