"""Cohort selection from DepMap cell line metadata."""

from depmap_hr_pipeline.cohort.models import (
    MODEL_COLUMN_VARIANTS,
    REQUIRED_SAMPLE_COLUMNS,
    SampleRecord,
)
from depmap_hr_pipeline.cohort.transform import filter_cohort, parse_model_table, process_cohort
from depmap_hr_pipeline.cohort.load import COHORT_FILENAME, load_cohort, save_cohort

__all__ = [
    "MODEL_COLUMN_VARIANTS",
    "REQUIRED_SAMPLE_COLUMNS",
    "SampleRecord",
    "parse_model_table",
    "filter_cohort",
    "process_cohort",
    "COHORT_FILENAME",
    "save_cohort",
    "load_cohort",
]
