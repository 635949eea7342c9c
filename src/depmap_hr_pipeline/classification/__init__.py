"""HR status classification from somatic mutation calls."""

from depmap_hr_pipeline.classification.models import (
    DAMAGING_CATEGORIES,
    EVIDENCE_SEPARATOR,
    HR_GENES,
    HR_STATUS_COLUMNS,
    MUTATION_COLUMN_VARIANTS,
    STATUS_DEFICIENT,
    STATUS_LABELS,
    STATUS_PROFICIENT,
    HRStatusRecord,
    MutationEvent,
)
from depmap_hr_pipeline.classification.transform import (
    build_hr_status,
    classify_hr_status,
    damaging_category_expr,
    filter_damaging_mutations,
    parse_mutation_table,
)
from depmap_hr_pipeline.classification.load import (
    HR_MUTATIONS_FILENAME,
    HR_STATUS_FILENAME,
    format_evidence_genes,
    load_hr_status,
    parse_evidence_genes,
    save_hr_status,
)

__all__ = [
    "HR_GENES",
    "DAMAGING_CATEGORIES",
    "EVIDENCE_SEPARATOR",
    "HR_STATUS_COLUMNS",
    "MUTATION_COLUMN_VARIANTS",
    "STATUS_DEFICIENT",
    "STATUS_PROFICIENT",
    "STATUS_LABELS",
    "HRStatusRecord",
    "MutationEvent",
    "parse_mutation_table",
    "damaging_category_expr",
    "filter_damaging_mutations",
    "build_hr_status",
    "classify_hr_status",
    "HR_STATUS_FILENAME",
    "HR_MUTATIONS_FILENAME",
    "save_hr_status",
    "load_hr_status",
    "format_evidence_genes",
    "parse_evidence_genes",
]
