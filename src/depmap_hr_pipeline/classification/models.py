"""Data models for mutation-based HR status classification."""

from pydantic import BaseModel, Field

from depmap_hr_pipeline.config.schema import DEFAULT_DAMAGING_CATEGORIES, DEFAULT_HR_GENES

HR_GENES = tuple(DEFAULT_HR_GENES)
DAMAGING_CATEGORIES = tuple(DEFAULT_DAMAGING_CATEGORIES)

STATUS_DEFICIENT = "deficient"
STATUS_PROFICIENT = "proficient"
STATUS_LABELS = (STATUS_DEFICIENT, STATUS_PROFICIENT)

# Display join for evidence_genes in persisted tables
EVIDENCE_SEPARATOR = ", "

# Standard column name -> accepted source column names (OmicsSomaticMutations.csv first)
MUTATION_COLUMN_VARIANTS = {
    "sample_id": ["ModelID", "sample_id"],
    "gene_symbol": ["HugoSymbol", "gene_symbol"],
    "impact_category": ["VariantInfo", "impact_category"],
    "protein_change": ["ProteinChange", "protein_change"],
}

REQUIRED_MUTATION_COLUMNS = ["sample_id", "gene_symbol", "impact_category"]

HR_STATUS_COLUMNS = ["sample_id", "is_deficient", "status_label", "evidence_genes"]


class MutationEvent(BaseModel):
    """One somatic variant observed in one sample."""

    sample_id: str
    gene_symbol: str
    impact_category: str
    protein_change: str | None = None


class HRStatusRecord(BaseModel):
    """Derived HR status of one cohort sample.

    is_deficient is True iff at least one event in the gene panel carries
    a damaging impact category; evidence_genes lists exactly those genes
    (sorted) and is empty for proficient samples.
    """

    sample_id: str
    is_deficient: bool
    status_label: str
    evidence_genes: list[str] = Field(default_factory=list)
