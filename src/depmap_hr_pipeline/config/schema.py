"""Pydantic models for pipeline configuration."""

import hashlib
import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_DEPMAP_BASE_URL = "https://depmap.org/portal/download/api/download/external?file_name="

# Key homologous recombination pathway genes
DEFAULT_HR_GENES = [
    "BRCA1",
    "BRCA2",
    "PALB2",
    "RAD51",
    "RAD51C",
    "RAD51D",
    "BRIP1",
    "BARD1",
    "ATM",
    "ATR",
    "CHEK1",
    "CHEK2",
]

DEFAULT_DAMAGING_CATEGORIES = ["damaging", "truncating", "hotspot"]


class DepMapSource(BaseModel):
    """Location and transfer settings for the DepMap release."""

    base_url: str = Field(
        default=DEFAULT_DEPMAP_BASE_URL,
        description="Download endpoint; the quoted '<release>/<filename>' is appended",
    )
    release: str = Field(
        default="public_24Q2",
        min_length=1,
        description="DepMap public release folder (e.g. public_24Q2)",
    )
    timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Per-request timeout in seconds",
    )
    max_attempts: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Transfer attempts per file (1 = single attempt, no retry)",
    )


class CohortConfig(BaseModel):
    """Target subpopulation of cell line models."""

    lineage: str = Field(
        default="Breast",
        min_length=1,
        description="OncotreeLineage value selecting the cohort",
    )


class ClassificationConfig(BaseModel):
    """HR status classification parameters."""

    gene_panel: list[str] = Field(
        default_factory=lambda: list(DEFAULT_HR_GENES),
        min_length=1,
        description="Ordered HR gene panel (HGNC symbols)",
    )
    damaging_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DAMAGING_CATEGORIES),
        min_length=1,
        description="Impact categories considered likely to abolish gene function",
    )
    category_match: Literal["exact", "substring"] = Field(
        default="exact",
        description="How impact categories are matched; applied uniformly to every category",
    )

    @field_validator("gene_panel")
    @classmethod
    def normalize_genes(cls, v: list[str]) -> list[str]:
        """Upper-case symbols and drop duplicates, keeping panel order."""
        seen: dict[str, None] = {}
        for symbol in v:
            symbol = symbol.strip().upper()
            if symbol:
                seen.setdefault(symbol, None)
        if not seen:
            raise ValueError("gene_panel must contain at least one gene symbol")
        return list(seen)

    @field_validator("damaging_categories")
    @classmethod
    def normalize_categories(cls, v: list[str]) -> list[str]:
        """Lower-case categories and drop duplicates."""
        seen: dict[str, None] = {}
        for category in v:
            category = category.strip().lower()
            if category:
                seen.setdefault(category, None)
        if not seen:
            raise ValueError("damaging_categories must contain at least one category")
        return list(seen)


class DependencyConfig(BaseModel):
    """Dependency comparison parameters."""

    target_gene: str = Field(
        default="PARP1",
        min_length=1,
        description="Gene whose dependency score is compared between HR groups",
    )
    score_id_column: str = Field(
        default="ModelID",
        description="Sample key column in the dependency score matrix",
    )
    confidence_level: float = Field(
        default=0.95,
        gt=0.0,
        lt=1.0,
        description="Confidence level for test and model intervals",
    )
    alpha: float = Field(
        default=0.05,
        gt=0.0,
        lt=1.0,
        description="Significance threshold for the one-tailed test",
    )
    dependency_threshold: float = Field(
        default=-0.5,
        description="Reference line drawn on plots (more negative = dependent)",
    )

    @field_validator("target_gene")
    @classmethod
    def normalize_gene(cls, v: str) -> str:
        return v.strip().upper()


class PipelineConfig(BaseModel):
    """Main pipeline configuration."""

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for downloaded DepMap tables and the cohort subset",
    )
    results_dir: Path = Field(
        default=Path("results"),
        description="Directory for classification, statistics and plots",
    )
    depmap: DepMapSource = Field(
        default_factory=DepMapSource,
        description="DepMap release location",
    )
    cohort: CohortConfig = Field(
        default_factory=CohortConfig,
        description="Cohort selection",
    )
    classification: ClassificationConfig = Field(
        default_factory=ClassificationConfig,
        description="HR status classification",
    )
    dependency: DependencyConfig = Field(
        default_factory=DependencyConfig,
        description="Dependency comparison",
    )

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        useful for tracking config changes across runs.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
