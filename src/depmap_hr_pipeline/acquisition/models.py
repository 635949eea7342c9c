"""Dataset descriptors and download outcomes for DepMap release files."""

from pathlib import Path
from typing import Literal
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict

MODEL_FILENAME = "Model.csv"
MUTATIONS_FILENAME = "OmicsSomaticMutations.csv"
GENE_EFFECT_FILENAME = "CRISPRGeneEffect.csv"
EXPRESSION_FILENAME = "OmicsExpressionProteinCodingGenesTPMLogp1.csv"

MOVED_RELEASE_HINT = (
    "The DepMap release may have moved or been retired. Check "
    "https://depmap.org/portal/data_page/ for the current public release and "
    "update 'depmap.release' in the config (or pass --release), then re-run "
    "'depmap-hr download'."
)


class DatasetSpec(BaseModel):
    """A single file in the DepMap release.

    Attributes:
        key: Short identifier used in logs and summaries
        filename: File name inside the release folder (and on disk)
        description: What the table holds
        required: Whether an analysis stage reads this file
    """

    key: str
    filename: str
    description: str = ""
    required: bool = True


DEPMAP_DATASETS = [
    DatasetSpec(
        key="gene_dependency",
        filename=GENE_EFFECT_FILENAME,
        description="CRISPR gene effect scores (more negative = more essential)",
    ),
    DatasetSpec(
        key="sample_info",
        filename=MODEL_FILENAME,
        description="Cell line model metadata: lineage, disease, demographics",
    ),
    DatasetSpec(
        key="mutations",
        filename=MUTATIONS_FILENAME,
        description="Somatic mutation calls with functional impact annotation",
    ),
    DatasetSpec(
        key="gene_expression",
        filename=EXPRESSION_FILENAME,
        description="Protein-coding gene expression (log2 TPM+1), kept for validation",
        required=False,
    ),
]


def build_dataset_url(base_url: str, release: str, filename: str) -> str:
    """Build the download URL for a file in a DepMap release.

    The endpoint takes the release-relative path as a single quoted query
    value, e.g. ``...file_name=public_24Q2%2FModel.csv``.
    """
    return f"{base_url}{quote(f'{release}/{filename}', safe='')}"


class DownloadOutcome(BaseModel):
    """Result of one file transfer in a batch.

    ``error`` holds the typed failure (NetworkError, NotFoundError or
    ArtifactIOError) when status is "failed".
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    dataset: DatasetSpec
    url: str
    path: Path
    status: Literal["downloaded", "skipped", "failed"]
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"
