"""DepMap dataset acquisition."""

from depmap_hr_pipeline.acquisition.models import (
    DEPMAP_DATASETS,
    EXPRESSION_FILENAME,
    GENE_EFFECT_FILENAME,
    MODEL_FILENAME,
    MOVED_RELEASE_HINT,
    MUTATIONS_FILENAME,
    DatasetSpec,
    DownloadOutcome,
    build_dataset_url,
)
from depmap_hr_pipeline.acquisition.fetch import (
    download_dataset,
    download_datasets,
    summarize_downloads,
)

__all__ = [
    "DEPMAP_DATASETS",
    "MODEL_FILENAME",
    "MUTATIONS_FILENAME",
    "GENE_EFFECT_FILENAME",
    "EXPRESSION_FILENAME",
    "MOVED_RELEASE_HINT",
    "DatasetSpec",
    "DownloadOutcome",
    "build_dataset_url",
    "download_dataset",
    "download_datasets",
    "summarize_downloads",
]
