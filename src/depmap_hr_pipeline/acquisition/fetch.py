"""Download DepMap release files with existence-check skip and typed failures."""

from pathlib import Path
from typing import Iterable

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from depmap_hr_pipeline.acquisition.models import (
    DEPMAP_DATASETS,
    MOVED_RELEASE_HINT,
    DatasetSpec,
    DownloadOutcome,
    build_dataset_url,
)
from depmap_hr_pipeline.errors import (
    ArtifactIOError,
    NetworkError,
    NotFoundError,
    PipelineError,
)

logger = structlog.get_logger()

CHUNK_SIZE = 8192
PROGRESS_EVERY_BYTES = 50 * 1024 * 1024


def _is_retryable(exc: BaseException) -> bool:
    # A missing file stays missing; only transport-level failures are retried
    return isinstance(exc, NetworkError) and not isinstance(exc, NotFoundError)


def _transfer(url: str, output_path: Path, timeout: float) -> None:
    """Stream ``url`` into ``output_path`` via a temporary file.

    Raises:
        NotFoundError: On HTTP 404
        NetworkError: On any other HTTP status error or transport failure
        ArtifactIOError: If the local file cannot be written
    """
    temp_path = output_path.with_suffix(output_path.suffix + ".tmp")

    try:
        with httpx.stream("GET", url, timeout=timeout, follow_redirects=True) as response:
            if response.status_code == 404:
                raise NotFoundError(url, remediation=MOVED_RELEASE_HINT)
            response.raise_for_status()

            total_bytes = int(response.headers.get("content-length", 0))
            downloaded = 0

            try:
                with open(temp_path, "wb") as f:
                    for chunk in response.iter_bytes(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
                        downloaded += len(chunk)

                        if total_bytes > 0 and downloaded % PROGRESS_EVERY_BYTES < CHUNK_SIZE:
                            logger.info(
                                "depmap_download_progress",
                                file=output_path.name,
                                downloaded_mb=round(downloaded / 1024 / 1024, 2),
                                total_mb=round(total_bytes / 1024 / 1024, 2),
                                percent=round(downloaded / total_bytes * 100, 1),
                            )
            except OSError as e:
                raise ArtifactIOError(temp_path, f"write failed: {e}") from e

        try:
            temp_path.replace(output_path)
        except OSError as e:
            raise ArtifactIOError(output_path, f"could not move download into place: {e}") from e

    except httpx.HTTPStatusError as e:
        temp_path.unlink(missing_ok=True)
        status = e.response.status_code
        if status == 404:
            raise NotFoundError(url, remediation=MOVED_RELEASE_HINT) from e
        raise NetworkError(url, f"HTTP {status}", remediation=MOVED_RELEASE_HINT) from e
    except httpx.HTTPError as e:
        temp_path.unlink(missing_ok=True)
        raise NetworkError(
            url,
            str(e) or type(e).__name__,
            remediation="Check network connectivity and re-run 'depmap-hr download'.",
        ) from e
    except PipelineError:
        temp_path.unlink(missing_ok=True)
        raise


def download_dataset(
    url: str,
    output_path: Path,
    timeout: float = 120.0,
    max_attempts: int = 1,
) -> Path:
    """Download one DepMap file unless it already exists.

    Args:
        url: Remote location of the file
        output_path: Local destination (parent directories are created)
        timeout: Per-request timeout in seconds
        max_attempts: Transfer attempts; 1 means a single attempt

    Returns:
        Path to the local file

    Raises:
        NotFoundError: Remote file missing (never retried)
        NetworkError: Transfer failed after ``max_attempts``
        ArtifactIOError: Local write failure
    """
    output_path = Path(output_path)

    # Checkpoint pattern: skip if already downloaded
    if output_path.exists():
        logger.info(
            "depmap_file_exists",
            path=str(output_path),
            size_mb=round(output_path.stat().st_size / 1024 / 1024, 2),
        )
        return output_path

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactIOError(output_path.parent, f"cannot create directory: {e}") from e

    logger.info("depmap_download_start", url=url, path=str(output_path))

    attempt = retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception(_is_retryable),
        reraise=True,
    )(_transfer)
    attempt(url, output_path, timeout)

    logger.info(
        "depmap_download_complete",
        path=str(output_path),
        size_mb=round(output_path.stat().st_size / 1024 / 1024, 2),
    )

    return output_path


def download_datasets(
    data_dir: Path,
    base_url: str,
    release: str,
    datasets: Iterable[DatasetSpec] = DEPMAP_DATASETS,
    timeout: float = 120.0,
    max_attempts: int = 1,
) -> list[DownloadOutcome]:
    """Download a batch of DepMap files into ``data_dir``.

    Each file is attempted independently: a failure is recorded in its
    outcome and the remaining files are still attempted.

    Args:
        data_dir: Target directory (created if absent)
        base_url: Download endpoint prefix
        release: DepMap release folder, e.g. "public_24Q2"
        datasets: Files to fetch
        timeout: Per-request timeout in seconds
        max_attempts: Transfer attempts per file

    Returns:
        One DownloadOutcome per dataset, in input order
    """
    data_dir = Path(data_dir)
    outcomes = []

    logger.info("depmap_batch_start", data_dir=str(data_dir), release=release)

    for dataset in datasets:
        url = build_dataset_url(base_url, release, dataset.filename)
        path = data_dir / dataset.filename

        if path.exists():
            status = "skipped"
        else:
            status = "downloaded"

        try:
            download_dataset(url, path, timeout=timeout, max_attempts=max_attempts)
        except (NetworkError, ArtifactIOError) as e:
            logger.warning(
                "depmap_download_failed",
                file=dataset.filename,
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            outcomes.append(
                DownloadOutcome(dataset=dataset, url=url, path=path, status="failed", error=e)
            )
            continue

        outcomes.append(DownloadOutcome(dataset=dataset, url=url, path=path, status=status))

    summary = summarize_downloads(outcomes)
    logger.info(
        "depmap_batch_complete",
        succeeded=summary["succeeded"],
        total=summary["total"],
        failed=summary["failed"],
    )

    return outcomes


def summarize_downloads(outcomes: list[DownloadOutcome]) -> dict:
    """
    Aggregate batch outcomes.

    Returns:
        Dict with keys: total, succeeded, downloaded, skipped,
        failed (filenames), missing_required (filenames of failed
        required datasets)
    """
    failed = [o for o in outcomes if not o.ok]
    return {
        "total": len(outcomes),
        "succeeded": sum(1 for o in outcomes if o.ok),
        "downloaded": sum(1 for o in outcomes if o.status == "downloaded"),
        "skipped": sum(1 for o in outcomes if o.status == "skipped"),
        "failed": [o.dataset.filename for o in failed],
        "missing_required": [o.dataset.filename for o in failed if o.dataset.required],
    }
