"""Unit tests for DepMap dataset acquisition."""

from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import httpx
import pytest

from depmap_hr_pipeline.acquisition import (
    DEPMAP_DATASETS,
    MOVED_RELEASE_HINT,
    DatasetSpec,
    DownloadOutcome,
    build_dataset_url,
    download_dataset,
    download_datasets,
    summarize_downloads,
)
from depmap_hr_pipeline.errors import ArtifactIOError, NetworkError, NotFoundError

BASE_URL = "https://depmap.example.org/download?file_name="


def _ok_response(chunks: list[bytes]) -> Mock:
    response = Mock()
    response.status_code = 200
    response.headers = {"content-length": str(sum(len(c) for c in chunks))}
    response.iter_bytes = Mock(return_value=chunks)
    response.raise_for_status = Mock()
    return response


def _not_found_response() -> Mock:
    response = Mock()
    response.status_code = 404
    response.headers = {}
    return response


def _stream_context(response: Mock) -> MagicMock:
    context = MagicMock()
    context.__enter__.return_value = response
    return context


def test_default_datasets():
    """Gene effect, model metadata and mutations are required; expression is optional."""
    required = {d.filename for d in DEPMAP_DATASETS if d.required}
    optional = {d.filename for d in DEPMAP_DATASETS if not d.required}

    assert required == {"CRISPRGeneEffect.csv", "Model.csv", "OmicsSomaticMutations.csv"}
    assert optional == {"OmicsExpressionProteinCodingGenesTPMLogp1.csv"}


def test_build_dataset_url_quotes_release_path():
    url = build_dataset_url(BASE_URL, "public_24Q2", "Model.csv")

    assert url == BASE_URL + "public_24Q2%2FModel.csv"


@patch("depmap_hr_pipeline.acquisition.fetch.httpx.stream")
def test_download_writes_file(mock_stream: Mock, tmp_path: Path):
    output_path = tmp_path / "nested" / "Model.csv"
    mock_stream.return_value.__enter__.return_value = _ok_response([b"ModelID,", b"OncotreeLineage\n"])

    result = download_dataset("https://example.org/Model.csv", output_path)

    assert result == output_path
    assert output_path.read_bytes() == b"ModelID,OncotreeLineage\n"
    assert not output_path.with_suffix(".csv.tmp").exists()
    mock_stream.assert_called_once()


@patch("depmap_hr_pipeline.acquisition.fetch.httpx.stream")
def test_download_skips_if_exists(mock_stream: Mock, tmp_path: Path):
    """Existing file is returned without any network access."""
    output_path = tmp_path / "Model.csv"
    output_path.write_text("ModelID\nACH-1\n")

    result = download_dataset("https://example.org/Model.csv", output_path)

    assert result == output_path
    assert output_path.read_text() == "ModelID\nACH-1\n"
    mock_stream.assert_not_called()


@patch("depmap_hr_pipeline.acquisition.fetch.httpx.stream")
def test_download_twice_transfers_once(mock_stream: Mock, tmp_path: Path):
    """Second batch over the same directory performs zero transfers."""
    mock_stream.return_value.__enter__.return_value = _ok_response([b"x\n"])
    datasets = [DatasetSpec(key="a", filename="a.csv"), DatasetSpec(key="b", filename="b.csv")]

    first = download_datasets(tmp_path, BASE_URL, "public_24Q2", datasets=datasets)
    assert mock_stream.call_count == 2
    assert [o.status for o in first] == ["downloaded", "downloaded"]

    mock_stream.reset_mock()
    second = download_datasets(tmp_path, BASE_URL, "public_24Q2", datasets=datasets)

    mock_stream.assert_not_called()
    assert [o.status for o in second] == ["skipped", "skipped"]


@patch("depmap_hr_pipeline.acquisition.fetch.httpx.stream")
def test_download_404_raises_not_found(mock_stream: Mock, tmp_path: Path):
    """HTTP 404 is a NotFoundError with the moved-release hint and is never retried."""
    output_path = tmp_path / "Model.csv"
    mock_stream.return_value.__enter__.return_value = _not_found_response()

    with pytest.raises(NotFoundError) as exc_info:
        download_dataset("https://example.org/Model.csv", output_path, max_attempts=3)

    assert exc_info.value.remediation == MOVED_RELEASE_HINT
    assert mock_stream.call_count == 1
    assert not output_path.exists()
    assert not output_path.with_suffix(".csv.tmp").exists()


@patch("depmap_hr_pipeline.acquisition.fetch.httpx.stream")
def test_download_http_error_raises_network_error(mock_stream: Mock, tmp_path: Path):
    response = Mock()
    response.status_code = 503
    response.headers = {}
    response.raise_for_status = Mock(side_effect=httpx.HTTPStatusError(
        "Service Unavailable",
        request=Mock(),
        response=Mock(status_code=503),
    ))
    mock_stream.return_value.__enter__.return_value = response

    with pytest.raises(NetworkError) as exc_info:
        download_dataset("https://example.org/Model.csv", tmp_path / "Model.csv")

    assert not isinstance(exc_info.value, NotFoundError)
    assert "503" in str(exc_info.value)


@patch("depmap_hr_pipeline.acquisition.fetch.httpx.stream")
def test_download_transport_error_raises_network_error(mock_stream: Mock, tmp_path: Path):
    mock_stream.side_effect = httpx.ConnectError("connection refused")

    with pytest.raises(NetworkError) as exc_info:
        download_dataset("https://example.org/Model.csv", tmp_path / "Model.csv")

    assert exc_info.value.url == "https://example.org/Model.csv"
    assert "connection refused" in str(exc_info.value)
    assert not (tmp_path / "Model.csv").exists()


@patch("depmap_hr_pipeline.acquisition.fetch.httpx.stream")
def test_batch_continues_after_failure(mock_stream: Mock, tmp_path: Path):
    """One missing file is recorded; the rest of the batch is still fetched."""
    def fake_stream(method, url, **kwargs):
        if "Missing.csv" in url:
            return _stream_context(_not_found_response())
        return _stream_context(_ok_response([b"ok\n"]))

    mock_stream.side_effect = fake_stream
    datasets = [
        DatasetSpec(key="missing", filename="Missing.csv"),
        DatasetSpec(key="present", filename="Present.csv"),
        DatasetSpec(key="extra", filename="Extra.csv", required=False),
    ]

    outcomes = download_datasets(tmp_path, BASE_URL, "public_24Q2", datasets=datasets)

    assert [o.status for o in outcomes] == ["failed", "downloaded", "downloaded"]
    assert isinstance(outcomes[0].error, NotFoundError)
    assert (tmp_path / "Present.csv").exists()
    assert (tmp_path / "Extra.csv").exists()
    assert not (tmp_path / "Missing.csv").exists()

    summary = summarize_downloads(outcomes)
    assert summary["total"] == 3
    assert summary["succeeded"] == 2
    assert summary["downloaded"] == 2
    assert summary["skipped"] == 0
    assert summary["failed"] == ["Missing.csv"]
    assert summary["missing_required"] == ["Missing.csv"]


def test_summarize_optional_failure_not_required():
    optional = DatasetSpec(key="expr", filename="Expr.csv", required=False)

    outcomes = [
        DownloadOutcome(
            dataset=optional,
            url="u",
            path=Path("Expr.csv"),
            status="failed",
            error=NotFoundError("u"),
        ),
    ]

    summary = summarize_downloads(outcomes)

    assert summary["failed"] == ["Expr.csv"]
    assert summary["missing_required"] == []


@patch("depmap_hr_pipeline.acquisition.fetch.httpx.stream")
def test_batch_data_dir_is_a_file(mock_stream: Mock, tmp_path: Path):
    """An uncreatable data directory fails every file as a local I/O error."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    datasets = [DatasetSpec(key="a", filename="a.csv"), DatasetSpec(key="b", filename="b.csv")]

    outcomes = download_datasets(blocker, BASE_URL, "public_24Q2", datasets=datasets)

    assert [o.status for o in outcomes] == ["failed", "failed"]
    assert all(type(o.error) is ArtifactIOError for o in outcomes)
    mock_stream.assert_not_called()
    assert summarize_downloads(outcomes)["missing_required"] == ["a.csv", "b.csv"]


@patch("depmap_hr_pipeline.acquisition.fetch.open", side_effect=PermissionError("read-only"), create=True)
@patch("depmap_hr_pipeline.acquisition.fetch.httpx.stream")
def test_batch_write_failure(mock_stream: Mock, mock_open: Mock, tmp_path: Path):
    """A failed local write is an ArtifactIOError outcome and the batch goes on."""
    mock_stream.return_value.__enter__.return_value = _ok_response([b"x\n"])
    datasets = [DatasetSpec(key="a", filename="a.csv"), DatasetSpec(key="b", filename="b.csv")]

    outcomes = download_datasets(tmp_path, BASE_URL, "public_24Q2", datasets=datasets, max_attempts=3)

    assert [o.status for o in outcomes] == ["failed", "failed"]
    assert all(type(o.error) is ArtifactIOError for o in outcomes)
    assert "read-only" in str(outcomes[0].error)
    # Local I/O errors are not retried
    assert mock_stream.call_count == 2
    assert mock_open.call_count == 2
    assert list(tmp_path.iterdir()) == []
