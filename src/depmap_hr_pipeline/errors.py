"""Typed error taxonomy shared by all pipeline stages."""

from pathlib import Path


class PipelineError(Exception):
    """Base class for pipeline failures.

    Carries an optional remediation hint that the CLI prints after the
    error message.
    """

    def __init__(self, message: str, remediation: str | None = None):
        super().__init__(message)
        self.remediation = remediation


class NetworkError(PipelineError):
    """Remote transfer failed (connection, timeout or non-404 HTTP status)."""

    def __init__(self, url: str, reason: str, remediation: str | None = None):
        super().__init__(f"Failed to fetch {url}: {reason}", remediation)
        self.url = url
        self.reason = reason


class NotFoundError(NetworkError):
    """Remote file does not exist (HTTP 404)."""

    def __init__(self, url: str, remediation: str | None = None):
        super().__init__(url, "HTTP 404 Not Found", remediation)


class ArtifactIOError(PipelineError):
    """Reading or writing a local artifact failed."""

    def __init__(self, path: Path | str, reason: str, remediation: str | None = None):
        super().__init__(f"{path}: {reason}", remediation)
        self.path = Path(path)
        self.reason = reason


class SchemaError(PipelineError):
    """An input table is missing expected columns or violates its key."""

    def __init__(
        self,
        table: str,
        missing: list[str] | None = None,
        detail: str | None = None,
        remediation: str | None = None,
    ):
        self.table = table
        self.missing = list(missing or [])
        if detail is None:
            detail = f"missing required column(s): {', '.join(self.missing)}"
        super().__init__(f"{table}: {detail}", remediation)


class GeneNotFoundError(PipelineError):
    """Target gene has no matching column in the score matrix."""

    def __init__(self, gene: str, detail: str | None = None, remediation: str | None = None):
        self.gene = gene
        super().__init__(
            detail or f"Gene {gene!r} not found in dependency score columns",
            remediation,
        )


class AmbiguousGeneColumnError(GeneNotFoundError):
    """Target gene matches more than one score column."""

    def __init__(self, gene: str, matches: list[str]):
        self.matches = list(matches)
        super().__init__(
            gene,
            detail=f"Gene {gene!r} matches {len(matches)} score columns: {', '.join(matches)}",
            remediation="Use the exact gene symbol as it appears before the '(ID)' suffix.",
        )


class InsufficientDataError(PipelineError):
    """A group has too few observations for variance-based statistics."""

    def __init__(self, group: str, n: int, required: int = 2):
        self.group = group
        self.n = n
        self.required = required
        super().__init__(
            f"Group {group!r} has {n} observation(s); at least {required} are required",
            "Widen the cohort or gene panel so both groups have enough samples.",
        )
