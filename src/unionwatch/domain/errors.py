"""Error taxonomy for ingestion and reconciliation."""

from __future__ import annotations


class IngestionError(RuntimeError):
    """Base class for failures while turning model output into union records."""


class NoStructureFoundError(IngestionError):
    """Raised when a response contains no JSON-shaped structure at all.

    This is typically a refusal or a clarification request written in prose.
    """

    def __init__(self, message: str, *, raw_text: str | None = None) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class ModelReportedError(NoStructureFoundError):
    """Raised when the model answered with an explicit ``error`` result."""


class MalformedOutputError(IngestionError):
    """Raised when a structure was found but could not be parsed or validated."""

    def __init__(self, message: str, *, snippet: str | None = None) -> None:
        super().__init__(message)
        self.snippet = snippet


class IncompleteEntityError(IngestionError):
    """Raised when required identity fields (name/slug) are missing after parsing."""


class UpstreamError(IngestionError):
    """Raised when the generative service or the remote store fails."""

    def __init__(self, message: str, *, service: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class MergeConflictError(IngestionError):
    """Reserved. Merges are deterministic and currently never raise this."""
