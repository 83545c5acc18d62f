"""Exception hierarchy for the visual diff pipeline.

Fatal errors end the run. Per-item errors are caught by the orchestrator,
which records the skip and moves on to the next link file.
"""

from typing import Optional


class GdocDiffError(Exception):
    """Base error for the pipeline."""

    pass


# =============================================================================
# Fatal
# =============================================================================


class ContextError(GdocDiffError):
    """The workflow run context is missing or malformed."""

    pass


class NotAPullRequestEvent(ContextError):
    """The workflow was triggered by something other than a pull request."""

    pass


class GoogleAuthError(GdocDiffError):
    """Could not obtain a Google Drive access token."""

    pass


class DiscoveryError(GdocDiffError):
    """Could not enumerate the files changed in the pull request."""

    pass


class PublishError(GdocDiffError):
    """Staging, committing or pushing the output directory failed."""

    pass


# =============================================================================
# Per link file
# =============================================================================


class ResolutionError(GdocDiffError):
    """A link file could not be turned into a document handle."""

    pass


class UnsupportedMimeTypeError(GdocDiffError):
    """The document type has no PDF fetch strategy."""

    def __init__(self, mime_type: str):
        super().__init__(f"Unsupported MIME type {mime_type} for PDF conversion")
        self.mime_type = mime_type


class FetchError(GdocDiffError):
    """Fetching document bytes from Drive failed."""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    OTHER = "error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def reason(self) -> str:
        if self.status_code == 404:
            return self.NOT_FOUND
        if self.status_code == 403:
            return self.PERMISSION_DENIED
        return self.OTHER
