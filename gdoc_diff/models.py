"""Data types passed between pipeline stages."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class LinkFileRef:
    """A changed link file in the pull request.

    Attributes:
        path: Repository-relative path of the link file
        base_name: ``path`` with the link file suffix removed
    """

    path: str
    base_name: str


@dataclass(frozen=True)
class DocumentHandle:
    """A Drive document referenced by a link file."""

    id: str
    mime_type: str
    display_name: Optional[str] = None


@dataclass(frozen=True)
class PullRequestContext:
    """The pull request the run was triggered for."""

    owner: str
    repo: str
    number: int
    head_sha: str
    head_ref: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


class LinkFileStatus(str, Enum):
    """Terminal state of one link file."""

    RENDERED = "rendered"
    SKIPPED_RESOLUTION = "skipped_resolution"
    SKIPPED_UNSUPPORTED = "skipped_unsupported"
    SKIPPED_FETCH = "skipped_fetch"


@dataclass
class LinkFileResult:
    """Outcome of processing one link file."""

    path: str
    status: LinkFileStatus
    images: List[Path] = field(default_factory=list)
    document_id: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class RunSummary:
    """Result of a pipeline run."""

    pull_request: int
    results: List[LinkFileResult] = field(default_factory=list)
    total_images: int = 0
    published: bool = False

    @property
    def skipped(self) -> List[LinkFileResult]:
        return [r for r in self.results if r.status != LinkFileStatus.RENDERED]

    def __str__(self) -> str:
        return (
            f"PR #{self.pull_request}: {self.total_images} image(s) from "
            f"{len(self.results) - len(self.skipped)} link file(s)"
            + (f" ({len(self.skipped)} skipped)" if self.skipped else "")
        )
