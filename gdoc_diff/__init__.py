"""
Visual diff images for Google Drive documents linked from a pull request.

The pipeline finds changed link files (JSON pointers to Drive documents),
fetches each document as PDF, renders every page to PNG and commits the
images back to the pull request branch.
"""

from .models import DocumentHandle, LinkFileRef, LinkFileResult, LinkFileStatus, RunSummary
from .orchestrator import PipelineOrchestrator

__version__ = "0.1.0"

__all__ = [
    "DocumentHandle",
    "LinkFileRef",
    "LinkFileResult",
    "LinkFileStatus",
    "PipelineOrchestrator",
    "RunSummary",
]
