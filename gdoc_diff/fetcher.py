"""Fetches Drive documents as PDF into a staged file.

Google Workspace types are exported server-side to PDF; stored PDFs are
downloaded as-is. Which path a MIME type takes is a lookup table so more
exportable types can be added from configuration.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Optional

import httpx

from .drive_client import PDF_MIME_TYPE, DriveClient
from .errors import FetchError, GoogleAuthError, UnsupportedMimeTypeError
from .models import DocumentHandle

logger = logging.getLogger(__name__)


class FetchStrategy(str, Enum):
    """How a document's PDF bytes are obtained."""

    EXPORT = "export"
    DOWNLOAD = "download"


GOOGLE_WORKSPACE_EXPORTABLE_TYPES = (
    "application/vnd.google-apps.document",
    "application/vnd.google-apps.presentation",
    "application/vnd.google-apps.spreadsheet",
    "application/vnd.google-apps.drawing",
)

DEFAULT_FETCH_STRATEGIES: Dict[str, FetchStrategy] = {
    **{mime: FetchStrategy.EXPORT for mime in GOOGLE_WORKSPACE_EXPORTABLE_TYPES},
    PDF_MIME_TYPE: FetchStrategy.DOWNLOAD,
}


def build_fetch_strategies(extra_export_types: Iterable[str] = ()) -> Dict[str, FetchStrategy]:
    """Default strategies plus any extra MIME types to export as PDF."""
    strategies = dict(DEFAULT_FETCH_STRATEGIES)
    for mime_type in extra_export_types:
        strategies.setdefault(mime_type, FetchStrategy.EXPORT)
    return strategies


def is_byte_stream(response) -> bool:
    """True if ``response`` is an httpx response backed by an async byte stream."""
    return isinstance(response, httpx.Response) and isinstance(
        response.stream, httpx.AsyncByteStream
    )


def _remove_partial(dest: Path) -> None:
    try:
        dest.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to remove incomplete temp file {dest}: {e}")


class ContentFetcher:
    """
    Stages Drive documents as PDF files on disk.

    Usage:
        fetcher = ContentFetcher(drive)
        pdf_path = await fetcher.fetch_to_file(handle, scratch_dir / "spec.pdf")
    """

    def __init__(
        self,
        drive: DriveClient,
        strategies: Optional[Dict[str, FetchStrategy]] = None,
    ):
        self.drive = drive
        self.strategies = strategies if strategies is not None else dict(DEFAULT_FETCH_STRATEGIES)

    def strategy_for(self, mime_type: str) -> FetchStrategy:
        """
        Look up the fetch strategy for a MIME type.

        Raises:
            UnsupportedMimeTypeError: If the type cannot be turned into a PDF
        """
        try:
            return self.strategies[mime_type]
        except KeyError:
            raise UnsupportedMimeTypeError(mime_type) from None

    async def fetch_to_file(self, handle: DocumentHandle, dest: Path) -> Path:
        """
        Write the document's PDF bytes to ``dest``.

        Returns only after the file is fully written and closed.

        Args:
            handle: The document to fetch
            dest: Destination file path

        Returns:
            ``dest``

        Raises:
            UnsupportedMimeTypeError: Before any request, for unsupported types
            FetchError: On auth, transport, HTTP or write errors; ``dest`` is removed
        """
        strategy = self.strategy_for(handle.mime_type)
        logger.info(f"   - Preparing to fetch PDF content for ID {handle.id} (Type: {handle.mime_type})")

        try:
            if strategy is FetchStrategy.EXPORT:
                logger.info("   - Exporting Google Workspace file as PDF...")
                opener = self.drive.stream_export(handle.id, PDF_MIME_TYPE)
            else:
                logger.info("   - Downloading native PDF file...")
                opener = self.drive.stream_media(handle.id)

            async with opener as response:
                if not is_byte_stream(response):
                    raise FetchError(f"Drive {strategy.value} did not return a readable stream")
                await self._write_stream(response, dest)
        except FetchError:
            _remove_partial(dest)
            raise
        except httpx.HTTPStatusError as e:
            _remove_partial(dest)
            raise FetchError(
                self._describe(handle, e.response.status_code, e), e.response.status_code
            ) from e
        except (httpx.HTTPError, httpx.StreamError, OSError) as e:
            _remove_partial(dest)
            raise FetchError(self._describe(handle, None, e)) from e
        except GoogleAuthError as e:
            _remove_partial(dest)
            raise FetchError(f"Could not authenticate to fetch file ID {handle.id}: {e}") from e

        return dest

    async def _write_stream(self, response: httpx.Response, dest: Path) -> None:
        logger.info(f"   - Writing fetched data to temporary PDF: {dest}")
        size = 0
        with open(dest, "wb") as f:
            async for chunk in response.aiter_bytes():
                f.write(chunk)
                size += len(chunk)
            f.flush()
        logger.info(f"   - Successfully saved temporary PDF ({size} bytes).")

    @staticmethod
    def _describe(handle: DocumentHandle, status_code: Optional[int], error: Exception) -> str:
        if status_code == 404:
            return f"Google Drive file ID {handle.id} not found (404)"
        if status_code == 403:
            return f"Permission denied for Google Drive file ID {handle.id} (403)"
        return f"Fetch failed for file ID {handle.id}: {error}"
