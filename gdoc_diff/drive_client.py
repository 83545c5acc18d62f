"""
Google Drive v3 client for fetching document bytes as streams.

Both endpoints used here return the document body directly, so responses
are opened in streaming mode and handed to the caller unread.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


class DriveClient:
    """
    Async Drive client.

    Usage:
        drive = DriveClient(token_provider)
        async with drive.stream_export(file_id, "application/pdf") as response:
            async for chunk in response.aiter_bytes():
                ...
    """

    def __init__(
        self,
        token_provider,
        base_url: str = "https://www.googleapis.com/drive/v3",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
        )

    async def close(self):
        if not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "DriveClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _headers(self) -> dict:
        token = await self.token_provider.get_access_token()
        return {"Authorization": f"Bearer {token}"}

    @asynccontextmanager
    async def _stream(self, url: str, params: dict) -> AsyncIterator[httpx.Response]:
        headers = await self._headers()
        async with self._client.stream("GET", url, params=params, headers=headers) as response:
            if response.is_error:
                # Load the error body so it is available on the raised exception
                await response.aread()
                response.raise_for_status()
            yield response

    def stream_export(self, file_id: str, mime_type: str = PDF_MIME_TYPE):
        """
        Export a Google Workspace document to ``mime_type``.

        Returns:
            Async context manager yielding the unread streaming response

        Raises:
            httpx.HTTPStatusError: On 4xx/5xx (404 missing, 403 no access)
        """
        return self._stream(f"/files/{file_id}/export", {"mimeType": mime_type})

    def stream_media(self, file_id: str):
        """
        Download a file's stored bytes as-is.

        Returns:
            Async context manager yielding the unread streaming response

        Raises:
            httpx.HTTPStatusError: On 4xx/5xx (404 missing, 403 no access)
        """
        return self._stream(
            f"/files/{file_id}", {"alt": "media", "supportsAllDrives": "true"}
        )
