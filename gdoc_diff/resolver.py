"""Turns link files into Drive document handles."""

import base64
import binascii
import json
import logging
from typing import Any

import httpx

from .errors import ResolutionError
from .github_client import GitHubClient
from .models import DocumentHandle, LinkFileRef

logger = logging.getLogger(__name__)


def parse_link_file(text: str) -> DocumentHandle:
    """
    Parse link file JSON into a document handle.

    The object must carry string ``id`` and ``mimeType`` fields; ``name`` is
    kept when it is a string.

    Raises:
        ResolutionError: If the text is not a JSON object with the required fields
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ResolutionError(f"Link file is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ResolutionError("Link file JSON is not an object")

    file_id = data.get("id")
    mime_type = data.get("mimeType")
    if not isinstance(file_id, str) or not isinstance(mime_type, str):
        raise ResolutionError("Could not find 'id' and 'mimeType' fields in JSON content")

    name = data.get("name")
    return DocumentHandle(
        id=file_id,
        mime_type=mime_type,
        display_name=name if isinstance(name, str) else None,
    )


def decode_content(content_response: Any) -> str:
    """Decode a contents API file object to text."""
    if (
        not isinstance(content_response, dict)
        or "content" not in content_response
        or content_response.get("encoding") != "base64"
    ):
        raise ResolutionError("Could not retrieve valid base64 content")

    try:
        raw = base64.b64decode(content_response["content"])
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, TypeError) as e:
        raise ResolutionError(f"Could not decode link file content: {e}") from e


async def resolve_link_file(
    github: GitHubClient, link_file: LinkFileRef, ref: str
) -> DocumentHandle:
    """
    Read a link file at ``ref`` and extract the document it points to.

    Args:
        github: Client for the repository
        link_file: The changed link file
        ref: Commit SHA to read the file at

    Returns:
        DocumentHandle for the referenced document

    Raises:
        ResolutionError: If the content is unreadable or malformed
    """
    logger.debug(f"Fetching content for: {link_file.path} at ref {ref}")
    try:
        content_response = await github.get_content(link_file.path, ref)
    except httpx.HTTPError as e:
        raise ResolutionError(f"Failed to get content of {link_file.path}: {e}") from e
    except ValueError as e:
        raise ResolutionError(f"Contents API returned invalid JSON for {link_file.path}") from e

    handle = parse_link_file(decode_content(content_response))
    logger.info(
        f"   - Extracted Drive ID: {handle.id}, MIME Type: {handle.mime_type}"
        + (f", Name: {handle.display_name}" if handle.display_name else "")
    )
    return handle
