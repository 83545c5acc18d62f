"""Finds the link files changed in a pull request."""

import logging
from typing import List

import httpx

from .errors import DiscoveryError
from .github_client import GitHubClient
from .models import LinkFileRef

logger = logging.getLogger(__name__)

# Renamed-only and removed files have nothing new to render
CHANGED_STATUSES = ("added", "modified")


def strip_suffix(filename: str, suffix: str) -> str:
    """Remove exactly ``len(suffix)`` characters from the end of ``filename``."""
    return filename[: len(filename) - len(suffix)]


def select_link_files(files, suffix: str) -> List[LinkFileRef]:
    """
    Pick the added or modified files that end with the link file suffix.

    Args:
        files: Iterable of pull request file entries (filename, status)
        suffix: Link file suffix, e.g. ".gdoc"

    Returns:
        LinkFileRef for every match, in input order
    """
    selected = []
    for file in files:
        filename = file.get("filename", "")
        status = file.get("status")
        if not filename.endswith(suffix) or status not in CHANGED_STATUSES:
            continue

        base_name = strip_suffix(filename, suffix)
        logger.info(
            f" -> Found candidate: {filename} (Status: {status}) -> Output Base: {base_name}"
        )
        selected.append(LinkFileRef(path=filename, base_name=base_name))
    return selected


async def discover_link_files(
    github: GitHubClient, pr_number: int, suffix: str
) -> List[LinkFileRef]:
    """
    List the link files changed in a pull request across all result pages.

    Args:
        github: Client for the repository
        pr_number: Pull request number
        suffix: Link file suffix

    Returns:
        Ordered list of LinkFileRef

    Raises:
        DiscoveryError: If the file list cannot be enumerated
    """
    link_files: List[LinkFileRef] = []
    try:
        async for page in github.iter_pull_request_files(pr_number):
            link_files.extend(select_link_files(page, suffix))
    except httpx.HTTPError as e:
        raise DiscoveryError(f"Failed to list PR files: {e}") from e
    except ValueError as e:
        raise DiscoveryError(f"PR files endpoint returned invalid JSON: {e}") from e

    logger.info(f"Found {len(link_files)} potential link file(s) to process.")
    return link_files
