"""
GitHub REST client for the pull request being processed.

Only two read endpoints are needed: the pull request's changed-file list
and the contents API for reading link files at the head commit.

Rate limits:
- Authenticated: 5000 requests/hour
- Pull request files: at most 3000 files, 100 per page
"""

import logging
from typing import Any, AsyncIterator, Dict, List, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

PER_PAGE = 100


class GitHubClient:
    """
    Async client scoped to one repository.

    Usage:
        async with GitHubClient(token, "owner", "repo") as github:
            async for page in github.iter_pull_request_files(42):
                ...
            content = await github.get_content("docs/spec.gdoc", ref=sha)
    """

    def __init__(
        self,
        access_token: str,
        owner: str,
        repo: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.owner = owner
        self.repo = repo
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    async def close(self):
        if not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def iter_pull_request_files(
        self, pr_number: int
    ) -> AsyncIterator[List[Dict[str, Any]]]:
        """
        Iterate over the pages of files changed in a pull request.

        Follows the ``Link: rel="next"`` header. Stops early on an empty or
        short page.

        Args:
            pr_number: Pull request number

        Yields:
            One list of file entries (filename, status, ...) per page

        Raises:
            httpx.HTTPError: On transport failure or non-2xx response
        """
        url: Optional[str] = f"/repos/{self.full_name}/pulls/{pr_number}/files"
        params: Optional[Dict[str, Any]] = {"per_page": PER_PAGE, "page": 1}

        while url:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            batch = response.json()
            if not batch:
                return

            yield batch

            next_link = response.links.get("next", {}).get("url")
            if next_link:
                # The next URL already carries the query string
                url, params = next_link, None
            elif len(batch) < PER_PAGE or params is None:
                return
            else:
                params = {**params, "page": params["page"] + 1}

    async def get_content(self, path: str, ref: str) -> Any:
        """
        Fetch a path from the contents API at a specific revision.

        Args:
            path: Path within the repo (e.g., "docs/spec.gdoc")
            ref: Branch, tag, or commit SHA

        Returns:
            The decoded JSON body (an object for files, a list for directories)

        Raises:
            httpx.HTTPError: On transport failure or non-2xx response
        """
        encoded_path = quote(path, safe="/")
        response = await self._client.get(
            f"/repos/{self.full_name}/contents/{encoded_path}", params={"ref": ref}
        )
        response.raise_for_status()
        return response.json()
