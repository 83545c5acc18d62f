"""
Pytest Configuration and Fixtures

Shared fixtures for the visual diff pipeline tests: generated PDFs,
settings rooted in a temporary directory, and httpx mock transports for the
GitHub and Drive APIs.
"""

import base64
import json
from pathlib import Path
from typing import Callable, Dict, List, Optional

import httpx
import pymupdf
import pytest

from gdoc_diff.config import Settings, get_settings
from gdoc_diff.drive_client import DriveClient
from gdoc_diff.github_client import GitHubClient
from gdoc_diff.google_auth import StaticTokenProvider

GITHUB_BASE_URL = "https://api.github.test"
DRIVE_BASE_URL = "https://drive.test/drive/v3"

PRESENTATION = "application/vnd.google-apps.presentation"
FOLDER = "application/vnd.google-apps.folder"


def build_pdf(pages: int = 3, width: float = 144, height: float = 72) -> bytes:
    """Build a PDF with ``pages`` pages of ``width`` x ``height`` points."""
    doc = pymupdf.open()
    for i in range(pages):
        page = doc.new_page(width=width, height=height)
        page.insert_text((10, 30), f"Page {i + 1}")
    data = doc.tobytes()
    doc.close()
    return data


def contents_body(data, encoding: str = "base64") -> Dict:
    """Contents API file object for a link file holding ``data``."""
    text = data if isinstance(data, str) else json.dumps(data)
    return {
        "type": "file",
        "encoding": encoding,
        "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
    }


def github_handler(
    files: List[Dict],
    contents: Optional[Dict[str, Dict]] = None,
    pr_number: int = 7,
) -> Callable[[httpx.Request], httpx.Response]:
    """Route pull request file listing and contents requests for owner/repo."""
    contents = contents or {}

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == f"/repos/owner/repo/pulls/{pr_number}/files":
            page = int(request.url.params.get("page", "1"))
            per_page = int(request.url.params.get("per_page", "30"))
            start = (page - 1) * per_page
            return httpx.Response(200, json=files[start : start + per_page])

        prefix = "/repos/owner/repo/contents/"
        if path.startswith(prefix):
            body = contents.get(path[len(prefix) :])
            if body is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json=body)

        return httpx.Response(404, json={"message": "Not Found"})

    return handler


def drive_handler(
    documents: Dict[str, bytes],
    statuses: Optional[Dict[str, int]] = None,
    requests: Optional[List[httpx.Request]] = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Serve export and media downloads for the given document IDs."""
    statuses = statuses or {}

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        parts = request.url.path.split("/")
        # /drive/v3/files/<id>[/export]
        file_id = parts[4] if len(parts) > 4 else ""
        if file_id in statuses:
            return httpx.Response(statuses[file_id], json={"error": {"code": statuses[file_id]}})
        if file_id not in documents:
            return httpx.Response(404, json={"error": {"code": 404}})
        return httpx.Response(200, content=documents[file_id])

    return handler


def make_github(handler) -> GitHubClient:
    return GitHubClient(
        "ghp_test",
        "owner",
        "repo",
        base_url=GITHUB_BASE_URL,
        transport=httpx.MockTransport(handler),
    )


def make_drive(handler, token_provider=None) -> DriveClient:
    return DriveClient(
        token_provider or StaticTokenProvider("ya29.test"),
        base_url=DRIVE_BASE_URL,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with output and scratch directories under ``tmp_path``."""
    return Settings(
        _env_file=None,
        github_token="ghp_test",
        link_file_suffix=".gdoc",
        output_directory=tmp_path / "out",
        image_resolution=72,
        runner_temp=tmp_path / "runner",
        github_actions=False,
        extra_export_mime_types="",
    )


@pytest.fixture
def make_pdf(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a generated PDF into ``tmp_path``."""

    def _make(pages: int = 3, name: str = "doc.pdf", width: float = 144, height: float = 72) -> Path:
        path = tmp_path / name
        path.write_bytes(build_pdf(pages, width, height))
        return path

    return _make
