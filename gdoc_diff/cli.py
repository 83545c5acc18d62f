"""
Command line entry point.

Usage:
    python -m gdoc_diff run
    python -m gdoc_diff render docs/spec.gdoc --output-dir out --dpi 150
    python -m gdoc_diff render slides.pdf --output-dir out

``run`` is what the GitHub Action invokes: it reads the workflow context
from the environment, renders changed link files and publishes the images.
``render`` renders a single local PDF or link file without GitHub.
"""

import argparse
import asyncio
import logging
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from .config import Settings, get_settings
from .context import load_pull_request_context
from .drive_client import DriveClient
from .errors import GdocDiffError, NotAPullRequestEvent
from .fetcher import ContentFetcher, build_fetch_strategies
from .github_client import GitHubClient
from .google_auth import get_token_provider
from .logging_config import configure_logging, log_group
from .orchestrator import PipelineOrchestrator
from .publisher import GitPublisher
from .rasterizer import render_pdf_to_pngs
from .resolver import parse_link_file

logger = logging.getLogger(__name__)


def write_output(settings: Settings, name: str, value) -> None:
    """Set an Actions step output (no-op outside Actions)."""
    if settings.github_output is None:
        return
    with open(settings.github_output, "a", encoding="utf-8") as f:
        f.write(f"{name}={value}\n")


def _build_fetcher(settings: Settings) -> ContentFetcher:
    token_provider = get_token_provider(
        settings.google_service_account_key, settings.google_access_token
    )
    drive = DriveClient(
        token_provider, base_url=settings.drive_api_url, timeout=settings.http_timeout
    )
    return ContentFetcher(drive, build_fetch_strategies(settings.get_extra_export_mime_types()))


async def run_action(settings: Settings) -> int:
    """Render and publish images for the triggering pull request."""
    with log_group("Initialization", logger):
        try:
            pull_request = load_pull_request_context(
                settings.github_event_name,
                settings.github_event_path,
                settings.github_repository,
            )
        except NotAPullRequestEvent as e:
            logger.warning(f"{e}. Skipping.")
            return 0

        if not settings.github_token:
            logger.error("github_token is required")
            return 1

        logger.info(
            f"Processing PR #{pull_request.number} on branch '{pull_request.head_ref}' "
            f"(SHA: {pull_request.head_sha})"
        )
        logger.info(f"Outputting PNGs to directory: {settings.output_directory}")
        logger.info(f"PNG Resolution: {settings.image_resolution} DPI")

    with log_group("Authenticating Services", logger):
        fetcher = _build_fetcher(settings)

    async with GitHubClient(
        settings.github_token,
        pull_request.owner,
        pull_request.repo,
        base_url=settings.github_api_url,
        timeout=settings.http_timeout,
    ) as github, fetcher.drive:
        orchestrator = PipelineOrchestrator(github, fetcher, GitPublisher(), settings)
        summary = await orchestrator.run(pull_request)

    write_output(settings, "generated_files_count", summary.total_images)
    logger.info(str(summary))
    logger.info("Google Document Visual Diff Generator completed.")
    return 0


async def render_local(settings: Settings, source: Path, output_dir: Path, dpi: int) -> List[Path]:
    """Render a local PDF, or the Drive document a local link file points to."""
    if source.suffix.lower() == ".pdf":
        return await asyncio.to_thread(render_pdf_to_pngs, source, output_dir, dpi)

    handle = parse_link_file(source.read_text(encoding="utf-8"))
    fetcher = _build_fetcher(settings)
    async with fetcher.drive:
        with tempfile.TemporaryDirectory(prefix="gdoc-diff-") as scratch:
            pdf_path = await fetcher.fetch_to_file(handle, Path(scratch) / "document.pdf")
            return await asyncio.to_thread(render_pdf_to_pngs, pdf_path, output_dir, dpi)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gdoc-diff",
        description="Render Google Drive documents referenced by link files to PNG pages.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Run as a GitHub Action step for a pull request")

    render = subparsers.add_parser("render", help="Render one local PDF or link file")
    render.add_argument("source", type=Path, help="PDF file or link file to render")
    render.add_argument(
        "--output-dir", type=Path, required=True, help="Directory for the page images"
    )
    render.add_argument(
        "--dpi", type=int, default=None, help="Resolution in DPI (default: image_resolution)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1

    configure_logging(settings.log_level, actions=settings.github_actions)

    try:
        if args.command == "render":
            dpi = args.dpi or settings.image_resolution
            if dpi <= 0:
                logger.error("Invalid image_resolution provided.")
                return 1
            paths = asyncio.run(render_local(settings, args.source, args.output_dir, dpi))
            for path in paths:
                print(path)
            return 0 if paths else 1

        return asyncio.run(run_action(settings))
    except GdocDiffError as e:
        logger.error(f"Action failed with error: {e}")
        logger.debug("Traceback", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
