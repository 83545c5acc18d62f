"""
Pipeline Orchestrator - renders the Drive documents behind changed link files.

For every link file changed in the pull request:
1. Resolve the link file to a Drive document handle
2. Fetch the document as PDF into the run's scratch directory
3. Render each page to PNG under the output directory
4. Remove the staged PDF

Link files are processed one at a time, in discovery order. A failure in
resolving or fetching one link file skips it; only discovery and publish
failures end the run.
"""

import asyncio
import logging
import re
import shutil
import time
from pathlib import Path
from typing import Callable, List, Optional

from .config import Settings
from .discovery import discover_link_files
from .errors import FetchError, ResolutionError, UnsupportedMimeTypeError
from .fetcher import ContentFetcher
from .github_client import GitHubClient
from .logging_config import log_group
from .models import (
    LinkFileRef,
    LinkFileResult,
    LinkFileStatus,
    PullRequestContext,
    RunSummary,
)
from .publisher import GitPublisher, build_commit_message
from .rasterizer import render_pdf_to_pngs
from .resolver import resolve_link_file

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")


def staged_pdf_name(base_name: str) -> str:
    """Filesystem-safe name for a link file's temporary PDF."""
    return f"{_UNSAFE_CHARS.sub('_', base_name)}.pdf"


def image_output_dir(output_base_dir: Path, link_file: LinkFileRef) -> Path:
    """Images for ``docs/spec.gdoc`` go to ``output_base_dir/docs/spec``.

    ``base_name`` keeps the link file's directory, so only its last component
    is appended to the link file's directory.
    """
    relative_dir = Path(link_file.path).parent
    return Path(output_base_dir) / relative_dir / Path(link_file.base_name).name


class PipelineOrchestrator:
    """
    Drives discovery, rendering and publishing for one pull request.

    Usage:
        orchestrator = PipelineOrchestrator(github, fetcher, publisher, settings)
        summary = await orchestrator.run(pull_request)
        print(summary.total_images)
    """

    def __init__(
        self,
        github: GitHubClient,
        fetcher: ContentFetcher,
        publisher: Optional[GitPublisher],
        settings: Settings,
        renderer: Callable[[Path, Path, int], List[Path]] = render_pdf_to_pngs,
    ):
        self.github = github
        self.fetcher = fetcher
        self.publisher = publisher
        self.settings = settings
        self.renderer = renderer

    def _create_scratch_dir(self) -> Path:
        scratch = self.settings.get_temp_root() / f"gdoc-diff-{int(time.time() * 1000)}"
        scratch.mkdir(parents=True, exist_ok=True)
        logger.info(f"Using temporary directory: {scratch}")
        return scratch

    async def run(self, pull_request: PullRequestContext) -> RunSummary:
        """
        Process every changed link file in the pull request.

        Args:
            pull_request: The pull request under evaluation

        Returns:
            RunSummary with per-file results and the total image count

        Raises:
            DiscoveryError: If the changed files cannot be listed
            PublishError: If committing or pushing the images fails
        """
        summary = RunSummary(pull_request=pull_request.number)
        suffix = self.settings.link_file_suffix

        with log_group("Finding Changed Link Files", logger):
            logger.info(f"Looking for link files ending with: {suffix}")
            link_files = await discover_link_files(self.github, pull_request.number, suffix)

        if not link_files:
            logger.info("No changed link files found in this PR update. Nothing to do.")
            return summary

        scratch_dir = self._create_scratch_dir()
        try:
            with log_group("Processing Files and Generating PNGs", logger):
                for link_file in link_files:
                    result = await self.process_link_file(
                        link_file, pull_request.head_sha, scratch_dir
                    )
                    summary.results.append(result)
                    summary.total_images += len(result.images)
        finally:
            shutil.rmtree(scratch_dir, ignore_errors=True)
            logger.info(f"Temporary directory cleaned up: {scratch_dir}")

        if summary.total_images > 0 and self.publisher is not None:
            with log_group("Committing and Pushing PNGs", logger):
                await self.publisher.configure_identity(
                    self.settings.git_user_name, self.settings.git_user_email
                )
                summary.published = await self.publisher.commit_and_push(
                    build_commit_message(pull_request.number),
                    pull_request.head_ref,
                    self.settings.output_directory,
                )
        elif summary.total_images == 0:
            logger.info(
                "No PNGs were generated in this run (or only unsupported file types were found)."
            )

        return summary

    async def process_link_file(
        self, link_file: LinkFileRef, ref: str, scratch_dir: Path
    ) -> LinkFileResult:
        """Resolve, fetch and render one link file. Never raises per-item errors."""
        logger.info(f"Processing: {link_file.path}")

        try:
            handle = await resolve_link_file(self.github, link_file, ref)
        except ResolutionError as e:
            logger.warning(f"   - Skipping {link_file.path}: {e}")
            return LinkFileResult(
                path=link_file.path,
                status=LinkFileStatus.SKIPPED_RESOLUTION,
                reason=str(e),
            )

        pdf_path = scratch_dir / staged_pdf_name(link_file.base_name)
        try:
            await self.fetcher.fetch_to_file(handle, pdf_path)
        except UnsupportedMimeTypeError as e:
            logger.warning(f"   - Skipping file {link_file.path}: {e}")
            return LinkFileResult(
                path=link_file.path,
                status=LinkFileStatus.SKIPPED_UNSUPPORTED,
                document_id=handle.id,
                reason=str(e),
            )
        except FetchError as e:
            logger.error(
                f"   - Fetch failed for {link_file.path} (status: {e.status_code or 'n/a'}): {e}"
            )
            return LinkFileResult(
                path=link_file.path,
                status=LinkFileStatus.SKIPPED_FETCH,
                document_id=handle.id,
                reason=e.reason,
            )

        try:
            output_dir = image_output_dir(self.settings.output_directory, link_file)
            logger.info(f"   - Converting PDF to PNGs in directory: {output_dir}")
            images = await asyncio.to_thread(
                self.renderer, pdf_path, output_dir, self.settings.image_resolution
            )
        finally:
            logger.debug(f"   - Removing temporary PDF: {pdf_path}")
            pdf_path.unlink(missing_ok=True)

        return LinkFileResult(
            path=link_file.path,
            status=LinkFileStatus.RENDERED,
            images=images,
            document_id=handle.id,
        )
