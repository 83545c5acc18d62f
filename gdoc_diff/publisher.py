"""Commits and pushes the rendered images back to the pull request branch."""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from .errors import PublishError

logger = logging.getLogger(__name__)

_STDERR_TRUNCATE_CHARS = 2000


def build_commit_message(pr_number: int) -> str:
    return (
        f"[skip ci] Generate visual diff PNGs for PR #{pr_number}\n\n"
        "Generates PNG images for visual diffing of Google Drive files updated in this PR."
    )


class GitPublisher:
    """Runs git in a working tree to publish one directory."""

    def __init__(self, cwd: Optional[Union[str, Path]] = None, git: str = "git"):
        self.cwd = cwd
        self.git = git

    async def _run(self, args: Sequence[str], check: bool = True) -> Tuple[int, str]:
        process = await asyncio.create_subprocess_exec(
            self.git,
            *args,
            cwd=self.cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()

        if check and process.returncode != 0:
            stderr_text = stderr.decode("utf-8", errors="replace")
            if len(stderr_text) > _STDERR_TRUNCATE_CHARS:
                stderr_text = stderr_text[:_STDERR_TRUNCATE_CHARS] + "... (truncated)"
            raise PublishError(
                f"git {' '.join(args)} failed with code {process.returncode}: {stderr_text.strip()}"
            )
        return process.returncode, stdout.decode("utf-8", errors="replace")

    async def configure_identity(self, user_name: str, user_email: str) -> None:
        """Set the commit author. A failure is logged, not raised."""
        logger.info(f"Configuring Git user: {user_name} <{user_email}>")
        try:
            await self._run(["config", "user.name", user_name])
            await self._run(["config", "user.email", user_email])
        except (PublishError, OSError) as e:
            logger.warning(f"Failed to configure Git user: {e}")

    async def commit_and_push(
        self, commit_message: str, branch_name: str, directory: Union[str, Path]
    ) -> bool:
        """
        Stage only ``directory``, commit if it has changes, and push.

        Args:
            commit_message: Commit message
            branch_name: Remote branch to push to
            directory: The only path that is staged

        Returns:
            True if a commit was pushed, False if there was nothing to commit

        Raises:
            PublishError: If any git command fails
        """
        directory = str(directory)
        try:
            logger.info("Adding generated files to Git index...")
            await self._run(["add", "--", directory])

            _, status = await self._run(["status", "--porcelain", "--", directory], check=False)
            if not status.strip():
                logger.info(f"No changes detected within '{directory}'. Nothing to commit.")
                return False

            logger.info("Committing changes...")
            await self._run(["commit", "-m", commit_message, "--", directory])

            logger.info(f"Pushing changes to branch {branch_name}...")
            await self._run(["push", "origin", f"HEAD:{branch_name}"])
        except OSError as e:
            raise PublishError(f"Failed to run git: {e}") from e

        logger.info("Changes pushed successfully.")
        return True
