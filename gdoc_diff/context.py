"""Loads the pull request the workflow run was triggered for."""

import json
import logging
from pathlib import Path
from typing import Optional

from .errors import ContextError, NotAPullRequestEvent
from .models import PullRequestContext

logger = logging.getLogger(__name__)

PULL_REQUEST_EVENTS = ("pull_request", "pull_request_target")


def load_pull_request_context(
    event_name: Optional[str],
    event_path: Optional[Path],
    repository: Optional[str],
) -> PullRequestContext:
    """
    Build the pull request context from the Actions runtime.

    Args:
        event_name: Value of GITHUB_EVENT_NAME
        event_path: Path of the webhook payload (GITHUB_EVENT_PATH)
        repository: Value of GITHUB_REPOSITORY ("owner/repo")

    Returns:
        PullRequestContext for the triggering pull request

    Raises:
        NotAPullRequestEvent: If the run was not triggered by a pull request
        ContextError: If the payload or repository is missing or malformed
    """
    if event_name not in PULL_REQUEST_EVENTS:
        raise NotAPullRequestEvent(
            f'Action should run on the "pull_request" event, got {event_name!r}'
        )

    if not repository or repository.count("/") != 1:
        raise ContextError(f"GITHUB_REPOSITORY must be 'owner/repo', got {repository!r}")
    owner, repo = repository.split("/")

    if event_path is None:
        raise ContextError("GITHUB_EVENT_PATH is not set")

    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ContextError(f"Could not read event payload {event_path}: {e}") from e

    pr = payload.get("pull_request") if isinstance(payload, dict) else None
    if not pr:
        raise ContextError("Pull request payload not found in context")

    try:
        return PullRequestContext(
            owner=owner,
            repo=repo,
            number=int(pr["number"]),
            head_sha=pr["head"]["sha"],
            head_ref=pr["head"]["ref"],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ContextError(f"Malformed pull request payload: {e}") from e
