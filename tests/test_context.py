"""Tests for loading the pull request context."""

import json
from pathlib import Path

import pytest

from gdoc_diff.context import load_pull_request_context
from gdoc_diff.errors import ContextError, NotAPullRequestEvent
from gdoc_diff.models import PullRequestContext


@pytest.fixture
def event_file(tmp_path: Path) -> Path:
    path = tmp_path / "event.json"
    path.write_text(
        json.dumps(
            {
                "action": "synchronize",
                "pull_request": {
                    "number": 42,
                    "head": {"sha": "deadbeef", "ref": "feature/docs"},
                },
            }
        )
    )
    return path


def test_loads_pull_request(event_file):
    context = load_pull_request_context("pull_request", event_file, "acme/handbook")
    assert context == PullRequestContext(
        owner="acme", repo="handbook", number=42, head_sha="deadbeef", head_ref="feature/docs"
    )
    assert context.full_name == "acme/handbook"


def test_pull_request_target_is_accepted(event_file):
    assert load_pull_request_context("pull_request_target", event_file, "acme/handbook").number == 42


@pytest.mark.parametrize("event_name", ["push", "workflow_dispatch", None])
def test_other_events_are_rejected(event_file, event_name):
    with pytest.raises(NotAPullRequestEvent):
        load_pull_request_context(event_name, event_file, "acme/handbook")


@pytest.mark.parametrize("repository", [None, "", "acme", "acme/handbook/extra"])
def test_bad_repository(event_file, repository):
    with pytest.raises(ContextError):
        load_pull_request_context("pull_request", event_file, repository)


def test_missing_payload_file(tmp_path: Path):
    with pytest.raises(ContextError):
        load_pull_request_context("pull_request", tmp_path / "missing.json", "acme/handbook")


def test_payload_without_pull_request(tmp_path: Path):
    path = tmp_path / "event.json"
    path.write_text(json.dumps({"ref": "refs/heads/main"}))
    with pytest.raises(ContextError, match="Pull request payload not found"):
        load_pull_request_context("pull_request", path, "acme/handbook")


def test_payload_missing_head(tmp_path: Path):
    path = tmp_path / "event.json"
    path.write_text(json.dumps({"pull_request": {"number": 1}}))
    with pytest.raises(ContextError):
        load_pull_request_context("pull_request", path, "acme/handbook")
