"""Logging setup for local runs and GitHub Actions.

Under Actions, warnings and errors are emitted as workflow commands so they
show up as annotations on the run, and ``log_group`` folds sections of the
log.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

_ACTIONS_COMMANDS = {
    logging.DEBUG: "debug",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}

_actions_enabled = False


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsFormatter(logging.Formatter):
    """Formats records as GitHub Actions workflow commands.

    INFO records are printed as-is; DEBUG, WARNING and ERROR records use the
    ``::debug::``/``::warning::``/``::error::`` commands.
    """

    def __init__(self):
        super().__init__("%(message)s")

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = _ACTIONS_COMMANDS.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{_escape_data(message)}"


def configure_logging(level: str = "INFO", actions: bool = False) -> None:
    """Configure the root logger.

    Args:
        level: Log level name
        actions: Emit GitHub Actions workflow commands instead of plain lines
    """
    global _actions_enabled
    _actions_enabled = actions

    handler = logging.StreamHandler(sys.stdout)
    if actions:
        handler.setFormatter(ActionsFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper())

    # Request/response lines from httpx are noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


@contextmanager
def log_group(title: str, logger: Optional[logging.Logger] = None) -> Iterator[None]:
    """Fold the enclosed log output into a collapsible group."""
    log = logger or logging.getLogger(__name__)
    if _actions_enabled:
        log.info(f"::group::{title}")
    else:
        log.info(f"== {title}")
    try:
        yield
    finally:
        if _actions_enabled:
            log.info("::endgroup::")
