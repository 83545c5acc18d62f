"""Run configuration using Pydantic Settings.

GitHub Actions passes action inputs as ``INPUT_<NAME>`` environment
variables; each field also accepts a plain variable name so the tool can be
driven from a shell or a ``.env`` file.
"""

import tempfile
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    # Credentials
    github_token: Optional[str] = Field(
        default=None, validation_alias=_env("INPUT_GITHUB_TOKEN", "GITHUB_TOKEN")
    )
    google_service_account_key: Optional[str] = Field(
        default=None,
        validation_alias=_env(
            "INPUT_GOOGLE_SERVICE_ACCOUNT_KEY", "GOOGLE_SERVICE_ACCOUNT_KEY"
        ),
    )
    # Pre-minted token, used instead of the service account key when set
    google_access_token: Optional[str] = Field(
        default=None, validation_alias=_env("GOOGLE_ACCESS_TOKEN")
    )

    # Pipeline
    link_file_suffix: str = Field(
        default=".gdoc",
        validation_alias=_env("INPUT_LINK_FILE_SUFFIX", "LINK_FILE_SUFFIX"),
    )
    output_directory: Path = Field(
        default=Path("visual-diff"),
        validation_alias=_env("INPUT_OUTPUT_DIRECTORY", "OUTPUT_DIRECTORY"),
    )
    image_resolution: int = Field(
        default=150,
        validation_alias=_env("INPUT_IMAGE_RESOLUTION", "IMAGE_RESOLUTION"),
    )
    # Comma-separated Drive MIME types to export as PDF on top of the defaults
    extra_export_mime_types: str = Field(
        default="",
        validation_alias=_env(
            "INPUT_EXTRA_EXPORT_MIME_TYPES", "GDOC_DIFF_EXTRA_EXPORT_MIME_TYPES"
        ),
    )

    # Git identity for the publish commit
    git_user_name: str = Field(
        default="github-actions[bot]",
        validation_alias=_env("INPUT_GIT_USER_NAME", "GIT_USER_NAME"),
    )
    git_user_email: str = Field(
        default="github-actions[bot]@users.noreply.github.com",
        validation_alias=_env("INPUT_GIT_USER_EMAIL", "GIT_USER_EMAIL"),
    )

    # API endpoints
    github_api_url: str = Field(
        default="https://api.github.com", validation_alias=_env("GITHUB_API_URL")
    )
    drive_api_url: str = Field(
        default="https://www.googleapis.com/drive/v3",
        validation_alias=_env("GDOC_DIFF_DRIVE_API_URL"),
    )
    http_timeout: float = Field(
        default=60.0, validation_alias=_env("GDOC_DIFF_HTTP_TIMEOUT")
    )

    # Workflow runtime
    github_actions: bool = Field(default=False, validation_alias=_env("GITHUB_ACTIONS"))
    github_event_name: Optional[str] = Field(
        default=None, validation_alias=_env("GITHUB_EVENT_NAME")
    )
    github_event_path: Optional[Path] = Field(
        default=None, validation_alias=_env("GITHUB_EVENT_PATH")
    )
    github_repository: Optional[str] = Field(
        default=None, validation_alias=_env("GITHUB_REPOSITORY")
    )
    github_output: Optional[Path] = Field(
        default=None, validation_alias=_env("GITHUB_OUTPUT")
    )
    runner_temp: Optional[Path] = Field(
        default=None, validation_alias=_env("RUNNER_TEMP")
    )

    log_level: str = Field(default="INFO", validation_alias=_env("GDOC_DIFF_LOG_LEVEL"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("image_resolution")
    @classmethod
    def check_resolution(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("image_resolution must be a positive number of DPI")
        return v

    @field_validator("link_file_suffix")
    @classmethod
    def check_suffix(cls, v: str) -> str:
        if not v:
            raise ValueError("link_file_suffix must not be empty")
        return v

    def get_extra_export_mime_types(self) -> List[str]:
        """Get the extra export MIME types as a list."""
        return [m.strip() for m in self.extra_export_mime_types.split(",") if m.strip()]

    def get_temp_root(self) -> Path:
        """Directory under which the per-run scratch directory is created."""
        return self.runner_temp or Path(tempfile.gettempdir())


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
