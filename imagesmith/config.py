"""Agent configuration — env-driven via pydantic-settings.

Reads from a .env file and IMAGESMITH_* environment variables.  List
settings such as ``watched_repos`` are given as JSON arrays in the
environment, e.g. ``IMAGESMITH_WATCHED_REPOS='["octo/app", "octo/api"]'``.
"""

from __future__ import annotations

from pathlib import Path
from string import Formatter

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# GitHub allows 60 unauthenticated requests per hour per address; one poll a
# minute stays below that with a single watched repository and some buffer.
UNAUTHENTICATED_POLL_FLOOR_SECONDS = 60
AUTHENTICATED_POLL_FLOOR_SECONDS = 10


class AgentConfig(BaseSettings):
    """Build agent configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export IMAGESMITH_LOG_LEVEL=DEBUG
        export IMAGESMITH_STATE_DB_PATH=/data/state.db
        export IMAGESMITH_WATCHED_REPOS='["octo/app"]'

    Or via .env file::

        IMAGESMITH_REGISTRY_URL=registry.example.com
        IMAGESMITH_TAG_TEMPLATE={registry}/{owner}/{name}:latest
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="IMAGESMITH_",
        env_file_encoding="utf-8",
    )

    log_level: str = "INFO"

    # Storage paths
    state_db_path: Path = Path(".imagesmith/state.db")
    workspace_path: Path = Path(".imagesmith/workspace")
    event_log_path: Path | None = None

    # Polling
    poll_interval_seconds: float = 60.0
    watched_repos: list[str] = []

    # Source host
    github_api_url: str = "https://api.github.com"
    github_clone_host: str = "github.com"
    github_token: str = ""

    # Registry
    registry_url: str = ""
    registry_username: str = ""
    registry_password: str = ""
    tag_template: str = "{owner}/{name}:{short_commit}"

    # Notifications
    console_notifications: bool = True
    chat_webhook_url: str = ""
    success_webhook_url: str = ""

    # Build behaviour
    keep_failed_clones: bool = False
    command_timeout_seconds: int = 900
    http_timeout_seconds: float = 30.0

    @field_validator("watched_repos")
    @classmethod
    def _check_repo_entries(cls, value: list[str]) -> list[str]:
        for entry in value:
            owner, sep, name = entry.partition("/")
            if not sep or not owner or not name or "/" in name:
                raise ValueError(
                    f"Watched repository {entry!r} must look like 'owner/name'"
                )
        return value

    @field_validator("tag_template")
    @classmethod
    def _check_tag_template(cls, value: str) -> str:
        try:
            value.format(owner="o", name="n", commit="c", short_commit="c", registry="r")
        except (KeyError, IndexError, ValueError) as exc:
            raise ValueError(f"Invalid tag_template {value!r}: {exc}") from exc
        return value

    @model_validator(mode="after")
    def _check_poll_floor(self) -> AgentConfig:
        floor = (
            AUTHENTICATED_POLL_FLOOR_SECONDS
            if self.github_token
            else UNAUTHENTICATED_POLL_FLOOR_SECONDS
        )
        if self.poll_interval_seconds < floor:
            raise ValueError(
                f"poll_interval_seconds={self.poll_interval_seconds} is below the "
                f"{floor}s floor for {'authenticated' if self.github_token else 'unauthenticated'} "
                "polling of the source host"
            )
        return self

    @model_validator(mode="after")
    def _check_registry_in_template(self) -> AgentConfig:
        fields = {field for _, field, _, _ in Formatter().parse(self.tag_template) if field}
        if "registry" in fields and not self.registry_url:
            raise ValueError(
                f"tag_template {self.tag_template!r} uses {{registry}} but registry_url is empty"
            )
        return self

    @property
    def registry_auth_configured(self) -> bool:
        """Whether registry credentials were provided."""
        return bool(self.registry_username and self.registry_password)
