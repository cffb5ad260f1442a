"""Tests for AgentConfig — env-driven settings."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from imagesmith.config import AgentConfig


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path: Path):
    """Keep a developer's .env or IMAGESMITH_* variables out of these tests."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("IMAGESMITH_"):
            monkeypatch.delenv(key)


class TestAgentConfig:
    def test_defaults(self):
        config = AgentConfig()
        assert config.log_level == "INFO"
        assert config.poll_interval_seconds == 60.0
        assert config.watched_repos == []
        assert config.console_notifications is True
        assert config.keep_failed_clones is False

    def test_default_paths(self):
        config = AgentConfig()
        assert config.state_db_path == Path(".imagesmith/state.db")
        assert config.workspace_path == Path(".imagesmith/workspace")
        assert config.event_log_path is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("IMAGESMITH_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("IMAGESMITH_WATCHED_REPOS", '["octo/app", "octo/api"]')
        config = AgentConfig()
        assert config.log_level == "DEBUG"
        assert config.watched_repos == ["octo/app", "octo/api"]

    def test_dotenv_file_read(self, tmp_path: Path):
        (tmp_path / ".env").write_text("IMAGESMITH_REGISTRY_URL=reg.example.com\n")
        assert AgentConfig().registry_url == "reg.example.com"

    @pytest.mark.parametrize("entry", ["noslash", "/name", "owner/", "a/b/c"])
    def test_bad_watch_entries_rejected(self, entry):
        with pytest.raises(ValidationError, match="owner/name"):
            AgentConfig(watched_repos=[entry])

    def test_unauthenticated_poll_floor(self):
        with pytest.raises(ValidationError, match="floor"):
            AgentConfig(poll_interval_seconds=30)

    def test_token_lowers_poll_floor(self):
        config = AgentConfig(poll_interval_seconds=30, github_token="t")
        assert config.poll_interval_seconds == 30

    def test_authenticated_floor_still_enforced(self):
        with pytest.raises(ValidationError, match="floor"):
            AgentConfig(poll_interval_seconds=1, github_token="t")

    def test_bad_tag_template_rejected(self):
        with pytest.raises(ValidationError, match="tag_template"):
            AgentConfig(tag_template="{owner}/{repo}:latest")

    def test_registry_field_needs_registry_url(self):
        with pytest.raises(ValidationError, match="registry_url"):
            AgentConfig(tag_template="{registry}/{owner}/{name}:latest")

    def test_registry_field_with_registry_url(self):
        config = AgentConfig(
            tag_template="{registry}/{owner}/{name}:latest", registry_url="reg.io"
        )
        assert config.registry_url == "reg.io"

    def test_registry_auth_configured(self):
        assert AgentConfig().registry_auth_configured is False
        assert AgentConfig(registry_username="u", registry_password="p").registry_auth_configured
