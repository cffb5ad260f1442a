"""Wiring of the build agent from ``AgentConfig``.

Builds the notifier set, the production collaborators and the
``Orchestrator``, and runs the startup checks (registry login, source-host
reachability, state store, chat webhook greeting).
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict
from rich.console import Console

from imagesmith.build.git import GitCloner
from imagesmith.build.images import DockerPublisher
from imagesmith.config import AgentConfig
from imagesmith.core.orchestrator import Orchestrator
from imagesmith.core.pipeline import BuildPipeline
from imagesmith.core.state_store import BuildStateStore
from imagesmith.notify.dispatcher import NotificationDispatcher
from imagesmith.notify.sinks import (
    ChatWebhookNotifier,
    ConsoleNotifier,
    LocalFileNotifier,
    SuccessWebhookNotifier,
)
from imagesmith.sources.github import GitHubChangeSource

logger = logging.getLogger(__name__)


class Agent(BaseModel):
    """The assembled agent and the collaborators the startup checks need."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    config: AgentConfig
    orchestrator: Orchestrator
    source: GitHubChangeSource
    publisher: DockerPublisher
    dispatcher: NotificationDispatcher


def build_dispatcher(config: AgentConfig, console: Console | None = None) -> NotificationDispatcher:
    """Register every notifier the configuration enables."""
    dispatcher = NotificationDispatcher()
    if config.console_notifications:
        dispatcher.register(ConsoleNotifier(console))
    if config.chat_webhook_url:
        dispatcher.register(
            ChatWebhookNotifier(config.chat_webhook_url, timeout=config.http_timeout_seconds)
        )
    if config.success_webhook_url:
        dispatcher.register(
            SuccessWebhookNotifier(config.success_webhook_url, timeout=config.http_timeout_seconds)
        )
    if config.event_log_path is not None:
        dispatcher.register(LocalFileNotifier(config.event_log_path))
    return dispatcher


def build_agent(config: AgentConfig, console: Console | None = None) -> Agent:
    dispatcher = build_dispatcher(config, console)
    source = GitHubChangeSource(
        config.watched_repos,
        config.tag_template,
        api_url=config.github_api_url,
        token=config.github_token,
        registry=config.registry_url,
        timeout=config.http_timeout_seconds,
    )
    publisher = DockerPublisher(
        registry=config.registry_url,
        username=config.registry_username,
        password=config.registry_password,
    )
    cloner = GitCloner(
        host=config.github_clone_host,
        token=config.github_token,
        timeout=config.command_timeout_seconds,
    )
    pipeline = BuildPipeline(
        cloner,
        publisher,
        dispatcher,
        keep_failed_clones=config.keep_failed_clones,
    )
    orchestrator = Orchestrator(
        source,
        BuildStateStore(config.state_db_path),
        pipeline,
        dispatcher,
        workspace=config.workspace_path,
        poll_interval=config.poll_interval_seconds,
    )
    return Agent(
        config=config,
        orchestrator=orchestrator,
        source=source,
        publisher=publisher,
        dispatcher=dispatcher,
    )


def startup_checks(agent: Agent) -> None:
    """Fail fast on configuration problems before the first poll.

    Raises whatever the failing collaborator raises.
    """
    logger.info("Checking registry credentials")
    agent.publisher.login()

    logger.info("Checking source host")
    agent.source.ensure_config()

    logger.info("Initializing state store")
    agent.orchestrator.store.ensure_exists()

    for notifier in agent.dispatcher.registered:
        if isinstance(notifier, ChatWebhookNotifier):
            logger.info("Checking chat webhook")
            notifier.hello()
