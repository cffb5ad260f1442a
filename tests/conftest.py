"""Shared test fixtures and fakes for Imagesmith."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from imagesmith.build import CloneError, PublishError
from imagesmith.core.orchestrator import Orchestrator
from imagesmith.core.pipeline import BuildPipeline
from imagesmith.core.state_store import BuildStateStore
from imagesmith.models.candidates import WatchCandidate
from imagesmith.models.notifications import (
    BuildSucceededEvent,
    Notification,
    Severity,
    StatusLine,
)
from imagesmith.models.outcomes import PipelineStage
from imagesmith.notify.dispatcher import NotificationDispatcher
from imagesmith.sources import ChangeSourceError


# ---------------------------------------------------------------------------
# Fakes for the external collaborators
# ---------------------------------------------------------------------------


class FakeSource:
    """Change source returning a scripted list, or raising."""

    def __init__(self, candidates: list[WatchCandidate] | None = None) -> None:
        self.candidates = list(candidates or [])
        self.error: str | None = None
        self.calls = 0

    def list_watched(self) -> list[WatchCandidate]:
        self.calls += 1
        if self.error:
            raise ChangeSourceError(self.error)
        return list(self.candidates)


class FakeCloner:
    """Creates the destination with a Dockerfile, or fails for chosen repos."""

    def __init__(self) -> None:
        self.fail_for: set[str] = set()
        self.calls: list[tuple[str, str, Path]] = []

    def clone(self, owner: str, name: str, dest: Path) -> None:
        self.calls.append((owner, name, dest))
        dest.mkdir(parents=True)
        if f"{owner}/{name}" in self.fail_for:
            (dest / "partial").write_text("half a clone")
            raise CloneError(f"could not resolve host for {owner}/{name}")
        (dest / "Dockerfile").write_text("FROM scratch\n")


class FakePublisher:
    """Records build requests; fails for chosen tags at a chosen stage."""

    def __init__(self) -> None:
        self.fail_for: dict[str, PipelineStage] = {}
        self.calls: list[tuple[Path, str]] = []

    def build_and_push(self, source_dir: Path, tag: str) -> str:
        self.calls.append((source_dir, tag))
        assert (source_dir / "Dockerfile").exists()
        if tag in self.fail_for:
            stage = self.fail_for[tag]
            raise PublishError(f"{stage.value} exploded for {tag}", stage=stage)
        return f"sha256:{tag}"


class RecordingNotifier:
    """Keeps every notification it receives."""

    def __init__(self, name: str = "recording") -> None:
        self._name = name
        self.received: list[Notification] = []

    @property
    def sink_name(self) -> str:
        return self._name

    def accept(self, notification: Notification) -> None:
        self.received.append(notification)

    def lines(self, severity: Severity | None = None) -> list[str]:
        return [
            n.text
            for n in self.received
            if isinstance(n, StatusLine) and (severity is None or n.severity == severity)
        ]

    def successes(self) -> list[BuildSucceededEvent]:
        return [n for n in self.received if isinstance(n, BuildSucceededEvent)]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def store(tmp_dir: Path) -> BuildStateStore:
    """Provide an initialized BuildStateStore backed by a temp SQLite database."""
    s = BuildStateStore(tmp_dir / "state" / "state.db")
    s.ensure_exists()
    return s


@pytest.fixture
def workspace(tmp_dir: Path) -> Path:
    return tmp_dir / "workspace"


@pytest.fixture
def make_candidate() -> Callable[..., WatchCandidate]:
    """Factory fixture: build a WatchCandidate with sensible defaults."""

    def _factory(
        owner: str = "a",
        name: str = "b",
        commit_id: str = "c1",
        **overrides: Any,
    ) -> WatchCandidate:
        defaults: dict[str, Any] = {
            "owner": owner,
            "name": name,
            "commit_id": commit_id,
            "publish_tag": f"{owner}/{name}:{commit_id}",
        }
        defaults.update(overrides)
        return WatchCandidate(**defaults)

    return _factory


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def cloner() -> FakeCloner:
    return FakeCloner()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def recorder() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def dispatcher(recorder: RecordingNotifier) -> NotificationDispatcher:
    d = NotificationDispatcher()
    d.register(recorder)
    return d


@pytest.fixture
def pipeline(
    cloner: FakeCloner, publisher: FakePublisher, dispatcher: NotificationDispatcher
) -> BuildPipeline:
    return BuildPipeline(cloner, publisher, dispatcher)


@pytest.fixture
def orchestrator(
    source: FakeSource,
    store: BuildStateStore,
    pipeline: BuildPipeline,
    dispatcher: NotificationDispatcher,
    workspace: Path,
) -> Orchestrator:
    return Orchestrator(
        source, store, pipeline, dispatcher, workspace=workspace, poll_interval=60
    )
