"""Single-flight build slot.

The orchestrator owns exactly one ``BuildSlot`` and hands it to the pipeline
for every run.  The slot holds the candidate currently being built and its
working directory; acquiring it while it is held raises, so two builds can
never overlap.  It also carries the stop signal checked between stages.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from imagesmith.models.candidates import WatchCandidate


class SlotBusyError(RuntimeError):
    """Raised when a second build tries to start while one is in flight."""


class BuildSlot:
    """Ownership token for the single in-flight build.

    Parameters
    ----------
    workspace:
        Directory under which per-repository working directories live.
    stop_event:
        Set when the agent is asked to stop.  A private event is created if
        not provided.
    """

    def __init__(self, workspace: Path, stop_event: threading.Event | None = None) -> None:
        self._workspace = Path(workspace)
        self._stop_event = stop_event or threading.Event()
        self._holder: WatchCandidate | None = None

    @property
    def workspace(self) -> Path:
        return self._workspace

    @property
    def holder(self) -> WatchCandidate | None:
        """The candidate being built, or None when the slot is free."""
        return self._holder

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def workdir_for(self, candidate: WatchCandidate) -> Path:
        """Deterministic working directory for a repository."""
        return self._workspace / f"{candidate.owner}__{candidate.name}"

    @contextmanager
    def acquire(self, candidate: WatchCandidate) -> Iterator[Path]:
        """Hold the slot for *candidate* and yield its working directory."""
        if self._holder is not None:
            raise SlotBusyError(
                f"Cannot build {candidate.display_name}: "
                f"{self._holder.display_name} is still in flight"
            )
        self._holder = candidate
        try:
            yield self.workdir_for(candidate)
        finally:
            self._holder = None
