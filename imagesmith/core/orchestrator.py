"""Poll loop — the central coordinator of the build agent.

Each iteration asks the change source for the current candidates, keeps
those whose commit differs from the state store, and builds them one at a
time in the order the source returned them.  State is written only after a
pipeline run succeeds, so a failed candidate is simply offered again on the
next poll.

A ``ChangeSourceError`` skips the cycle.  A ``StoreError`` ends ``run()``:
without reliable state the agent cannot tell what it already built.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from imagesmith.core.build_slot import BuildSlot
from imagesmith.core.pipeline import BuildPipeline
from imagesmith.core.state_store import BuildStateStore
from imagesmith.models.candidates import WatchCandidate
from imagesmith.models.outcomes import CycleReport, OutcomeStatus
from imagesmith.notify.dispatcher import NotificationDispatcher
from imagesmith.sources import ChangeSource, ChangeSourceError

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 60.0


class Orchestrator:
    """Owns the poll loop, the state store writes and the build slot.

    Parameters
    ----------
    source:
        Produces the candidate list each cycle.
    store:
        Persisted last-built commit per repository.
    pipeline:
        Builds one candidate.
    notifier:
        Receives cycle-level status lines.
    workspace:
        Root of the per-repository working directories.
    poll_interval:
        Seconds between iterations.
    """

    def __init__(
        self,
        source: ChangeSource,
        store: BuildStateStore,
        pipeline: BuildPipeline,
        notifier: NotificationDispatcher,
        *,
        workspace: Path,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self.source = source
        self.store = store
        self.pipeline = pipeline
        self.notifier = notifier
        self.poll_interval = poll_interval

        self._stop_event = threading.Event()
        self.slot = BuildSlot(workspace, self._stop_event)
        self._store_ready = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Poll until ``stop()`` is called.

        The stop signal is honoured before each candidate, between pipeline
        stages and during the sleep.
        """
        logger.info("Build agent loop started (poll every %ss)", self.poll_interval)
        while not self._stop_event.is_set():
            self.run_once()
            if self._stop_event.wait(self.poll_interval):
                break
        logger.info("Build agent loop stopped")

    def stop(self) -> None:
        """Ask the loop to finish after the current stage."""
        if not self._stop_event.is_set():
            logger.info("Stop requested")
        self._stop_event.set()

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    # ------------------------------------------------------------------
    # One iteration
    # ------------------------------------------------------------------

    def _ensure_store(self) -> None:
        if not self._store_ready:
            self.store.ensure_exists()
            self._store_ready = True

    def fetch_candidates(self) -> list[WatchCandidate]:
        """Return the source's candidates; a source error is raised as-is."""
        logger.info("Checking watched repositories...")
        return list(self.source.list_watched())

    def pending(self, candidates: list[WatchCandidate]) -> list[WatchCandidate]:
        """Keep candidates whose commit differs from the stored one, in order."""
        return [c for c in candidates if self.store.is_newer_than_stored(c)]

    def run_once(self) -> CycleReport:
        """Run one poll iteration and return what happened."""
        self._ensure_store()

        try:
            candidates = self.fetch_candidates()
        except ChangeSourceError as exc:
            logger.error("Change source failed; skipping this cycle: %s", exc)
            self.notifier.error(f"Could not list watched repositories: {exc}")
            return CycleReport(source_error=str(exc))

        pending = self.pending(candidates)
        logger.info("%d of %d repositories have new commits", len(pending), len(candidates))

        succeeded: list[str] = []
        failed: list[str] = []
        cancelled: list[str] = []

        for candidate in pending:
            if self._stop_event.is_set():
                cancelled.append(candidate.display_name)
                continue

            outcome = self.pipeline.build(candidate, self.slot)

            if outcome.succeeded:
                self.store.record_success(candidate.repository_key, candidate.commit_id)
                succeeded.append(candidate.display_name)
            elif outcome.status == OutcomeStatus.CANCELLED:
                cancelled.append(candidate.display_name)
            else:
                logger.warning(
                    "%s failed at %s; will retry on the next poll",
                    candidate.display_name,
                    outcome.stage.value if outcome.stage else "?",
                )
                failed.append(candidate.display_name)

        return CycleReport(
            candidates_seen=len(candidates),
            candidates_pending=len(pending),
            succeeded=succeeded,
            failed=failed,
            cancelled=cancelled,
        )
