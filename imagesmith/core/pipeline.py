"""Build pipeline — clone, build and publish one candidate.

Stages run strictly in order and short-circuit on failure:

1. clone   : shallow clone into the candidate's working directory
2. build   : build the image from the repository's Dockerfile
3. publish : push the image under the candidate's tag

Each stage error becomes a failed ``PipelineOutcome`` plus an error status
line; nothing is retried here, the next poll retries the candidate.  The
pipeline never touches the state store.

Working directory policy:
- success: removed
- clone failure: removed unless ``keep_failed_clones`` is set
- build/publish failure: kept for inspection, removed before the next
  attempt for the same repository
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from imagesmith.build import CloneError, Cloner, ImagePublisher, PublishError
from imagesmith.core.build_slot import BuildSlot
from imagesmith.models.candidates import WatchCandidate
from imagesmith.models.outcomes import PipelineOutcome, PipelineStage
from imagesmith.notify.dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


class BuildPipeline:
    """Runs the clone -> build -> publish sequence for one candidate.

    Parameters
    ----------
    cloner:
        Fetches repository contents.
    publisher:
        Builds and pushes images.
    notifier:
        Receives status lines and the success event.
    keep_failed_clones:
        Leave partial clones on disk after a clone failure.
    """

    def __init__(
        self,
        cloner: Cloner,
        publisher: ImagePublisher,
        notifier: NotificationDispatcher,
        *,
        keep_failed_clones: bool = False,
    ) -> None:
        self._cloner = cloner
        self._publisher = publisher
        self._notifier = notifier
        self._keep_failed_clones = keep_failed_clones

    def build(self, candidate: WatchCandidate, slot: BuildSlot) -> PipelineOutcome:
        """Build and publish *candidate* while holding *slot*."""
        with slot.acquire(candidate) as workdir:
            self._notifier.info(
                f"Going on {candidate.display_name} at {candidate.commit_id[:12]}!"
            )

            outcome = self._clone(candidate, workdir)
            if outcome is not None:
                return outcome

            if slot.stop_requested:
                logger.info("Stop requested; leaving %s after clone", candidate.display_name)
                self._notifier.info(
                    f"Stopped before building {candidate.display_name}; will retry next run"
                )
                self._remove_workdir(workdir)
                return PipelineOutcome.cancelled(candidate, PipelineStage.BUILD)

            outcome = self._publish(candidate, workdir)
            if outcome is not None:
                return outcome

            self._notifier.info(
                f"**[SUCCESS]** Built image {candidate.publish_tag} successfully"
            )
            self._notifier.success(candidate)
            self._remove_workdir(workdir)
            return PipelineOutcome.success(candidate)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _clone(self, candidate: WatchCandidate, workdir: Path) -> PipelineOutcome | None:
        try:
            self._prepare_workdir(workdir)
            self._cloner.clone(candidate.owner, candidate.name, workdir)
        except CloneError as exc:
            logger.error("Clone of %s failed: %s", candidate.display_name, exc)
            self._notifier.error(f"Could not clone {candidate.display_name}: {exc}")
            if not self._keep_failed_clones:
                self._remove_workdir(workdir)
            return PipelineOutcome.failure(candidate, PipelineStage.CLONE, str(exc))
        return None

    def _publish(self, candidate: WatchCandidate, workdir: Path) -> PipelineOutcome | None:
        try:
            self._publisher.build_and_push(workdir, candidate.publish_tag)
        except PublishError as exc:
            verb = "build" if exc.stage == PipelineStage.BUILD else "push"
            logger.error(
                "%s of %s failed; keeping %s", verb.title(), candidate.publish_tag, workdir
            )
            self._notifier.error(f"Could not {verb} image {candidate.publish_tag}: {exc}")
            return PipelineOutcome.failure(candidate, exc.stage, str(exc))
        return None

    # ------------------------------------------------------------------
    # Working directory
    # ------------------------------------------------------------------

    @staticmethod
    def _prepare_workdir(workdir: Path) -> None:
        """Make sure *workdir* is absent and its parent exists."""
        try:
            if workdir.exists():
                logger.warning("Removing leftover working directory %s", workdir)
                shutil.rmtree(workdir)
            workdir.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CloneError(f"cannot prepare {workdir}: {exc}") from exc

    @staticmethod
    def _remove_workdir(workdir: Path) -> None:
        if not workdir.exists():
            return
        try:
            shutil.rmtree(workdir)
        except OSError as exc:
            logger.warning("Could not remove %s: %s", workdir, exc)
