"""Pipeline outcome and per-cycle report models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from imagesmith.models.candidates import WatchCandidate


class PipelineStage(str, Enum):
    """Stages of a single build run, in execution order."""

    CLONE = "clone"
    BUILD = "build"
    PUBLISH = "publish"


class OutcomeStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class PipelineOutcome(BaseModel):
    """Result of one pipeline run.  Never persisted.

    ``stage`` names where a failed or cancelled run stopped; it is ``None``
    on success.
    """

    model_config = ConfigDict(frozen=True)

    candidate: WatchCandidate
    status: OutcomeStatus
    stage: PipelineStage | None = None
    message: str = ""

    @classmethod
    def success(cls, candidate: WatchCandidate) -> PipelineOutcome:
        return cls(candidate=candidate, status=OutcomeStatus.SUCCEEDED)

    @classmethod
    def failure(
        cls, candidate: WatchCandidate, stage: PipelineStage, message: str
    ) -> PipelineOutcome:
        return cls(
            candidate=candidate,
            status=OutcomeStatus.FAILED,
            stage=stage,
            message=message,
        )

    @classmethod
    def cancelled(
        cls, candidate: WatchCandidate, stage: PipelineStage
    ) -> PipelineOutcome:
        return cls(
            candidate=candidate,
            status=OutcomeStatus.CANCELLED,
            stage=stage,
            message=f"stopped before {stage.value}",
        )

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCEEDED


class CycleReport(BaseModel):
    """Summary of one poll iteration."""

    model_config = ConfigDict(frozen=True)

    candidates_seen: int = 0
    candidates_pending: int = 0
    succeeded: list[str] = []
    failed: list[str] = []
    cancelled: list[str] = []
    source_error: str = ""
