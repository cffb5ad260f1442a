"""Imagesmith data models — all Pydantic v2, all frozen (immutable)."""

from imagesmith.models.candidates import BuildRecord, RepositoryKey, WatchCandidate
from imagesmith.models.notifications import (
    BuildSucceededEvent,
    Notification,
    NotificationBase,
    NotificationKind,
    Severity,
    StatusLine,
)
from imagesmith.models.outcomes import (
    CycleReport,
    OutcomeStatus,
    PipelineOutcome,
    PipelineStage,
)

__all__ = [
    # candidates
    "RepositoryKey",
    "WatchCandidate",
    "BuildRecord",
    # outcomes
    "PipelineStage",
    "OutcomeStatus",
    "PipelineOutcome",
    "CycleReport",
    # notifications
    "NotificationKind",
    "Severity",
    "NotificationBase",
    "StatusLine",
    "BuildSucceededEvent",
    "Notification",
]
