"""Notification models delivered to every configured notifier.

Two shapes exist: a free-text ``StatusLine`` with a severity, and the
structured ``BuildSucceededEvent`` consumed by success webhooks.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class NotificationKind(str, Enum):
    STATUS_LINE = "status_line"
    BUILD_SUCCEEDED = "build_succeeded"


class Severity(str, Enum):
    INFO = "info"
    ERROR = "error"


class NotificationBase(BaseModel):
    """Fields shared by all notifications."""

    model_config = ConfigDict(frozen=True)

    notification_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    kind: NotificationKind


class StatusLine(NotificationBase):
    """A human-readable status line."""

    kind: NotificationKind = NotificationKind.STATUS_LINE
    severity: Severity = Severity.INFO
    text: str


class BuildSucceededEvent(NotificationBase):
    """Emitted once an image has been pushed for a candidate."""

    kind: NotificationKind = NotificationKind.BUILD_SUCCEEDED
    repository_name: str
    repository_owner: str
    publish_tag: str = ""
    commit_id: str = ""


Notification = StatusLine | BuildSucceededEvent
