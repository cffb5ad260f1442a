"""Shared text formatting for notification backends."""

from __future__ import annotations

from imagesmith.models.notifications import (
    BuildSucceededEvent,
    Notification,
    StatusLine,
)


def severity_label(notification: Notification) -> str:
    """Return ``INFO`` or ``ERROR`` for status lines, ``INFO`` otherwise."""
    if isinstance(notification, StatusLine):
        return notification.severity.value.upper()
    return "INFO"


def format_plain(notification: Notification) -> str:
    """Render a notification as a single prefixed text line.

    Examples
    --------
    >>> from imagesmith.models.notifications import StatusLine, Severity
    >>> format_plain(StatusLine(severity=Severity.ERROR, text="boom"))
    'ERROR boom'
    """
    if isinstance(notification, BuildSucceededEvent):
        text = (
            f"{notification.repository_owner}/{notification.repository_name} "
            f"published as {notification.publish_tag or '(untagged)'}"
        )
    else:
        text = notification.text
    return f"{severity_label(notification)} {text}"
