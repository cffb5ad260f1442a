"""NotificationDispatcher — routes notifications to ALL configured notifiers.

Every notification is fanned out to every registered notifier.  Failures are
logged and discarded so that a broken webhook can never fail a build.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from imagesmith.models.candidates import WatchCandidate
from imagesmith.models.notifications import (
    BuildSucceededEvent,
    Notification,
    Severity,
    StatusLine,
)

if TYPE_CHECKING:
    from imagesmith.notify import Notifier

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Routes notifications to every configured notifier.

    Usage
    -----
    >>> dispatcher = NotificationDispatcher()
    >>> dispatcher.register(ConsoleNotifier())
    >>> dispatcher.info("Checking repositories...")
    """

    def __init__(self) -> None:
        self._notifiers: list[Notifier] = []

    # ------------------------------------------------------------------
    # Notifier management
    # ------------------------------------------------------------------

    def register(self, notifier: Notifier) -> None:
        """Register a notifier.  Registering the same instance twice is ignored."""
        if notifier not in self._notifiers:
            self._notifiers.append(notifier)
            logger.info("Registered notifier: %s", notifier.sink_name)

    def unregister(self, notifier: Notifier) -> None:
        """Remove a previously registered notifier."""
        try:
            self._notifiers.remove(notifier)
        except ValueError:
            pass

    @property
    def registered(self) -> list[Notifier]:
        """Return a copy of the registered notifier list."""
        return list(self._notifiers)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, notification: Notification) -> list[str]:
        """Deliver *notification* to every notifier.

        Returns the names of the notifiers that accepted it.  Never raises
        for delivery errors.
        """
        if not self._notifiers:
            logger.debug(
                "No notifiers registered; %s %s dropped",
                notification.kind.value,
                notification.notification_id,
            )
            return []

        delivered: list[str] = []
        for notifier in self._notifiers:
            try:
                notifier.accept(notification)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Notifier %s failed for %s: %s",
                    notifier.sink_name,
                    notification.notification_id,
                    exc,
                )
                continue
            delivered.append(notifier.sink_name)

        if len(delivered) < len(self._notifiers):
            logger.warning(
                "Notification %s: %d/%d notifiers succeeded",
                notification.notification_id,
                len(delivered),
                len(self._notifiers),
            )
        return delivered

    # ------------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------------

    def info(self, text: str) -> list[str]:
        return self.dispatch(StatusLine(severity=Severity.INFO, text=text))

    def error(self, text: str) -> list[str]:
        return self.dispatch(StatusLine(severity=Severity.ERROR, text=text))

    def success(self, candidate: WatchCandidate) -> list[str]:
        """Emit the structured success event for a built candidate."""
        return self.dispatch(
            BuildSucceededEvent(
                repository_name=candidate.name,
                repository_owner=candidate.owner,
                publish_tag=candidate.publish_tag,
                commit_id=candidate.commit_id,
            )
        )
