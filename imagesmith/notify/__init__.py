"""Build notifications — fans status lines and success events out to sinks.

Notifiers are pluggable targets: the terminal, a chat webhook, a success
webhook, or a local JSON-lines log.  Delivery is fire-and-forget: a
notifier failure is logged and never reaches the build pipeline.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from imagesmith.models.notifications import Notification


@runtime_checkable
class Notifier(Protocol):
    """Protocol that every notification backend implements.

    Attributes
    ----------
    sink_name : str
        A unique human-readable identifier for this notifier instance
        (e.g. ``"console"``, ``"chat_webhook"``).
    """

    @property
    def sink_name(self) -> str:
        """Return the unique name of this notifier."""
        ...

    def accept(self, notification: Notification) -> None:
        """Deliver one notification.

        Implementations may raise; the dispatcher logs the error and moves
        on to the next notifier.
        """
        ...
