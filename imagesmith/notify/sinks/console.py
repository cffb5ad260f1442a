"""Console notifier — prints status lines to the terminal with Rich."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from imagesmith.models.notifications import (
    BuildSucceededEvent,
    Notification,
    Severity,
)

_SEVERITY_STYLES: dict[Severity, str] = {
    Severity.INFO: "cyan",
    Severity.ERROR: "bold red",
}


class ConsoleNotifier:
    """Prints every notification to a Rich console.

    Parameters
    ----------
    console:
        Rich Console instance.  A new stderr console is created if not given.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    @property
    def sink_name(self) -> str:
        return "console"

    def accept(self, notification: Notification) -> None:
        stamp = notification.timestamp_utc.strftime("%H:%M:%S")
        if isinstance(notification, BuildSucceededEvent):
            self.console.print(
                f"[dim]{stamp}[/dim] [bold green]BUILT[/bold green] "
                f"{escape(notification.repository_owner)}/{escape(notification.repository_name)}"
                f" -> {escape(notification.publish_tag)}"
            )
            return
        style = _SEVERITY_STYLES[notification.severity]
        label = notification.severity.value.upper()
        self.console.print(
            f"[dim]{stamp}[/dim] [{style}]{label}[/{style}] {escape(notification.text)}"
        )
