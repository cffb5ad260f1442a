"""Notification backends.  Each one satisfies the ``Notifier`` protocol."""

from imagesmith.notify.sinks.chat_webhook import ChatWebhookNotifier
from imagesmith.notify.sinks.console import ConsoleNotifier
from imagesmith.notify.sinks.local_file import LocalFileNotifier
from imagesmith.notify.sinks.success_webhook import SuccessWebhookNotifier

__all__ = [
    "ChatWebhookNotifier",
    "ConsoleNotifier",
    "LocalFileNotifier",
    "SuccessWebhookNotifier",
]
