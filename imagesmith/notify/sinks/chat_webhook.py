"""Chat webhook notifier — posts status lines to a Discord-compatible webhook.

The webhook receives ``{"content": "<SEVERITY> <text>"}``.  Structured
success events are left to the success webhook.
"""

from __future__ import annotations

import logging

import requests

from imagesmith.models.notifications import Notification, StatusLine
from imagesmith.notify.sinks._formatting import format_plain

logger = logging.getLogger(__name__)

# Discord rejects message content above 2000 characters.
MAX_CONTENT_LENGTH = 2000


class ChatWebhookError(RuntimeError):
    """Raised when the chat webhook rejects a message."""


class ChatWebhookNotifier:
    """Posts status lines to a chat webhook URL.

    Parameters
    ----------
    webhook_url:
        The full webhook URL including its token.
    timeout:
        HTTP timeout in seconds.
    session:
        Optional ``requests.Session`` (tests inject a fake).
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._url = webhook_url
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def sink_name(self) -> str:
        return "chat_webhook"

    def accept(self, notification: Notification) -> None:
        if not isinstance(notification, StatusLine):
            return
        self.post(format_plain(notification))

    def post(self, content: str) -> None:
        if len(content) > MAX_CONTENT_LENGTH:
            content = content[: MAX_CONTENT_LENGTH - 3] + "..."
        try:
            resp = self._session.post(
                self._url, json={"content": content}, timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise ChatWebhookError(f"chat webhook unreachable: {exc}") from exc
        if resp.status_code >= 400:
            raise ChatWebhookError(
                f"chat webhook -> {resp.status_code} {resp.text[:200]}"
            )

    def hello(self) -> None:
        """Post a startup line so a misconfigured webhook shows up at boot."""
        self.post("INFO Build agent started")
        logger.info("Chat webhook reachable")
