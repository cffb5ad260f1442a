"""Success webhook notifier — POSTs a JSON body for every pushed image."""

from __future__ import annotations

import logging

import requests

from imagesmith.models.notifications import BuildSucceededEvent, Notification

logger = logging.getLogger(__name__)


class SuccessWebhookError(RuntimeError):
    """Raised when the success webhook rejects an event."""


class SuccessWebhookNotifier:
    """Sends ``{"repositoryName": ..., "repositoryOwner": ...}`` on success.

    Status lines are ignored.
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
        return "success_webhook"

    @staticmethod
    def build_payload(event: BuildSucceededEvent) -> dict[str, str]:
        return {
            "repositoryName": event.repository_name,
            "repositoryOwner": event.repository_owner,
        }

    def accept(self, notification: Notification) -> None:
        if not isinstance(notification, BuildSucceededEvent):
            return
        try:
            resp = self._session.post(
                self._url, json=self.build_payload(notification), timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise SuccessWebhookError(f"success webhook unreachable: {exc}") from exc
        if resp.status_code >= 400:
            raise SuccessWebhookError(
                f"success webhook -> {resp.status_code} {resp.text[:200]}"
            )
        logger.debug(
            "Success webhook notified for %s/%s",
            notification.repository_owner,
            notification.repository_name,
        )
