"""Local file notifier — appends notifications to a JSON-lines log.

Layout: ``{base_path}/{YYYY-MM-DD}.jsonl``, one notification per line.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from imagesmith.models.notifications import Notification

logger = logging.getLogger(__name__)


class LocalFileNotifier:
    """Appends every notification to a daily JSON-lines file.

    Parameters
    ----------
    base_path:
        Directory for event files.  Defaults to ``.imagesmith/events``.
    """

    def __init__(self, base_path: Path | str | None = None) -> None:
        self._base = Path(base_path) if base_path else Path(".imagesmith/events")
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def sink_name(self) -> str:
        return "local_file"

    def accept(self, notification: Notification) -> None:
        target = self._base / f"{notification.timestamp_utc.date().isoformat()}.jsonl"
        line = json.dumps(notification.model_dump(mode="json"), sort_keys=True)
        with target.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")
        logger.debug("LocalFileNotifier: wrote %s to %s", notification.notification_id, target)

    def list_files(self) -> list[Path]:
        return sorted(self._base.glob("*.jsonl"))

    def read_events(self, path: Path) -> list[dict]:
        """Read and parse every notification in one log file."""
        with path.open(encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]
