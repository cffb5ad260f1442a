"""Last-built commit per repository, backed by SQLite.

The orchestrator is the only writer.  A commit id is written only after the
pipeline for it has succeeded; if the process dies in between, the commit is
simply built again on restart (at-least-once).

Design:
- One row per (owner, name); ``record_success`` is an upsert.
- Nothing is ever deleted here.
- WAL journal mode so ``imagesmith status`` can read while the agent runs.
- Every sqlite error surfaces as ``StoreError``.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from imagesmith.models.candidates import BuildRecord, RepositoryKey, WatchCandidate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_RECORDS = """
CREATE TABLE IF NOT EXISTS build_records (
    owner        TEXT NOT NULL,
    name         TEXT NOT NULL,
    commit_id    TEXT NOT NULL,
    recorded_at  TEXT NOT NULL,
    PRIMARY KEY (owner, name)
);
"""


class StoreError(RuntimeError):
    """Raised when the state store cannot be read or written."""


def is_newer_than_record(record: BuildRecord | None, candidate: WatchCandidate) -> bool:
    """Decide whether *candidate* still needs a build.

    The change source always reports the current tip, so any commit id that
    differs from the recorded one counts as newer.  No record means the
    repository was never built.
    """
    if record is None:
        return True
    return record.commit_id != candidate.commit_id


class BuildStateStore:
    """Durable mapping of ``(owner, name)`` to the last built commit id.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.  Created by ``ensure_exists()``.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(str(self._db_path))
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open state store {self._db_path}: {exc}") from exc
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise StoreError(f"State store {self._db_path} failed: {exc}") from exc
        finally:
            conn.close()

    def ensure_exists(self) -> None:
        """Create the database file and schema if they are missing."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(
                f"Cannot create state directory {self._db_path.parent}: {exc}"
            ) from exc
        with self._connect() as conn:
            conn.execute(_CREATE_RECORDS)
        logger.info("State store ready at %s", self._db_path)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_record(self, key: RepositoryKey) -> BuildRecord | None:
        """Return the build record for *key*, or None if never built."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT owner, name, commit_id, recorded_at FROM build_records "
                "WHERE owner = ? AND name = ?",
                (key.owner, key.name),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def list_records(self) -> list[BuildRecord]:
        """Return every build record, ordered by repository."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT owner, name, commit_id, recorded_at FROM build_records "
                "ORDER BY owner, name"
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def is_newer_than_stored(self, candidate: WatchCandidate) -> bool:
        """Whether *candidate* differs from what was last built."""
        return is_newer_than_record(self.get_record(candidate.repository_key), candidate)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def record_success(self, key: RepositoryKey, commit_id: str) -> BuildRecord:
        """Record *commit_id* as the last built commit for *key*.

        Recording the value already stored leaves the row untouched,
        including its timestamp.
        """
        existing = self.get_record(key)
        if existing is not None and existing.commit_id == commit_id:
            return existing

        record = BuildRecord(owner=key.owner, name=key.name, commit_id=commit_id)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO build_records (owner, name, commit_id, recorded_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (owner, name) DO UPDATE SET
                    commit_id = excluded.commit_id,
                    recorded_at = excluded.recorded_at
                """,
                (
                    record.owner,
                    record.name,
                    record.commit_id,
                    record.recorded_at.isoformat(),
                ),
            )
        logger.info("Recorded %s at %s", key, commit_id)
        return record

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_record(row: tuple) -> BuildRecord:
        owner, name, commit_id, recorded_at = row
        return BuildRecord(
            owner=owner,
            name=name,
            commit_id=commit_id,
            recorded_at=datetime.fromisoformat(recorded_at).astimezone(timezone.utc),
        )
