"""Watch candidates and the keys of persisted build records."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class RepositoryKey(BaseModel):
    """Identifies one watched repository in the state store."""

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


class WatchCandidate(BaseModel):
    """A watched repository paired with its current remote tip for one poll.

    Produced fresh by the change source every cycle and never persisted.
    """

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str
    commit_id: str  # opaque, e.g. a git sha
    publish_tag: str

    @property
    def repository_key(self) -> RepositoryKey:
        return RepositoryKey(owner=self.owner, name=self.name)

    @property
    def display_name(self) -> str:
        return f"{self.owner}/{self.name}"


class BuildRecord(BaseModel):
    """Last successfully built commit for a repository."""

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str
    commit_id: str
    recorded_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def repository_key(self) -> RepositoryKey:
        return RepositoryKey(owner=self.owner, name=self.name)
