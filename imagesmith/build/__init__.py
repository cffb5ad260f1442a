"""Build collaborators: repository cloning and image build/publish.

The pipeline depends only on the ``Cloner`` and ``ImagePublisher``
protocols and the errors they raise; ``GitCloner`` and ``DockerPublisher``
are the production implementations.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from imagesmith.models.outcomes import PipelineStage


class CloneError(RuntimeError):
    """Raised when a repository cannot be fetched."""


class PublishError(RuntimeError):
    """Raised when an image cannot be built or pushed.

    ``stage`` is ``PipelineStage.BUILD`` or ``PipelineStage.PUBLISH``.
    """

    def __init__(self, message: str, stage: PipelineStage = PipelineStage.PUBLISH) -> None:
        super().__init__(message)
        self.stage = stage


@runtime_checkable
class Cloner(Protocol):
    """Fetches a repository's default branch into a directory."""

    def clone(self, owner: str, name: str, dest: Path) -> None:
        """Clone ``owner/name`` into *dest*.

        Raises ``CloneError`` on failure.  *dest* must not exist yet.
        """
        ...


@runtime_checkable
class ImagePublisher(Protocol):
    """Builds an image from a source directory and pushes it."""

    def build_and_push(self, source_dir: Path, tag: str) -> str:
        """Build *source_dir* as *tag*, push it, and return the image id.

        Raises ``PublishError`` whose ``stage`` says whether the build or
        the push failed.
        """
        ...
