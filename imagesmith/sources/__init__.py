"""Change sources: where the agent learns each watched repository's tip."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from imagesmith.models.candidates import WatchCandidate


class ChangeSourceError(RuntimeError):
    """Raised when the watched-repository list cannot be produced this cycle."""


@runtime_checkable
class ChangeSource(Protocol):
    """Produces the current candidates, one per watched repository."""

    def list_watched(self) -> list[WatchCandidate]:
        """Return a fresh candidate list.

        Raises ``ChangeSourceError`` on network, auth or rate-limit errors.
        """
        ...


def render_tag(template: str, owner: str, name: str, commit_id: str, registry: str = "") -> str:
    """Fill a publish-tag template.

    Available fields: ``owner``, ``name`` (both lowercased, as image
    repositories must be), ``commit``, ``short_commit`` and ``registry``.

    >>> render_tag("{owner}/{name}:{short_commit}", "Octo", "App", "0123456789abcdef")
    'octo/app:0123456789ab'
    """
    return template.format(
        owner=owner.lower(),
        name=name.lower(),
        commit=commit_id,
        short_commit=commit_id[:12],
        registry=registry,
    )
