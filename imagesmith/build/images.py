"""Image build, push and registry login through the Docker Engine API."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import docker
import requests
from docker.errors import BuildError, DockerException
from docker.utils import parse_repository_tag

from imagesmith.build import PublishError
from imagesmith.models.outcomes import PipelineStage

logger = logging.getLogger(__name__)


class RegistryLoginError(RuntimeError):
    """Raised when the registry rejects the configured credentials."""


class DockerPublisher:
    """Builds images from a repository's Dockerfile and pushes them.

    Parameters
    ----------
    client:
        A ``docker.DockerClient``.  Created from the environment on first
        use if not provided.
    registry:
        Registry server for ``login()``; empty means Docker Hub.
    username, password:
        Registry credentials.  Login is skipped when either is empty.
    """

    def __init__(
        self,
        client: Any = None,
        *,
        registry: str = "",
        username: str = "",
        password: str = "",
    ) -> None:
        self._client = client
        self._registry = registry
        self._username = username
        self._password = password

    @property
    def client(self) -> Any:
        if self._client is None:
            try:
                self._client = docker.from_env()
            except DockerException as exc:
                raise PublishError(
                    f"Docker daemon unavailable: {exc}", stage=PipelineStage.BUILD
                ) from exc
        return self._client

    def _auth_config(self) -> dict[str, str] | None:
        if not (self._username and self._password):
            return None
        return {"username": self._username, "password": self._password}

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def login(self) -> bool:
        """Authenticate against the registry once for the process lifetime.

        Returns False when no credentials are configured.
        """
        if self._auth_config() is None:
            logger.warning("No registry credentials configured; pushes are anonymous")
            return False
        try:
            self.client.login(
                username=self._username,
                password=self._password,
                registry=self._registry or None,
            )
        except (DockerException, requests.RequestException, PublishError) as exc:
            raise RegistryLoginError(
                f"Registry login to {self._registry or 'docker hub'} failed: {exc}"
            ) from exc
        logger.info("Logged in to %s as %s", self._registry or "docker hub", self._username)
        return True

    # ------------------------------------------------------------------
    # Build + push
    # ------------------------------------------------------------------

    def build_and_push(self, source_dir: Path, tag: str) -> str:
        image_id = self._build(source_dir, tag)
        self._push(tag)
        return image_id

    def _build(self, source_dir: Path, tag: str) -> str:
        try:
            image, _logs = self.client.images.build(
                path=str(source_dir), tag=tag, rm=True, forcerm=True
            )
        except BuildError as exc:
            raise PublishError(f"build failed: {exc.msg}", stage=PipelineStage.BUILD) from exc
        except (DockerException, requests.RequestException, TypeError) as exc:
            raise PublishError(f"build failed: {exc}", stage=PipelineStage.BUILD) from exc
        logger.info("Built %s (%s)", tag, image.id)
        return image.id

    def _push(self, tag: str) -> None:
        repository, image_tag = parse_repository_tag(tag)
        try:
            for line in self.client.images.push(
                repository,
                tag=image_tag or "latest",
                stream=True,
                decode=True,
                auth_config=self._auth_config(),
            ):
                # The engine reports push failures inside the stream
                # rather than as an HTTP error.
                if "error" in line:
                    detail = line.get("errorDetail", {}).get("message") or line["error"]
                    raise PublishError(f"push failed: {detail}")
        except (DockerException, requests.RequestException, ValueError) as exc:
            # Transport errors surface while the stream is consumed.
            raise PublishError(f"push failed: {exc}") from exc
        logger.info("Pushed %s", tag)
