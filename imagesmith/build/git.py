"""Shallow git clones of watched repositories."""

from __future__ import annotations

import base64
import logging
from pathlib import Path

from imagesmith.build import CloneError
from imagesmith.core.commands import CommandError, run_cmd

logger = logging.getLogger(__name__)


class GitCloner:
    """Clones ``https://<host>/<owner>/<name>.git`` with ``git clone --depth 1``.

    Parameters
    ----------
    host:
        Git host name.  Defaults to ``github.com``.
    token:
        Optional access token, sent as an HTTP basic auth header and never
        written to the clone's git config.
    timeout:
        Seconds before the clone is aborted.
    """

    def __init__(
        self,
        host: str = "github.com",
        token: str = "",
        timeout: float = 900,
        git_binary: str = "git",
    ) -> None:
        self._host = host
        self._token = token
        self._timeout = timeout
        self._git = git_binary

    def clone_url(self, owner: str, name: str) -> str:
        return f"https://{self._host}/{owner}/{name}.git"

    def clone(self, owner: str, name: str, dest: Path) -> None:
        args = [self._git]
        redact: list[str] = []
        if self._token:
            basic = base64.b64encode(f"x-access-token:{self._token}".encode()).decode()
            args += ["-c", f"http.extraheader=AUTHORIZATION: basic {basic}"]
            redact = [self._token, basic]
        args += ["clone", "--depth", "1", self.clone_url(owner, name), str(dest)]

        try:
            run_cmd(args, timeout=self._timeout, redact=redact)
        except CommandError as exc:
            raise CloneError(str(exc)) from exc
        logger.info("Cloned %s/%s into %s", owner, name, dest)
