"""Subprocess helper for external tools (git)."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)

REDACTED = "***REDACTED***"


class CommandError(RuntimeError):
    """Raised when an external command exits non-zero or cannot be run."""

    def __init__(self, message: str, output: str = "", returncode: int | None = None) -> None:
        super().__init__(message)
        self.output = output
        self.returncode = returncode


def _redact(text: str, secrets: Sequence[str] | None) -> str:
    for secret in secrets or ():
        if secret:
            text = text.replace(secret, REDACTED)
    return text


def run_cmd(
    args: Sequence[str],
    cwd: Path | str | None = None,
    env: dict[str, str] | None = None,
    timeout: float = 900,
    redact: Sequence[str] | None = None,
) -> str:
    """Run a command without a shell and return its combined output.

    Secrets listed in *redact* are masked in the returned output and in any
    error message.  Git is never allowed to prompt for credentials.
    """
    full_env = os.environ.copy()
    if env:
        full_env.update(env)
    full_env["GIT_TERMINAL_PROMPT"] = "0"

    shown = _redact(" ".join(args), redact)
    logger.debug("Running: %s", shown)
    try:
        proc = subprocess.run(
            list(args),
            cwd=cwd,
            env=full_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            timeout=timeout,
            text=True,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise CommandError(f"Command timed out after {timeout}s: {shown}") from exc
    except OSError as exc:
        raise CommandError(f"Cannot run {shown}: {exc}") from exc

    out = _redact(proc.stdout or "", redact)
    if proc.returncode != 0:
        raise CommandError(
            f"Command failed ({proc.returncode}): {shown}\n{out.strip()}",
            output=out,
            returncode=proc.returncode,
        )
    return out
