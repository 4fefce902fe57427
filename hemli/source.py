"""
Source executor — run a provider command and capture the secret it prints.

One invocation, one attempt, no timeout. stdin is inherited so commands that
prompt (password managers, SSO logins) still work.
"""

from __future__ import annotations

import logging
import subprocess

from hemli.errors import SourceExecutionFailed
from hemli.models import Source, SourceType

logger = logging.getLogger(__name__)


def build_command(source: Source) -> tuple[str | list[str], bool]:
    """Return (args, shell) for subprocess.run."""
    if source.type is SourceType.SH:
        return source.command, True
    argv = source.command.split()
    if not argv:
        raise SourceExecutionFailed("empty command")
    return argv, False


def fetch_secret(source: Source) -> str:
    """Run the source and return its stdout with trailing newlines removed."""
    args, shell = build_command(source)
    logger.debug("Fetching secret via %s source: %s", source.type, source.command)

    try:
        proc = subprocess.run(
            args,
            shell=shell,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        raise SourceExecutionFailed(f"could not start {source.command!r}: {e}") from e

    if proc.returncode != 0:
        raise SourceExecutionFailed(
            f"command exited with status {proc.returncode}",
            exit_code=proc.returncode,
            stderr=proc.stderr.strip(),
        )

    return proc.stdout.rstrip("\r\n")
