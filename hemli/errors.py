"""Errors raised by the hemli engine and its adapters."""

from __future__ import annotations

from pathlib import Path


class HemliError(Exception):
    """Base class for every error the CLI reports with a non-zero exit."""


class NotFound(HemliError):
    def __init__(self, namespace: str, name: str):
        self.namespace = namespace
        self.name = name
        super().__init__(f"secret '{name}' not found in namespace '{namespace}'")


class NoSourceAvailable(HemliError):
    def __init__(self) -> None:
        super().__init__("no source command provided and secret is not cached")


class ConflictingFlags(HemliError):
    def __init__(self, first: str, second: str):
        self.flags = (first, second)
        super().__init__(f"--{first} cannot be used together with --{second}")


class NoModificationRequested(HemliError):
    def __init__(self) -> None:
        super().__init__(
            "no modifications specified; provide at least one of "
            "--ttl, --clear-ttl, --source-sh, or --source-cmd"
        )


class SourceExecutionFailed(HemliError):
    """A source command could not be started or exited non-zero."""

    def __init__(self, message: str, *, exit_code: int | None = None, stderr: str = ""):
        self.exit_code = exit_code
        self.stderr = stderr
        detail = f"source command failed: {message}"
        if stderr:
            detail = f"{detail}: {stderr}"
        super().__init__(detail)


class StoreAccessFailed(HemliError):
    """The keyring backend is unavailable or refused the operation."""


class RecordCorrupt(HemliError):
    def __init__(self, namespace: str, name: str, reason: str):
        self.namespace = namespace
        self.name = name
        super().__init__(
            f"stored record for '{name}' in namespace '{namespace}' is unreadable: {reason}"
        )


class IndexCorrupt(HemliError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"index file {path} is unreadable: {reason}")
