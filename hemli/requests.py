"""
Validated per-command requests.

Raw CLI flags are turned into one of these before the engine touches any
storage, so conflicting combinations fail up front.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from hemli.errors import ConflictingFlags, NoModificationRequested
from hemli.models import Source


class RefreshMode(StrEnum):
    DEFAULT = "default"
    FORCE_REFRESH = "force-refresh"
    NO_REFRESH = "no-refresh"
    NO_STORE = "no-store"


def _pick_source(source_sh: str | None, source_cmd: str | None) -> Source | None:
    if source_sh is not None and source_cmd is not None:
        raise ConflictingFlags("source-sh", "source-cmd")
    if source_sh is not None:
        return Source.sh(source_sh)
    if source_cmd is not None:
        return Source.cmd(source_cmd)
    return None


def _check_ttl(ttl: int | None) -> None:
    if ttl is not None and ttl < 0:
        raise ValueError(f"TTL must be non-negative, got {ttl}")


@dataclass(frozen=True)
class GetRequest:
    namespace: str
    name: str
    mode: RefreshMode = RefreshMode.DEFAULT
    ttl: int | None = None
    source: Source | None = None

    def __post_init__(self) -> None:
        _check_ttl(self.ttl)

    @classmethod
    def from_flags(
        cls,
        namespace: str,
        name: str,
        *,
        force_refresh: bool = False,
        no_refresh: bool = False,
        no_store: bool = False,
        ttl: int | None = None,
        source_sh: str | None = None,
        source_cmd: str | None = None,
    ) -> GetRequest:
        chosen = [
            mode
            for mode, enabled in (
                (RefreshMode.FORCE_REFRESH, force_refresh),
                (RefreshMode.NO_REFRESH, no_refresh),
                (RefreshMode.NO_STORE, no_store),
            )
            if enabled
        ]
        if len(chosen) > 1:
            raise ConflictingFlags(chosen[0], chosen[1])
        return cls(
            namespace=namespace,
            name=name,
            mode=chosen[0] if chosen else RefreshMode.DEFAULT,
            ttl=ttl,
            source=_pick_source(source_sh, source_cmd),
        )

    @property
    def stores_result(self) -> bool:
        return self.mode is not RefreshMode.NO_STORE


@dataclass(frozen=True)
class EditRequest:
    namespace: str
    name: str
    ttl: int | None = None
    clear_ttl: bool = False
    source: Source | None = None

    def __post_init__(self) -> None:
        if self.clear_ttl and self.ttl is not None:
            raise ConflictingFlags("ttl", "clear-ttl")
        if self.ttl is None and not self.clear_ttl and self.source is None:
            raise NoModificationRequested()
        _check_ttl(self.ttl)

    @classmethod
    def from_flags(
        cls,
        namespace: str,
        name: str,
        *,
        ttl: int | None = None,
        clear_ttl: bool = False,
        source_sh: str | None = None,
        source_cmd: str | None = None,
    ) -> EditRequest:
        return cls(
            namespace=namespace,
            name=name,
            ttl=ttl,
            clear_ttl=clear_ttl,
            source=_pick_source(source_sh, source_cmd),
        )

    @property
    def changes_ttl(self) -> bool:
        return self.clear_ttl or self.ttl is not None
