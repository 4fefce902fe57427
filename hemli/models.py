"""
hemli data models — stored secret records and index entries.

A StoredSecret is what lives in the keyring under service "hemli:<namespace>"
and account "<name>", serialized as JSON. Its expires_at is always derived
from created_at + ttl_seconds; it is recomputed on load and on every TTL
change, never from the current time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator


class SourceType(StrEnum):
    SH = "sh"  # handed to the system shell
    CMD = "cmd"  # split on whitespace, executed directly


class SecretState(StrEnum):
    MISSING = "missing"
    FRESH = "fresh"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Source:
    """Provenance of a secret: the command that produces it and how to run it."""

    command: str
    type: SourceType

    @classmethod
    def sh(cls, command: str) -> Source:
        return cls(command, SourceType.SH)

    @classmethod
    def cmd(cls, command: str) -> Source:
        return cls(command, SourceType.CMD)


def utcnow() -> datetime:
    return datetime.now(UTC)


def rfc3339(ts: datetime) -> str:
    """Format an aware timestamp as RFC 3339 in UTC with a trailing Z."""
    return ts.astimezone(UTC).isoformat().replace("+00:00", "Z")


def compute_expiry(created_at: datetime, ttl_seconds: int | None) -> datetime | None:
    if ttl_seconds is None:
        return None
    return created_at + timedelta(seconds=ttl_seconds)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class StoredSecret(BaseModel):
    """A cached secret plus the metadata needed to refresh it."""

    value: str
    created_at: datetime
    source_command: str | None = None
    source_type: SourceType | None = None
    ttl_seconds: int | None = Field(default=None, ge=0)
    expires_at: datetime | None = None

    @field_validator("created_at", "expires_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @model_validator(mode="after")
    def _derive_expires_at(self) -> StoredSecret:
        self.expires_at = compute_expiry(self.created_at, self.ttl_seconds)
        return self

    @field_serializer("created_at", "expires_at", when_used="json")
    def _serialize_ts(self, value: datetime | None) -> str | None:
        return rfc3339(value) if value is not None else None

    @classmethod
    def create(
        cls,
        value: str,
        *,
        source: Source | None = None,
        ttl_seconds: int | None = None,
        now: datetime | None = None,
    ) -> StoredSecret:
        return cls(
            value=value,
            created_at=now or utcnow(),
            source_command=source.command if source else None,
            source_type=source.type if source else None,
            ttl_seconds=ttl_seconds,
        )

    @classmethod
    def from_json(cls, raw: str) -> StoredSecret:
        return cls.model_validate_json(raw)

    def to_json(self, *, indent: int | None = None) -> str:
        return self.model_dump_json(indent=indent)

    @property
    def source(self) -> Source | None:
        if self.source_command is None or self.source_type is None:
            return None
        return Source(self.source_command, self.source_type)

    def state(self, now: datetime | None = None) -> SecretState:
        if self.expires_at is None:
            return SecretState.FRESH
        if (now or utcnow()) >= self.expires_at:
            return SecretState.EXPIRED
        return SecretState.FRESH

    def with_ttl(self, ttl_seconds: int | None) -> StoredSecret:
        """Copy with a new TTL; expiry is measured from the original created_at."""
        return self.model_copy(
            update={
                "ttl_seconds": ttl_seconds,
                "expires_at": compute_expiry(self.created_at, ttl_seconds),
            }
        )

    def with_source(self, source: Source) -> StoredSecret:
        return self.model_copy(
            update={"source_command": source.command, "source_type": source.type}
        )

    def with_value(self, value: str) -> StoredSecret:
        return self.model_copy(update={"value": value})


def secret_state(record: StoredSecret | None, now: datetime | None = None) -> SecretState:
    """Classify a possibly-absent record for the refresh decision."""
    if record is None:
        return SecretState.MISSING
    return record.state(now)


class IndexEntry(BaseModel):
    """One known identity. Metadata only; values live in the keyring."""

    namespace: str
    name: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @field_serializer("created_at", when_used="json")
    def _serialize_ts(self, value: datetime) -> str:
        return rfc3339(value)


class SecretIndex(BaseModel):
    entries: list[IndexEntry] = Field(default_factory=list)
