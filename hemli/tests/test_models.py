"""Tests for stored secret records and the expiry state machine."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from hemli.models import (
    SecretState,
    Source,
    SourceType,
    StoredSecret,
    compute_expiry,
    rfc3339,
    secret_state,
)

T0 = datetime(2025, 1, 15, 10, 30, tzinfo=UTC)


class TestCreate:
    def test_no_ttl_never_expires(self):
        secret = StoredSecret.create("val", now=T0)
        assert secret.ttl_seconds is None
        assert secret.expires_at is None
        assert secret.state(T0 + timedelta(days=3650)) is SecretState.FRESH

    def test_ttl_sets_expiry_from_created_at(self):
        secret = StoredSecret.create("val", ttl_seconds=3600, now=T0)
        assert secret.created_at == T0
        assert secret.expires_at == T0 + timedelta(hours=1)

    def test_source_fields(self):
        secret = StoredSecret.create("val", source=Source.sh("echo hi"), now=T0)
        assert secret.source_command == "echo hi"
        assert secret.source_type is SourceType.SH
        assert secret.source == Source("echo hi", SourceType.SH)

    def test_source_absent_when_half_set(self):
        secret = StoredSecret(value="v", created_at=T0, source_command="echo hi")
        assert secret.source is None

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValidationError):
            StoredSecret(value="v", created_at=T0, ttl_seconds=-1)


class TestState:
    def test_fresh_before_expiry(self):
        secret = StoredSecret.create("val", ttl_seconds=60, now=T0)
        assert secret.state(T0 + timedelta(seconds=59)) is SecretState.FRESH

    def test_expired_at_expiry(self):
        secret = StoredSecret.create("val", ttl_seconds=60, now=T0)
        assert secret.state(T0 + timedelta(seconds=60)) is SecretState.EXPIRED

    def test_zero_ttl_expired_immediately(self):
        secret = StoredSecret.create("val", ttl_seconds=0, now=T0)
        assert secret.state(T0) is SecretState.EXPIRED

    def test_missing(self):
        assert secret_state(None, T0) is SecretState.MISSING

    def test_present_record_delegates(self):
        secret = StoredSecret.create("val", ttl_seconds=10, now=T0)
        assert secret_state(secret, T0 + timedelta(seconds=11)) is SecretState.EXPIRED


class TestTtlChanges:
    def test_with_ttl_measures_from_created_at(self):
        secret = StoredSecret.create("val", ttl_seconds=60, now=T0)
        updated = secret.with_ttl(7200)
        assert updated.created_at == T0
        assert updated.ttl_seconds == 7200
        assert updated.expires_at == T0 + timedelta(seconds=7200)

    def test_clear_ttl(self):
        secret = StoredSecret.create("val", ttl_seconds=60, now=T0)
        cleared = secret.with_ttl(None)
        assert cleared.ttl_seconds is None
        assert cleared.expires_at is None
        assert cleared.created_at == T0

    def test_with_ttl_leaves_original_untouched(self):
        secret = StoredSecret.create("val", ttl_seconds=60, now=T0)
        secret.with_ttl(None)
        assert secret.ttl_seconds == 60

    def test_with_source_and_value(self):
        secret = StoredSecret.create("old", source=Source.sh("echo old"), now=T0)
        updated = secret.with_value("new").with_source(Source.cmd("my-cmd arg1"))
        assert updated.value == "new"
        assert updated.source == Source("my-cmd arg1", SourceType.CMD)
        assert updated.created_at == T0

    def test_compute_expiry(self):
        assert compute_expiry(T0, None) is None
        assert compute_expiry(T0, 0) == T0


class TestSerialization:
    def test_json_shape(self):
        secret = StoredSecret.create(
            "the-secret", source=Source.sh("gcloud secrets versions access latest"),
            ttl_seconds=3600, now=T0,
        )
        data = json.loads(secret.to_json())
        assert list(data) == [
            "value",
            "created_at",
            "source_command",
            "source_type",
            "ttl_seconds",
            "expires_at",
        ]
        assert data["created_at"] == "2025-01-15T10:30:00Z"
        assert data["expires_at"] == "2025-01-15T11:30:00Z"
        assert data["source_type"] == "sh"
        assert data["ttl_seconds"] == 3600

    def test_nulls_written_explicitly(self):
        data = json.loads(StoredSecret.create("val", now=T0).to_json())
        assert data["source_command"] is None
        assert data["source_type"] is None
        assert data["ttl_seconds"] is None
        assert data["expires_at"] is None

    def test_deserialize_from_known_json(self):
        raw = """{
            "value": "the-secret",
            "created_at": "2025-01-15T10:30:00Z",
            "source_command": "gcloud secrets versions access latest",
            "source_type": "sh",
            "ttl_seconds": 3600,
            "expires_at": "2025-01-15T11:30:00Z"
        }"""
        secret = StoredSecret.from_json(raw)
        assert secret.value == "the-secret"
        assert secret.created_at == T0
        assert secret.source == Source.sh("gcloud secrets versions access latest")
        assert secret.expires_at == T0 + timedelta(hours=1)

    def test_reads_records_with_omitted_keys(self):
        secret = StoredSecret.from_json('{"value": "v", "created_at": "2025-01-15T10:30:00Z"}')
        assert secret.source is None
        assert secret.ttl_seconds is None
        assert secret.expires_at is None

    def test_stored_expiry_is_rederived(self):
        raw = json.dumps({
            "value": "v",
            "created_at": "2025-01-15T10:30:00Z",
            "ttl_seconds": 60,
            "expires_at": "2099-01-01T00:00:00Z",
        })
        secret = StoredSecret.from_json(raw)
        assert secret.expires_at == T0 + timedelta(seconds=60)

    def test_expiry_without_ttl_is_dropped(self):
        raw = json.dumps({
            "value": "v",
            "created_at": "2025-01-15T10:30:00Z",
            "expires_at": "2099-01-01T00:00:00Z",
        })
        assert StoredSecret.from_json(raw).expires_at is None

    def test_cmd_source_type(self):
        secret = StoredSecret.create("val", source=Source.cmd("my-cmd arg1"), now=T0)
        assert '"source_type":"cmd"' in secret.to_json()

    def test_invalid_source_type_rejected(self):
        with pytest.raises(ValidationError):
            StoredSecret.from_json(
                '{"value": "v", "created_at": "2025-01-15T10:30:00Z", "source_type": "bash"}'
            )


class TestRfc3339:
    def test_utc_suffix(self):
        assert rfc3339(T0) == "2025-01-15T10:30:00Z"

    def test_microseconds_kept(self):
        assert rfc3339(T0.replace(microsecond=123456)) == "2025-01-15T10:30:00.123456Z"

    def test_converts_offsets_to_utc(self):
        from datetime import timezone

        ts = datetime(2025, 1, 15, 12, 30, tzinfo=timezone(timedelta(hours=2)))
        assert rfc3339(ts) == "2025-01-15T10:30:00Z"
