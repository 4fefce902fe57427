"""
Secret lifecycle engine.

SecretCache ties the keyring store, the index file and the source executor
together. Ordering rules:

    - the keyring is written (or deleted) first; the index follows only once
      that has succeeded
    - the index is never consulted for a single identity, only for listing
    - created_at is set once, when a record is first stored
    - a failed index update after a successful keyring write is logged, not
      raised; the next successful write or repair() brings it back in line
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from hemli.errors import IndexCorrupt, NoSourceAvailable, NotFound, RecordCorrupt
from hemli.index import filter_entries, load_index, remove_entry, save_index, upsert_entry
from hemli.models import (
    IndexEntry,
    SecretIndex,
    SecretState,
    Source,
    StoredSecret,
    secret_state,
    utcnow,
)
from hemli.requests import EditRequest, GetRequest, RefreshMode
from hemli.source import fetch_secret
from hemli.store import CredentialStore, service_name

logger = logging.getLogger(__name__)


def resolve_source(explicit: Source | None, existing: StoredSecret | None) -> Source:
    """Explicit flag, else stored provenance, else fail."""
    if explicit is not None:
        return explicit
    if existing is not None and existing.source is not None:
        return existing.source
    raise NoSourceAvailable()


class SecretCache:
    """Cached secrets keyed by (namespace, name)."""

    def __init__(
        self,
        store: CredentialStore,
        index_path: Path,
        *,
        runner: Callable[[Source], str] = fetch_secret,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.index_path = index_path
        self.runner = runner
        self.clock = clock

    # ── Record access ──

    def load(self, namespace: str, name: str) -> StoredSecret | None:
        raw = self.store.read(service_name(namespace), name)
        if raw is None:
            return None
        try:
            return StoredSecret.from_json(raw)
        except ValidationError as e:
            raise RecordCorrupt(namespace, name, str(e)) from e

    def _save(self, namespace: str, name: str, record: StoredSecret) -> None:
        self.store.write(service_name(namespace), name, record.to_json())
        self._update_index(lambda idx: upsert_entry(idx, namespace, name, record.created_at))

    def _update_index(self, mutate: Callable[[SecretIndex], bool]) -> None:
        """Read-modify-write the index; `mutate` returns True if it changed anything."""
        try:
            idx = load_index(self.index_path)
            if mutate(idx):
                save_index(self.index_path, idx)
        except (IndexCorrupt, OSError) as e:
            logger.warning(
                "Index update failed, secret is stored but `hemli list` may be stale: %s", e
            )

    # ── Operations ──

    def get(self, request: GetRequest) -> str:
        """Return the current value, fetching from the source if needed."""
        existing = self.load(request.namespace, request.name)
        now = self.clock()
        state = secret_state(existing, now)

        if request.mode is RefreshMode.NO_REFRESH:
            if existing is None:
                raise NotFound(request.namespace, request.name)
            logger.debug("Returning cached secret (%s, refresh disabled)", state)
            return existing.value

        if request.mode is not RefreshMode.FORCE_REFRESH and state is SecretState.FRESH:
            # A --ttl given here only takes effect on the next fetch.
            logger.debug("Returning cached secret")
            return existing.value

        source = resolve_source(request.source, existing)
        logger.debug("Secret %s/%s is %s, running source", request.namespace, request.name, state)
        value = self.runner(source)

        if request.stores_result:
            record = self._refreshed(existing, value, source, request.ttl, now)
            self._save(request.namespace, request.name, record)
            logger.debug("Stored secret in keyring and index")
        return value

    def _refreshed(
        self,
        existing: StoredSecret | None,
        value: str,
        source: Source,
        ttl: int | None,
        now: datetime,
    ) -> StoredSecret:
        if existing is None:
            return StoredSecret.create(value, source=source, ttl_seconds=ttl, now=now)
        # created_at is kept; a new TTL is measured from it
        record = existing.with_value(value).with_source(source)
        if ttl is not None:
            record = record.with_ttl(ttl)
        return record

    def edit(self, request: EditRequest) -> StoredSecret:
        """Change TTL and/or provenance without running the source."""
        record = self.load(request.namespace, request.name)
        if record is None:
            raise NotFound(request.namespace, request.name)

        if request.changes_ttl:
            record = record.with_ttl(None if request.clear_ttl else request.ttl)
        if request.source is not None:
            record = record.with_source(request.source)

        self._save(request.namespace, request.name, record)
        return record

    def delete(self, namespace: str, name: str) -> bool:
        """Remove a secret. Absent secrets are not an error; returns whether one existed."""
        found = self.store.delete(service_name(namespace), name)
        if not found:
            logger.info("Secret '%s' in namespace '%s' was not stored", name, namespace)
        self._update_index(lambda idx: remove_entry(idx, namespace, name))
        return found

    def inspect(self, namespace: str, name: str) -> StoredSecret:
        record = self.load(namespace, name)
        if record is None:
            raise NotFound(namespace, name)
        return record

    def list(self, namespace: str | None = None) -> list[IndexEntry]:
        return filter_entries(load_index(self.index_path), namespace)

    def repair(self) -> list[IndexEntry]:
        """Drop index entries whose keyring entry no longer exists. Returns the dropped entries."""
        idx = load_index(self.index_path)
        stale = [
            e for e in idx.entries if not self.store.exists(service_name(e.namespace), e.name)
        ]
        if stale:
            for entry in stale:
                remove_entry(idx, entry.namespace, entry.name)
            save_index(self.index_path, idx)
            logger.info("Pruned %d stale index entries", len(stale))
        return stale
