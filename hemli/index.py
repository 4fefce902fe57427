"""
Index — plaintext JSON side table of known secret identities.

The keyring cannot be enumerated portably, so `hemli list` reads this file
instead. It only ever holds (namespace, name, created_at); it is rewritten
as a whole on every change and is never the source of truth for a secret.
"""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from hemli.errors import IndexCorrupt
from hemli.models import IndexEntry, SecretIndex

logger = logging.getLogger(__name__)


def load_index(path: Path) -> SecretIndex:
    """Read the index. A missing file is an empty index."""
    if not path.exists():
        return SecretIndex()
    try:
        return SecretIndex.model_validate_json(path.read_text(encoding="utf-8"))
    except (ValidationError, UnicodeDecodeError) as e:
        raise IndexCorrupt(path, str(e)) from e


def save_index(path: Path, index: SecretIndex) -> None:
    """Atomically replace the index file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".index-", suffix=".tmp")
    try:
        os.write(fd, index.model_dump_json(indent=2).encode("utf-8"))
        os.close(fd)
        os.replace(tmp, path)
    except Exception:
        try:
            os.close(fd)
        except OSError:
            pass
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    logger.debug("Wrote %d index entries to %s", len(index.entries), path)


def find_entry(index: SecretIndex, namespace: str, name: str) -> IndexEntry | None:
    for entry in index.entries:
        if entry.namespace == namespace and entry.name == name:
            return entry
    return None


def upsert_entry(index: SecretIndex, namespace: str, name: str, created_at: datetime) -> bool:
    """Add or update an identity. Returns True if the index changed."""
    entry = find_entry(index, namespace, name)
    if entry is None:
        index.entries.append(IndexEntry(namespace=namespace, name=name, created_at=created_at))
        return True
    if entry.created_at == created_at:
        return False
    entry.created_at = created_at
    return True


def remove_entry(index: SecretIndex, namespace: str, name: str) -> bool:
    """Drop an identity. Returns True if it was present."""
    before = len(index.entries)
    index.entries = [
        e for e in index.entries if not (e.namespace == namespace and e.name == name)
    ]
    return len(index.entries) != before


def filter_entries(index: SecretIndex, namespace: str | None = None) -> list[IndexEntry]:
    if namespace is None:
        return list(index.entries)
    return [e for e in index.entries if e.namespace == namespace]
