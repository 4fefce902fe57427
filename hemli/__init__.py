"""
hemli — local secret cache backed by the OS keyring.

Public API:
    SecretCache(store, index_path)   → lifecycle engine (get/edit/delete/list/inspect)
    GetRequest / EditRequest         → validated per-command requests
    fetch_secret(source)             → run a source command, return its stdout
"""

from __future__ import annotations

__version__ = "0.1.0"

from hemli.engine import SecretCache
from hemli.models import SecretState, Source, SourceType, StoredSecret
from hemli.requests import EditRequest, GetRequest, RefreshMode
from hemli.source import fetch_secret

__all__ = [
    "__version__",
    "SecretCache",
    "SecretState",
    "Source",
    "SourceType",
    "StoredSecret",
    "GetRequest",
    "EditRequest",
    "RefreshMode",
    "fetch_secret",
]
