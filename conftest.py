"""
Root-level shared test fixtures.

Inherited by the unit tests under hemli/tests and the CLI tests under tests/.
No test touches the real OS keyring: `memory_keyring` swaps in an in-process
backend for the duration of a test.
"""

from __future__ import annotations

from pathlib import Path

import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

from hemli.config import reset_config


class MemoryKeyring(KeyringBackend):
    """Keyring backend holding passwords in a dict."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.passwords: dict[tuple[str, str], str] = {}

    def get_password(self, service, username):
        return self.passwords.get((service, username))

    def set_password(self, service, username, password):
        self.passwords[(service, username)] = password

    def delete_password(self, service, username):
        try:
            del self.passwords[(service, username)]
        except KeyError:
            raise PasswordDeleteError("Password not found") from None


@pytest.fixture
def memory_keyring():
    """Install an in-memory keyring backend for one test."""
    previous = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove HEMLI_* env vars that leak in from the developer's shell."""
    import os

    for key in list(os.environ):
        if key.startswith("HEMLI_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def index_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "index.json"
