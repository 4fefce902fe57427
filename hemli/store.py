"""
Credential store adapter — the OS keyring via the `keyring` package.

Entries are opaque strings keyed by (service, account). hemli always uses
service "hemli:<namespace>" and the secret name as the account.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from hemli.errors import StoreAccessFailed

logger = logging.getLogger(__name__)

SERVICE_PREFIX = "hemli"


def service_name(namespace: str) -> str:
    return f"{SERVICE_PREFIX}:{namespace}"


class CredentialStore(ABC):
    """Abstract per-entry secure storage."""

    @abstractmethod
    def read(self, service: str, account: str) -> str | None:
        """Return the stored string, or None if there is no entry."""
        raise NotImplementedError

    @abstractmethod
    def write(self, service: str, account: str, data: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, service: str, account: str) -> bool:
        """Remove the entry. Returns False if it did not exist."""
        raise NotImplementedError

    def exists(self, service: str, account: str) -> bool:
        return self.read(service, account) is not None


class KeyringStore(CredentialStore):
    """Store backed by whichever keyring backend is active for the user."""

    def read(self, service: str, account: str) -> str | None:
        try:
            return keyring.get_password(service, account)
        except KeyringError as e:
            raise StoreAccessFailed(f"keyring read failed for {service}/{account}: {e}") from e

    def write(self, service: str, account: str, data: str) -> None:
        try:
            keyring.set_password(service, account, data)
        except KeyringError as e:
            raise StoreAccessFailed(f"keyring write failed for {service}/{account}: {e}") from e

    def delete(self, service: str, account: str) -> bool:
        try:
            keyring.delete_password(service, account)
        except PasswordDeleteError:
            # No such entry
            logger.debug("No keyring entry to delete for %s/%s", service, account)
            return False
        except KeyringError as e:
            raise StoreAccessFailed(f"keyring delete failed for {service}/{account}: {e}") from e
        return True
