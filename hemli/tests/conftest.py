"""Shared fixtures for hemli unit tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from hemli.engine import SecretCache
from hemli.models import Source
from hemli.store import KeyringStore

T0 = datetime(2025, 1, 15, 10, 30, tzinfo=UTC)


class FakeRunner:
    """Stands in for fetch_secret; returns the given values in order, repeating the last."""

    def __init__(self, *values: str):
        self.values = list(values) or ["secret1"]
        self.calls: list[Source] = []

    def __call__(self, source: Source) -> str:
        self.calls.append(source)
        index = min(len(self.calls), len(self.values)) - 1
        return self.values[index]


class FakeClock:
    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner("secret1", "secret2", "secret3")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(memory_keyring, index_path: Path, runner: FakeRunner, clock: FakeClock) -> SecretCache:
    return SecretCache(KeyringStore(), index_path, runner=runner, clock=clock)
