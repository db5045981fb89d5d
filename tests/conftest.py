"""Core test fixtures for the bqs project."""

import os
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from bqs.core.cache import DiskCacheManager, MemoryCache
from bqs.core.cache.models import CacheConfig
from tests.bq_samples import FakeClock, FakeRunner, InstantEvent


# ---- Base Fixtures ----


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def instant_event() -> InstantEvent:
    return InstantEvent()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(fake_clock: FakeClock) -> MemoryCache:
    return MemoryCache(CacheConfig(default_ttl_seconds=60), clock=fake_clock)


@pytest.fixture
def disk_cache(tmp_path: Path) -> Generator[DiskCacheManager, None, None]:
    """Durable cache in a temporary directory."""
    with DiskCacheManager(CacheConfig(cache_path=tmp_path / "metadata")) as cache:
        yield cache


# ---- Test Isolation Fixtures ----


@pytest.fixture
def isolated_cache_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point every cache lookup at a temporary directory.

    Clears any ``BQS_*`` variables from the developer's environment so
    settings come from defaults.
    """

    for key in list(os.environ):
        if key.startswith("BQS_"):
            monkeypatch.delenv(key, raising=False)

    cache_dir = tmp_path / "bqs-cache"
    monkeypatch.setenv("BQS_CACHE_DIR", str(cache_dir))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    return cache_dir


@pytest.fixture
def fake_bq(
    isolated_cache_environment: Path, fake_runner: FakeRunner
) -> Generator[FakeRunner, None, None]:
    """Route every ``bq`` call made by the CLI to a FakeRunner."""
    with patch("bqs.cli.context.BqRunner", return_value=fake_runner):
        yield fake_runner
