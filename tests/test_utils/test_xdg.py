"""Tests for cache directory resolution."""

from pathlib import Path

import pytest

from bqs.utils.xdg import get_cache_dir, get_xdg_cache_dir


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BQS_CACHE_DIR", raising=False)
    monkeypatch.delenv("XDG_CACHE_HOME", raising=False)


class TestCacheDir:
    def test_override_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BQS_CACHE_DIR", str(tmp_path / "override"))
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg"))

        path = get_cache_dir()

        assert path == tmp_path / "override"
        assert path.is_dir()

    def test_xdg_cache_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg"))

        assert get_cache_dir() == tmp_path / "xdg" / "bqs"

    def test_home_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        assert get_xdg_cache_dir() == tmp_path / ".cache" / "bqs"

    def test_create_false_does_not_create(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("BQS_CACHE_DIR", str(tmp_path / "lazy"))

        path = get_cache_dir(create=False)

        assert not path.exists()
