from __future__ import annotations

import pytest

from housenote_api.dependencies import clear_caches


@pytest.fixture(autouse=True)
def clear_dependency_caches():
    clear_caches()
    yield
    clear_caches()


@pytest.fixture()
def roots(tmp_path):
    content = tmp_path / "content"
    cache = tmp_path / "cache"
    content.mkdir()
    cache.mkdir()
    return content.resolve(), cache.resolve()


@pytest.fixture()
def app_env(roots, monkeypatch):
    content, cache = roots
    monkeypatch.setenv("NOTE_CONTENT_ROOT", str(content))
    monkeypatch.setenv("NOTE_CACHE_ROOT", str(cache))
    monkeypatch.setenv("NOTE_HOSTNAME", "testhost")
    monkeypatch.delenv("API_AUTH_MODE", raising=False)
    monkeypatch.delenv("PORTAL_URL", raising=False)
    return content, cache
