from __future__ import annotations

from fastapi.testclient import TestClient


def _client() -> TestClient:
    from main import create_app

    return TestClient(create_app())


def test_publish_browse_view_scenario(app_env, monkeypatch) -> None:
    content, cache = app_env
    client = _client()

    r = client.post("/note/publish/notes/x.md", content=b"# Hello\nworld\n")
    assert r.status_code == 200
    assert r.text == ""

    b = client.get("/note/browse/notes")
    assert b.status_code == 200
    body = b.json()
    assert body["host"] == "testhost"
    assert isinstance(body["timestamp"], int)
    assert body["note"] == {"browse": [[False, "/note/content/notes/x.html", "Hello"]]}

    v1 = client.get("/note/content/notes/x.html")
    assert v1.status_code == 200
    assert v1.headers["content-type"].startswith("text/html")
    assert "<h1>Hello</h1>" in v1.text
    assert "<p>world</p>" in v1.text
    assert (cache / "notes" / "x.html").is_file()

    # A cached file is served as-is, without going back to the renderer.
    from housenote_api.dependencies import get_render_cache

    def _no_render(_text: str) -> str:
        raise AssertionError("render called on a cache hit")

    monkeypatch.setattr(get_render_cache().renderer, "render", _no_render)
    v2 = client.get("/note/content/notes/x.html")
    assert v2.status_code == 200
    assert v2.content == v1.content


def test_publish_replaces_stale_rendering(app_env) -> None:
    client = _client()

    client.put("/note/publish/a/b.md", content=b"# First\n")
    assert "First" in client.get("/note/content/a/b.html").text

    client.put("/note/publish/a/b.md", content=b"# Second\n")
    view = client.get("/note/content/a/b.html")
    assert "<h1>Second</h1>" in view.text
    assert "First" not in view.text


def test_browse_root_and_missing_directory(app_env) -> None:
    content, _cache = app_env
    (content / "notes").mkdir()
    client = _client()

    root = client.get("/note/browse")
    assert root.json()["note"] == {"browse": [[True, "/notes", "notes"]]}

    missing = client.get("/note/browse/nowhere")
    assert missing.status_code == 200
    assert missing.json()["note"] == {"browse": []}


def test_browse_overflow_returns_empty_fragment(app_env, monkeypatch) -> None:
    content, _cache = app_env
    monkeypatch.setenv("NOTE_BROWSE_MAX_BYTES", "64")
    for i in range(10):
        (content / f"n{i}.md").write_text(f"# Title {i}\n", encoding="utf-8")
    client = _client()

    assert client.get("/note/browse").json()["note"] == {}


def test_publish_errors_are_plain_text(app_env) -> None:
    client = _client()

    r = client.post("/note/publish/notes/README", content=b"text")
    assert r.status_code == 500
    assert r.text == "no suffix"

    r2 = client.post("/note/publish/..%2Fescape.md", content=b"x")
    assert r2.status_code == 400


def test_content_not_found_cases(app_env) -> None:
    content, _cache = app_env
    (content / "asset.txt").write_text("plain asset", encoding="utf-8")
    client = _client()

    assert client.get("/note/content/ghost.html").status_code == 404
    assert client.get("/note/content/missing.txt").status_code == 404
    assert client.get("/note/content/").status_code == 404

    asset = client.get("/note/content/asset.txt")
    assert asset.status_code == 200
    assert asset.text == "plain asset"


def test_health_and_request_id(app_env) -> None:
    client = _client()
    r = client.get("/health", headers={"X-Request-ID": "abc"})
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert r.headers["x-request-id"] == "abc"


def test_bearer_auth_filters_requests(app_env, monkeypatch) -> None:
    monkeypatch.setenv("API_AUTH_MODE", "bearer")
    monkeypatch.setenv("API_AUTH_TOKEN", "secret")
    client = _client()

    assert client.get("/health").status_code == 200
    assert client.get("/note/browse").status_code == 401
    assert client.post("/note/publish/x.md", content=b"# X\n").status_code == 401
    assert client.get("/note/browse", headers={"Authorization": "Bearer secret"}).status_code == 200


def test_publish_during_view_serves_complete_content(app_env, monkeypatch) -> None:
    from housenote_api.dependencies import get_publisher, get_render_cache, get_resolver_chain

    client = _client()
    client.put("/note/publish/a/b.md", content=b"# Old\n")

    chain = get_resolver_chain()
    resolve = chain.try_resolve

    def resolve_then_publish(requested: str):
        handle = resolve(requested)
        get_publisher().publish("/a/b.md", b"# New\n")
        return handle

    with monkeypatch.context() as m:
        m.setattr(chain, "try_resolve", resolve_then_publish)
        view = client.get("/note/content/a/b.html")
    assert view.status_code == 200
    assert "<h1>Old</h1>" in view.text

    cache = get_render_cache()
    open_cached = cache.open_cached

    def open_then_publish(rel):
        handle = open_cached(rel)
        get_publisher().publish("/a/b.md", b"# Newest\n")
        return handle

    assert "<h1>New</h1>" in client.get("/note/content/a/b.html").text
    with monkeypatch.context() as m:
        m.setattr(cache, "open_cached", open_then_publish)
        view = client.get("/note/content/a/b.html")
    assert view.status_code == 200
    assert "<h1>New</h1>" in view.text

    assert "<h1>Newest</h1>" in client.get("/note/content/a/b.html").text


def test_browse_limit_counts_the_envelope(app_env, monkeypatch) -> None:
    content, _cache = app_env
    (content / "notes").mkdir()
    # '{"browse":[[true,"/notes","notes"]]}' is 37 bytes; the envelope adds more than 23.
    monkeypatch.setenv("NOTE_BROWSE_MAX_BYTES", "60")
    client = _client()

    r = client.get("/note/browse")
    assert r.status_code == 200
    assert r.json()["note"] == {}
