from __future__ import annotations

import os
import socket
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    content_root: Path
    cache_root: Path
    view_root_uri: str
    title_scan_lines: int
    title_prefix: str
    browse_max_bytes: int
    markdown_extensions: tuple[str, ...]
    hostname: str
    api_auth_mode: str
    api_auth_token: str | None
    api_debug_log: bool
    cors_allow_origins: tuple[str, ...]
    portal_url: str | None
    portal_service: str
    portal_interval_s: float
    http_port: int


def _split_list(raw: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def load_settings() -> Settings:
    content_root = Path(os.environ.get("NOTE_CONTENT_ROOT", "/var/lib/house/note")).resolve()
    cache_root = Path(os.environ.get("NOTE_CACHE_ROOT", "/var/cache/house/note")).resolve()
    view_root_uri = os.environ.get("NOTE_VIEW_ROOT_URI", "/note/content").rstrip("/")
    title_scan_lines = int(os.environ.get("NOTE_TITLE_SCAN_LINES", "5"))
    title_prefix = os.environ.get("NOTE_TITLE_PREFIX", "# ")
    browse_max_bytes = int(os.environ.get("NOTE_BROWSE_MAX_BYTES", "65536"))
    markdown_extensions = _split_list(os.environ.get("NOTE_MARKDOWN_EXTENSIONS", "fenced_code"))
    hostname = os.environ.get("NOTE_HOSTNAME") or socket.gethostname()
    api_auth_mode = os.environ.get("API_AUTH_MODE", "none").lower()
    api_auth_token = os.environ.get("API_AUTH_TOKEN")
    api_debug_log = os.environ.get("API_DEBUG_LOG", "false").lower() == "true"
    cors_allow_origins = _split_list(os.environ.get("CORS_ALLOW_ORIGINS", "*"))
    portal_url = os.environ.get("PORTAL_URL") or None
    portal_service = os.environ.get("PORTAL_SERVICE", "note")
    portal_interval_s = float(os.environ.get("PORTAL_INTERVAL_S", "30"))
    http_port = int(os.environ.get("NOTE_HTTP_PORT", "8000"))
    return Settings(
        content_root=content_root,
        cache_root=cache_root,
        view_root_uri=view_root_uri,
        title_scan_lines=title_scan_lines,
        title_prefix=title_prefix,
        browse_max_bytes=browse_max_bytes,
        markdown_extensions=markdown_extensions,
        hostname=hostname,
        api_auth_mode=api_auth_mode,
        api_auth_token=api_auth_token,
        api_debug_log=api_debug_log,
        cors_allow_origins=cors_allow_origins,
        portal_url=portal_url,
        portal_service=portal_service,
        portal_interval_s=portal_interval_s,
        http_port=http_port,
    )
