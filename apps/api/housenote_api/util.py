from __future__ import annotations

import os
import threading
from pathlib import Path, PurePosixPath


def temp_sibling(path: Path) -> Path:
    # Hidden, so a half written file never shows up in a browse listing.
    return path.with_name(f".{path.name}.tmp.{os.getpid()}.{threading.get_ident()}")


def atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = temp_sibling(path)
    try:
        tmp_path.write_text(content, encoding="utf-8")
        tmp_path.replace(path)
    finally:
        tmp_path.unlink(missing_ok=True)


def with_html_suffix(rel: PurePosixPath) -> PurePosixPath:
    return rel.with_suffix(".html")


def with_markdown_suffix(rel: PurePosixPath) -> PurePosixPath:
    return rel.with_suffix(".md")
