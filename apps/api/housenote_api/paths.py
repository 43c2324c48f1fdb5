from __future__ import annotations

from pathlib import Path, PurePosixPath

from .domain.exceptions import PathError


def normalize_relative_path(path: str) -> PurePosixPath:
    """Turn a request path into a path relative to one of the roots.

    Leading slashes are dropped, so ``/notes/a.md`` and ``notes/a.md`` are the
    same note. The empty path is the root itself.
    """
    if "\x00" in path:
        raise PathError("path_contains_nul")

    cleaned = path.strip().replace("\\", "/").lstrip("/")
    p = PurePosixPath(cleaned)
    if ".." in p.parts:
        raise PathError("path_traversal_not_allowed")
    return p


def normalize_file_path(path: str) -> PurePosixPath:
    p = normalize_relative_path(path)
    if not p.parts:
        raise PathError("path_empty")
    return p


def ensure_under(root: Path, abs_path: Path) -> None:
    root = root.resolve()
    resolved = abs_path.resolve()
    if root not in resolved.parents and resolved != root:
        raise PathError("path_outside_root")


def under_root(root: Path, rel: PurePosixPath) -> Path:
    abs_path = root / rel
    ensure_under(root, abs_path)
    return abs_path


def browse_prefix(rel: PurePosixPath) -> str:
    # The root directory lists as "" so children become "/name".
    if not rel.parts:
        return ""
    return "/" + rel.as_posix()
