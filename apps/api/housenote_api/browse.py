from __future__ import annotations

import json
import logging
import os
from itertools import islice
from pathlib import Path, PurePosixPath

from .domain.entities import BrowseEntry
from .domain.exceptions import BrowseOverflow, NotFoundError, PathError
from .paths import browse_prefix, normalize_relative_path, under_root

logger = logging.getLogger("housenote.browse")

DEFAULT_TITLE_SCAN_LINES = 5
DEFAULT_TITLE_PREFIX = "# "


def extract_title(
    path: Path,
    *,
    max_lines: int = DEFAULT_TITLE_SCAN_LINES,
    prefix: str = DEFAULT_TITLE_PREFIX,
) -> str:
    """Title of a markdown note: the first heading among its first lines, else the file stem.

    Blank lines count towards ``max_lines``.
    """
    try:
        with path.open("r", encoding="utf-8", errors="replace") as f:
            for line in islice(f, max_lines):
                line = line.rstrip("\r\n")
                if not line:
                    continue
                if line.startswith(prefix):
                    title = line[len(prefix) :]
                    if title.strip():
                        return title
    except OSError:
        pass
    return PurePosixPath(path.name).stem


def encode_fragment(entries: list[BrowseEntry], max_bytes: int) -> dict:
    fragment = {"browse": [e.as_row() for e in entries]}
    size = len(json.dumps(fragment, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))
    if size > max_bytes:
        raise BrowseOverflow(f"browse_fragment_{size}_bytes_exceeds_{max_bytes}")
    return fragment


class BrowseGenerator:
    def __init__(
        self,
        content_root: Path,
        view_root_uri: str,
        *,
        max_bytes: int = 65536,
        title_scan_lines: int = DEFAULT_TITLE_SCAN_LINES,
        title_prefix: str = DEFAULT_TITLE_PREFIX,
    ) -> None:
        self.content_root = content_root
        self.view_root_uri = view_root_uri
        self.max_bytes = max_bytes
        self.title_scan_lines = title_scan_lines
        self.title_prefix = title_prefix

    def list_entries(self, path: str) -> list[BrowseEntry]:
        """Children of one content directory, sorted by name.

        Hidden entries, non-markdown files and anything that is neither a
        plain directory nor a plain file are left out.
        """
        try:
            rel = normalize_relative_path(path)
            directory = under_root(self.content_root, rel)
        except PathError as e:
            raise NotFoundError(str(e)) from e
        prefix = browse_prefix(rel)

        try:
            with os.scandir(directory) as it:
                children = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise NotFoundError(rel.as_posix()) from e

        entries: list[BrowseEntry] = []
        for child in children:
            if child.name.startswith("."):
                continue
            try:
                is_dir = child.is_dir(follow_symlinks=False)
                is_file = child.is_file(follow_symlinks=False)
            except OSError:
                continue

            if is_dir:
                entries.append(BrowseEntry(is_dir=True, uri=f"{prefix}/{child.name}", title=child.name))
            elif is_file and child.name.endswith(".md"):
                view_name = child.name[: -len(".md")] + ".html"
                title = extract_title(
                    Path(child.path),
                    max_lines=self.title_scan_lines,
                    prefix=self.title_prefix,
                )
                entries.append(
                    BrowseEntry(is_dir=False, uri=f"{self.view_root_uri}{prefix}/{view_name}", title=title)
                )
        return entries

    def browse(self, path: str, *, reserve_bytes: int = 0) -> dict:
        """The ``{"browse": [...]}`` fragment for a directory.

        Not a directory gives an empty list. A listing that does not fit in
        ``max_bytes`` minus ``reserve_bytes`` (the caller's envelope around the
        fragment) is dropped as a whole and gives an empty fragment.
        """
        try:
            entries = self.list_entries(path)
        except NotFoundError:
            return {"browse": []}
        try:
            return encode_fragment(entries, self.max_bytes - reserve_bytes)
        except BrowseOverflow as e:
            logger.warning("browse_overflow", extra={"path": path, "entries": len(entries), "reason": str(e)})
            return {}
