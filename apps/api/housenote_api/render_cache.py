from __future__ import annotations

import logging
import time
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from .domain.exceptions import NotFoundError, PathError, RenderFailure
from .domain.ports import MarkdownRenderer
from .locks import KeyedLocks, SingleFlight
from .paths import normalize_relative_path, under_root
from .util import atomic_write_text, with_html_suffix, with_markdown_suffix

logger = logging.getLogger("housenote.render")

RENDER_ATTEMPTS = 3


class RenderCache:
    """Lazily rendered HTML mirror of the content tree.

    A file under ``cache_root`` is trusted as long as it exists: publish is the
    only thing that removes it, and the next request for it renders it again
    from the markdown source under ``content_root``.
    """

    def __init__(
        self,
        content_root: Path,
        cache_root: Path,
        renderer: MarkdownRenderer,
        locks: KeyedLocks | None = None,
        flights: SingleFlight | None = None,
    ) -> None:
        self.content_root = content_root
        self.cache_root = cache_root
        self.renderer = renderer
        self.locks = locks or KeyedLocks()
        self.flights = flights or SingleFlight()

    def _relative_to_cache(self, requested: str) -> PurePosixPath:
        root = self.cache_root.as_posix()
        if not requested.startswith(root + "/"):
            raise NotFoundError("path_outside_cache")
        try:
            rel = normalize_relative_path(requested[len(root) :])
            under_root(self.cache_root, rel)
        except PathError as e:
            raise NotFoundError(str(e)) from e
        if not rel.parts:
            raise NotFoundError("path_empty")
        return rel

    def cache_path(self, rel: PurePosixPath) -> Path:
        return self.cache_root / rel

    def lock_key(self, rel: PurePosixPath) -> str:
        return self.cache_path(rel).as_posix()

    def open_cached(self, rel: PurePosixPath) -> BinaryIO | None:
        """Open an existing cache file, or None when there is none.

        An open file stays readable after publish unlinks the path.
        """
        try:
            return self.cache_path(rel).open("rb")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None

    def resolve(self, requested: str) -> BinaryIO:
        """Open a readable file for an absolute cache path that has no file yet.

        Paths not ending in ``.html`` are served straight from the content tree.
        Raises NotFoundError when there is nothing to serve and RenderFailure
        when the markdown source exists but could not be turned into a cache file.
        The caller owns the returned file and must close it.
        """
        rel = self._relative_to_cache(requested)

        if rel.suffix != ".html":
            try:
                asset = under_root(self.content_root, rel)
                return asset.open("rb")
            except PathError as e:
                raise NotFoundError(str(e)) from e
            except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
                raise NotFoundError(rel.as_posix()) from e

        key = self.lock_key(rel)
        for _ in range(RENDER_ATTEMPTS):
            self.flights.do(key, lambda: self._render_locked(rel, key))
            # Publish may have invalidated the file since the render finished;
            # render again from the new source in that case.
            with self.locks.hold(key):
                handle = self.open_cached(rel)
            if handle is not None:
                return handle
        raise RenderFailure("cache_invalidated_during_render")

    def _render_locked(self, rel: PurePosixPath, key: str) -> Path:
        with self.locks.hold(key):
            target = self.cache_path(rel)
            # Another request may have rendered it while this one was waiting.
            if target.is_file():
                return target
            return self._render(rel, target)

    def _render(self, rel: PurePosixPath, target: Path) -> Path:
        try:
            source = under_root(self.content_root, with_markdown_suffix(rel))
        except PathError as e:
            raise NotFoundError(str(e)) from e
        try:
            markdown_text = source.read_text(encoding="utf-8", errors="replace")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise NotFoundError(rel.as_posix()) from e
        except OSError as e:
            raise RenderFailure("source_unreadable") from e

        start = time.perf_counter()
        html = self.renderer.render(markdown_text)
        try:
            atomic_write_text(target, html)
        except OSError as e:
            raise RenderFailure("cache_write_failed") from e

        dt_ms = (time.perf_counter() - start) * 1000.0
        logger.info("note_render", extra={"path": rel.as_posix(), "bytes": len(html), "ms": dt_ms})
        return target

    def try_resolve(self, requested: str) -> BinaryIO | None:
        try:
            return self.resolve(requested)
        except NotFoundError:
            return None
        except RenderFailure as e:
            logger.warning("note_render_failed", extra={"requested": requested, "reason": str(e)})
            return None

    def invalidate(self, rel: PurePosixPath) -> bool:
        """Drop the cached rendering of a content file. Returns True if one existed."""
        html_rel = with_html_suffix(rel)
        with self.locks.hold(self.lock_key(html_rel)):
            target = self.cache_path(html_rel)
            existed = target.exists()
            target.unlink(missing_ok=True)
        if existed:
            logger.info("note_invalidate", extra={"path": html_rel.as_posix()})
        return existed
