from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from .domain.exceptions import InvalidPath, WriteFailure
from .paths import normalize_file_path, under_root
from .render_cache import RenderCache
from .util import temp_sibling

logger = logging.getLogger("housenote.publish")


class Publisher:
    def __init__(self, content_root: Path, cache: RenderCache) -> None:
        self.content_root = content_root
        self.cache = cache

    def _write(self, target: Path, body: bytes) -> None:
        tmp_path = temp_sibling(target)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fh = tmp_path.open("wb")
        except OSError as e:
            raise WriteFailure("cannot create") from e
        try:
            with fh:
                written = fh.write(body)
            if written != len(body):
                raise WriteFailure("cannot write the data")
            tmp_path.replace(target)
        except OSError as e:
            raise WriteFailure("cannot write the data") from e
        finally:
            tmp_path.unlink(missing_ok=True)

    def publish(self, path: str, body: bytes) -> PurePosixPath:
        """Create or overwrite a content file, then drop its cached rendering.

        Raises PathError for an unusable path and WriteFailure (or its
        InvalidPath subclass) with the message meant for the client.
        """
        rel = normalize_file_path(path)
        target = under_root(self.content_root, rel)

        self._write(target, body)
        logger.info("note_publish", extra={"path": rel.as_posix(), "bytes": len(body)})

        # The source is already replaced at this point, so any render that
        # starts after the invalidation below sees the new content.
        if not rel.suffix:
            raise InvalidPath("no suffix")
        self.cache.invalidate(rel)
        return rel
