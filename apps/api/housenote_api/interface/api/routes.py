import logging
import mimetypes
import os
import time
from typing import BinaryIO, Iterator

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, StreamingResponse

from housenote_api.browse import BrowseGenerator
from housenote_api.config import Settings
from housenote_api.dependencies import (
    get_browser,
    get_publisher,
    get_render_cache,
    get_resolver_chain,
    get_settings,
)
from housenote_api.domain.exceptions import PathError, WriteFailure
from housenote_api.domain.schemas import BrowseOut, HealthOut
from housenote_api.paths import normalize_relative_path
from housenote_api.publish import Publisher
from housenote_api.render_cache import RenderCache
from housenote_api.resolvers import ResolverChain

router = APIRouter()
logger = logging.getLogger("housenote.api")

CHUNK_SIZE = 64 * 1024


def _iter_file(handle: BinaryIO) -> Iterator[bytes]:
    with handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            yield chunk


def _file_response(handle: BinaryIO, name: str) -> StreamingResponse:
    # Streams from the already open file: publish may unlink the path meanwhile.
    media_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
    size = os.fstat(handle.fileno()).st_size
    return StreamingResponse(
        _iter_file(handle),
        media_type=media_type,
        headers={"Content-Length": str(size)},
    )


@router.get("/health", response_model=HealthOut)
def health():
    return HealthOut(ok=True)


@router.get("/note/browse", response_model=BrowseOut)
@router.get("/note/browse/{path:path}", response_model=BrowseOut)
def browse(
    path: str = "",
    settings: Settings = Depends(get_settings),
    browser: BrowseGenerator = Depends(get_browser),
):
    envelope = BrowseOut(host=settings.hostname, timestamp=int(time.time()), note={})
    # The size limit covers the whole response; "{}" is where the fragment goes.
    reserve = len(envelope.model_dump_json().encode("utf-8")) - len("{}")
    envelope.note = browser.browse("/" + path, reserve_bytes=reserve)
    return envelope


@router.api_route("/note/publish/{path:path}", methods=["POST", "PUT"], response_class=PlainTextResponse)
async def publish(
    path: str,
    request: Request,
    publisher: Publisher = Depends(get_publisher),
):
    body = await request.body()
    try:
        await run_in_threadpool(publisher.publish, path, body)
    except PathError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except WriteFailure as e:
        logger.warning(
            "note_publish_failed",
            extra={"rid": getattr(request.state, "request_id", ""), "path": path, "reason": str(e)},
        )
        return PlainTextResponse(str(e), status_code=500)
    return PlainTextResponse("")


@router.get("/note/content/{path:path}")
def content(
    path: str,
    cache: RenderCache = Depends(get_render_cache),
    chain: ResolverChain = Depends(get_resolver_chain),
):
    try:
        rel = normalize_relative_path(path)
    except PathError as e:
        raise HTTPException(status_code=404, detail="not_found") from e
    if not rel.parts:
        raise HTTPException(status_code=404, detail="not_found")

    handle = cache.open_cached(rel)
    if handle is None:
        handle = chain.try_resolve(cache.cache_path(rel).as_posix())
    if handle is None:
        raise HTTPException(status_code=404, detail="not_found")
    return _file_response(handle, rel.name)
