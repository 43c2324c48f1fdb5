from functools import lru_cache

from housenote_api.browse import BrowseGenerator
from housenote_api.config import load_settings
from housenote_api.publish import Publisher
from housenote_api.render_cache import RenderCache
from housenote_api.rendering import PythonMarkdownRenderer
from housenote_api.resolvers import ResolverChain


@lru_cache()
def get_settings():
    return load_settings()


@lru_cache()
def get_renderer():
    settings = get_settings()
    return PythonMarkdownRenderer(settings.markdown_extensions)


@lru_cache()
def get_render_cache():
    settings = get_settings()
    return RenderCache(settings.content_root, settings.cache_root, get_renderer())


@lru_cache()
def get_resolver_chain():
    # Extra resolvers go in front; the render cache is always the last resort.
    return ResolverChain([get_render_cache()])


@lru_cache()
def get_browser():
    settings = get_settings()
    return BrowseGenerator(
        settings.content_root,
        settings.view_root_uri,
        max_bytes=settings.browse_max_bytes,
        title_scan_lines=settings.title_scan_lines,
        title_prefix=settings.title_prefix,
    )


@lru_cache()
def get_publisher():
    settings = get_settings()
    return Publisher(settings.content_root, get_render_cache())


def clear_caches() -> None:
    for getter in (
        get_settings,
        get_renderer,
        get_render_cache,
        get_resolver_chain,
        get_browser,
        get_publisher,
    ):
        getter.cache_clear()
