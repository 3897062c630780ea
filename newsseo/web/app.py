"""
aiohttp web application serving the sitemap, article pages and AMP pages.
"""
import asyncio
import logging
import threading
from typing import Optional, Tuple

from aiohttp import web

from newsseo.config import SiteSettings
from newsseo.core.exceptions import NewsSeoError
from newsseo.core.store import ArticleStore
from newsseo.formatters.amp import AmpRenderer
from newsseo.formatters.html import ArticlePageRenderer
from newsseo.formatters.sitemap import SitemapGenerator

# Configure logging
logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey("store", ArticleStore)
SETTINGS_KEY = web.AppKey("settings", SiteSettings)

routes = web.RouteTableDef()


class SitemapCache:
    """
    Holds the last rendered sitemap until the store changes.

    Called from executor threads; the lock keeps the document and its
    fingerprint in step.
    """
    def __init__(self, generator: SitemapGenerator):
        self.generator = generator
        self._lock = threading.Lock()
        self._fingerprint: Optional[Tuple] = None
        self._document: Optional[bytes] = None

    def get(self, store: ArticleStore) -> bytes:
        with self._lock:
            fingerprint = store.fingerprint()
            if self._document is None or fingerprint != self._fingerprint:
                self._document = self.generator.render(store.all())
                self._fingerprint = fingerprint
                logger.info(f"Regenerated sitemap ({fingerprint[0]} articles)")
            return self._document


SITEMAP_KEY = web.AppKey("sitemap", SitemapCache)


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Turn unhandled newsseo errors into logged 500 responses."""
    try:
        return await handler(request)
    except NewsSeoError as e:
        logger.error(f"Error serving {request.path}: {e.to_dict()}")
        raise web.HTTPInternalServerError(text="Internal Server Error") from e


def _article_or_404(request: web.Request):
    slug = request.match_info['slug']
    article = request.app[STORE_KEY].get(slug)
    if article is None:
        logger.info(f"Unknown article slug requested: {slug}")
        raise web.HTTPNotFound(text=f"Article not found: {slug}")
    return article


@routes.get('/sitemap.xml')
async def sitemap(request: web.Request) -> web.Response:
    # sqlite3 calls block, so the rebuild runs off the event loop
    loop = asyncio.get_running_loop()
    document = await loop.run_in_executor(None, request.app[SITEMAP_KEY].get, request.app[STORE_KEY])
    return web.Response(body=document, content_type='application/xml', charset='utf-8')


@routes.get('/robots.txt')
async def robots(request: web.Request) -> web.Response:
    return web.Response(text=request.app[SITEMAP_KEY].generator.render_robots(), content_type='text/plain')


@routes.get('/articles/{slug}')
async def article_page(request: web.Request) -> web.Response:
    article = _article_or_404(request)
    page = ArticlePageRenderer(request.app[SETTINGS_KEY]).render(article)
    return web.Response(text=page, content_type='text/html')


@routes.get('/articles/{slug}/amp')
async def amp_page(request: web.Request) -> web.Response:
    article = _article_or_404(request)
    page = AmpRenderer(request.app[SETTINGS_KEY]).render(article)
    return web.Response(text=page, content_type='text/html')


def create_app(settings: SiteSettings, store: ArticleStore) -> web.Application:
    """
    Build the web application.

    Args:
        settings: Site settings
        store: Article store to serve from

    Returns:
        Configured aiohttp application
    """
    app = web.Application(middlewares=[error_middleware])
    app[SETTINGS_KEY] = settings
    app[STORE_KEY] = store
    app[SITEMAP_KEY] = SitemapCache(SitemapGenerator(settings))
    app.add_routes(routes)
    return app
