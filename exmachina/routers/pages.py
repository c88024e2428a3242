import logging
import re

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse, Response

from exmachina import dependencies as deps
from exmachina.services.feed_service import FeedService
from exmachina.services.manifest_service import FAVICON_SIZE, ICON_SIZES, ManifestService
from exmachina.services.page_renderer import PageRenderer
from exmachina.services.posts_service import PostsService
from exmachina.settings import settings

logger = logging.getLogger(__name__)

ICON_NAME_RE = re.compile(r"^icon-(\d+)x\1\.png$")

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def index_page(
    service: PostsService = Depends(deps.get_posts_service),
    renderer: PageRenderer = Depends(deps.get_page_renderer),
):
    """Render the post listing."""
    try:
        return HTMLResponse(renderer.render_index(service.list_posts()))
    except Exception as e:
        logger.error(f"Unexpected error rendering index: {e}")
        raise HTTPException(status_code=500, detail="Failed to render index")


@router.get("/rss.xml")
def rss_feed(
    service: PostsService = Depends(deps.get_posts_service),
    renderer: PageRenderer = Depends(deps.get_page_renderer),
    config=Depends(deps.get_site_config),
):
    options = config.plugin_options("feed")
    if options is None:
        raise HTTPException(status_code=404, detail="Feed not configured")
    try:
        posts = [service.get_post(summary.slug) for summary in service.list_posts()]
        feed = FeedService(
            renderer.env, config.siteMetadata, options, path_prefix=settings.path_prefix
        )
        return Response(
            content=feed.render([post for post in posts if post]),
            media_type="application/rss+xml",
        )
    except Exception as e:
        logger.error(f"Unexpected error rendering feed: {e}")
        raise HTTPException(status_code=500, detail="Failed to render feed")


@router.get("/manifest.webmanifest")
def web_manifest(manifest: ManifestService = Depends(deps.get_manifest_service)):
    if manifest is None:
        raise HTTPException(status_code=404, detail="Manifest not configured")
    return JSONResponse(manifest.manifest(), media_type="application/manifest+json")


def _icon_response(manifest: ManifestService, size: int) -> Response:
    if manifest is None or manifest.icon_path is None or not manifest.icon_path.is_file():
        raise HTTPException(status_code=404, detail="Icon not found")
    try:
        return Response(content=manifest.icon_png(size), media_type="image/png")
    except Exception as e:
        logger.error(f"Unexpected error resizing icon to {size}px: {e}")
        raise HTTPException(status_code=500, detail="Failed to render icon")


@router.get(f"/favicon-{FAVICON_SIZE}x{FAVICON_SIZE}.png")
def favicon(manifest: ManifestService = Depends(deps.get_manifest_service)):
    return _icon_response(manifest, FAVICON_SIZE)


@router.get("/icons/{name}")
def manifest_icon(name: str, manifest: ManifestService = Depends(deps.get_manifest_service)):
    match = ICON_NAME_RE.match(name)
    if not match or int(match.group(1)) not in ICON_SIZES:
        raise HTTPException(status_code=404, detail="Icon not found")
    return _icon_response(manifest, int(match.group(1)))


@router.get("/{slug:path}", response_class=HTMLResponse)
def post_page(
    slug: str,
    service: PostsService = Depends(deps.get_posts_service),
    renderer: PageRenderer = Depends(deps.get_page_renderer),
):
    """Render a single post, or the not-found page."""
    try:
        post = service.get_post(slug)
        if not post:
            return HTMLResponse(renderer.render_not_found(), status_code=404)
        navigation = service.get_navigation(post.slug)
        return HTMLResponse(renderer.render_post(post, navigation))
    except Exception as e:
        logger.error(f"Unexpected error rendering post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to render post")
