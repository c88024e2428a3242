import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from exmachina import dependencies as deps
from exmachina.repos.posts_repo import normalize_slug
from exmachina.schemas.blog import NavigationContext, PostDetail, PostSummary
from exmachina.services.posts_service import PostsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/posts", response_model=List[PostSummary])
def list_posts(service: PostsService = Depends(deps.get_posts_service)):
    """Get all posts metadata, newest first."""
    try:
        return service.list_posts()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error listing posts: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve posts")


@router.get("/posts/{slug:path}/navigation", response_model=NavigationContext)
def get_post_navigation(
    slug: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Previous (older) and next (newer) posts around a slug."""
    try:
        posts = service.list_posts()
        if not any(post.slug == normalize_slug(slug) for post in posts):
            raise HTTPException(status_code=404, detail="Post not found")
        return service.get_navigation(slug, posts)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error building navigation for {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve navigation")


@router.get("/posts/{slug:path}", response_model=PostDetail)
def get_post(
    slug: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Get a single post by slug."""
    try:
        post = service.get_post(slug)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")
        return post
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error retrieving post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve post")
