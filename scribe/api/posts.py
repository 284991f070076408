"""
Post routes.

Reads are public. Writes need a bearer token, and updates and deletes
are only allowed for the post's owner.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from scribe.api import schemas
from scribe.api.deps import get_post_service, get_settings_from_app
from scribe.api.responses import deleted, success
from scribe.auth.context import AuthContext
from scribe.auth.policies import require_auth
from scribe.config import Settings
from scribe.core.models import CreatePostRequest, UpdatePostRequest
from scribe.services import PostService

router = APIRouter(prefix="/posts", tags=["posts"])


# =============================================================================
# Public Endpoints
# =============================================================================


@router.get("")
async def list_posts(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    settings: Settings = Depends(get_settings_from_app),
    posts: PostService = Depends(get_post_service),
):
    """List posts, newest first."""
    limit = min(limit or settings.default_page_limit, settings.max_page_limit)
    items, pagination = await posts.list_page(page, limit)
    return success(posts=items, pagination=pagination)


@router.get("/{post_id}")
async def get_post(post_id: int, posts: PostService = Depends(get_post_service)):
    post = await posts.get(post_id)
    return success(post=await posts.render(post))


# =============================================================================
# Protected Endpoints
# =============================================================================


@router.post("", status_code=201)
async def create_post(
    data: CreatePostRequest = Depends(schemas.CREATE_POST),
    ctx: AuthContext = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
):
    post = await posts.create(ctx, data)
    return success(post=await posts.render(post))


@router.put("/{post_id}")
async def update_post(
    post_id: int,
    data: UpdatePostRequest = Depends(schemas.UPDATE_POST),
    ctx: AuthContext = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
):
    """Update the fields that were sent. Owner only."""
    post = await posts.update(ctx, post_id, data)
    return success(post=await posts.render(post))


@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    ctx: AuthContext = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
):
    """Delete a post. Owner only."""
    await posts.delete(ctx, post_id)
    return deleted("Post deleted successfully")
