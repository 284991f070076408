"""
Post service: public reads, owner-only writes.
"""

from __future__ import annotations

import logging

from scribe.auth.context import AuthContext
from scribe.auth.ownership import ensure_owner
from scribe.core.errors import NotFoundError
from scribe.core.models import (
    CreatePostRequest,
    Pagination,
    Post,
    PostResponse,
    UpdatePostRequest,
)
from scribe.storage.base import StorageProvider

logger = logging.getLogger(__name__)


class PostService:
    def __init__(self, storage: StorageProvider):
        self.storage = storage

    @property
    def posts(self):
        return self.storage.posts

    async def list_page(self, page: int, limit: int) -> tuple[list[PostResponse], Pagination]:
        """One page of posts, newest first. ``page`` is 1-based."""
        items, total = await self.posts.list_page((page - 1) * limit, limit)
        return [await self.render(p) for p in items], Pagination.build(page, limit, total)

    async def get(self, post_id: int) -> Post:
        post = await self.posts.find_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    async def create(self, ctx: AuthContext, data: CreatePostRequest) -> Post:
        post = await self.posts.insert(ctx.user_id, data.model_dump())
        logger.info("Post created by user %s: %s", ctx.user_id, post.post_id)
        return post

    async def update(self, ctx: AuthContext, post_id: int, data: UpdatePostRequest) -> Post:
        """Apply only the fields that were sent."""
        current = await ensure_owner(self.posts.find_by_id, post_id, ctx, action="update")

        changes = data.model_dump(exclude_none=True)
        if not changes:
            return current

        updated = await self.posts.update(post_id, changes)
        if updated is None:
            # Deleted between the ownership check and the write.
            raise NotFoundError("Post not found")

        logger.info("Post %s updated", post_id)
        return updated

    async def delete(self, ctx: AuthContext, post_id: int) -> None:
        await ensure_owner(self.posts.find_by_id, post_id, ctx, action="delete")
        await self.posts.delete(post_id)
        logger.info("Post %s deleted", post_id)

    async def render(self, post: Post) -> PostResponse:
        """Attach the author's username for display."""
        author = await self.storage.credentials.find_by_id(post.owner_id)
        return PostResponse.from_post(post, author.username if author else None)
