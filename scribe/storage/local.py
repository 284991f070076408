"""
In-memory storage implementations for development and tests.

Each store serialises its writes behind an ``asyncio.Lock`` so that the
unique-key check and the insert happen as one step, the way a database
unique index would.
"""

from __future__ import annotations

import asyncio
from itertools import count
from typing import Any

from scribe.core.models import Identity, Post
from scribe.core.utils import utc_now
from scribe.storage.base import (
    CredentialStore,
    ResourceStore,
    StorageProvider,
    UniqueViolationError,
)


# =============================================================================
# Identities
# =============================================================================


class InMemoryCredentialStore(CredentialStore):
    """Identity records with unique username and email indexes."""

    def __init__(self):
        self._users: dict[int, Identity] = {}
        self._ids = count(1)
        self._lock = asyncio.Lock()

    async def find_by_id(self, user_id: int) -> Identity | None:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def find_by_email(self, email: str) -> Identity | None:
        return self._find(lambda u: u.email == email.lower())

    async def find_by_username(self, username: str) -> Identity | None:
        return self._find(lambda u: u.username == username)

    def _find(self, predicate) -> Identity | None:
        for user in self._users.values():
            if predicate(user):
                return user.model_copy()
        return None

    def _check_unique(self, user_id: int | None, username: str | None, email: str | None) -> None:
        for other in self._users.values():
            if other.user_id == user_id:
                continue
            if email is not None and other.email == email:
                raise UniqueViolationError("email", email)
            if username is not None and other.username == username:
                raise UniqueViolationError("username", username)

    async def insert(self, username: str, email: str, password_hash: str | None) -> Identity:
        email = email.lower()
        async with self._lock:
            self._check_unique(None, username, email)
            user = Identity(
                user_id=next(self._ids),
                username=username,
                email=email,
                password_hash=password_hash,
            )
            self._users[user.user_id] = user
        return user.model_copy()

    async def update(self, user_id: int, fields: dict[str, Any]) -> Identity | None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            changes = {k: v for k, v in fields.items() if k in ("username", "email", "password_hash")}
            if "email" in changes:
                changes["email"] = changes["email"].lower()
            self._check_unique(user_id, changes.get("username"), changes.get("email"))
            updated = user.model_copy(update={**changes, "updated_at": utc_now()})
            self._users[user_id] = updated
        return updated.model_copy()

    async def delete(self, user_id: int) -> bool:
        async with self._lock:
            return self._users.pop(user_id, None) is not None

    async def list_all(self) -> list[Identity]:
        return [u.model_copy() for u in self._users.values()]


# =============================================================================
# Posts
# =============================================================================


class InMemoryPostStore(ResourceStore):
    """Post records in insertion order."""

    _MUTABLE_FIELDS = ("title", "content", "tags")

    def __init__(self):
        self._posts: dict[int, Post] = {}
        self._ids = count(1)
        self._lock = asyncio.Lock()

    async def find_by_id(self, post_id: int) -> Post | None:
        post = self._posts.get(post_id)
        return post.model_copy(deep=True) if post else None

    async def insert(self, owner_id: int, fields: dict[str, Any]) -> Post:
        async with self._lock:
            post = Post(
                post_id=next(self._ids),
                owner_id=owner_id,
                title=fields["title"],
                content=fields["content"],
                tags=list(fields.get("tags") or []),
            )
            self._posts[post.post_id] = post
        return post.model_copy(deep=True)

    async def update(self, post_id: int, fields: dict[str, Any]) -> Post | None:
        async with self._lock:
            post = self._posts.get(post_id)
            if post is None:
                return None
            changes = {k: v for k, v in fields.items() if k in self._MUTABLE_FIELDS}
            updated = post.model_copy(update={**changes, "updated_at": utc_now()}, deep=True)
            self._posts[post_id] = updated
        return updated.model_copy(deep=True)

    async def delete(self, post_id: int) -> bool:
        async with self._lock:
            return self._posts.pop(post_id, None) is not None

    async def list_page(self, offset: int, limit: int) -> tuple[list[Post], int]:
        newest_first = sorted(self._posts.values(), key=lambda p: (p.created_at, p.post_id), reverse=True)
        page = newest_first[offset:offset + limit]
        return [p.model_copy(deep=True) for p in page], len(newest_first)

    async def list_by_owner(self, owner_id: int) -> list[Post]:
        owned = [p for p in self._posts.values() if p.owner_id == owner_id]
        owned.sort(key=lambda p: (p.created_at, p.post_id), reverse=True)
        return [p.model_copy(deep=True) for p in owned]

    async def delete_by_owner(self, owner_id: int) -> int:
        async with self._lock:
            doomed = [pid for pid, p in self._posts.items() if p.owner_id == owner_id]
            for pid in doomed:
                del self._posts[pid]
        return len(doomed)


# =============================================================================
# Factory
# =============================================================================


def create_local_storage() -> StorageProvider:
    """Create a StorageProvider with in-memory implementations."""
    return StorageProvider(
        credentials=InMemoryCredentialStore(),
        posts=InMemoryPostStore(),
    )
