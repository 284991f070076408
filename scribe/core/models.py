"""
Core data models.

Identities own posts. Stored records carry everything; the ``*Response``
models are what leaves the API (no password hashes).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from scribe.core.utils import total_pages, utc_now


# =============================================================================
# Stored records
# =============================================================================


class Identity(BaseModel):
    """An account that can own posts, and log in when it has a password."""

    user_id: int
    username: str
    email: str
    password_hash: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def can_authenticate(self) -> bool:
        return self.password_hash is not None


class Post(BaseModel):
    """A post. ``owner_id`` is fixed at creation."""

    post_id: int
    owner_id: int
    title: str
    content: str
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# Responses
# =============================================================================


class UserResponse(BaseModel):
    """User data returned to client (no sensitive fields)."""

    user_id: int
    username: str
    email: str
    created_at: datetime

    @classmethod
    def from_identity(cls, identity: Identity) -> UserResponse:
        return cls(
            user_id=identity.user_id,
            username=identity.username,
            email=identity.email,
            created_at=identity.created_at,
        )


class PostResponse(BaseModel):
    post_id: int
    owner_id: int
    author_name: str | None = None
    title: str
    content: str
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_post(cls, post: Post, author_name: str | None = None) -> PostResponse:
        return cls(**post.model_dump(), author_name=author_name)


class Pagination(BaseModel):
    """Page metadata, serialized with the camelCase keys of the wire contract."""

    current_page: int = Field(serialization_alias="currentPage")
    total_pages: int = Field(serialization_alias="totalPages")
    limit: int
    total_items: int = Field(serialization_alias="totalItems")

    @classmethod
    def build(cls, page: int, limit: int, total_items: int) -> Pagination:
        return cls(
            current_page=page,
            total_pages=total_pages(total_items, limit),
            limit=limit,
            total_items=total_items,
        )


# =============================================================================
# Requests
#
# Field rules live in scribe.core.validation; these models only shape the
# body once it has passed.
# =============================================================================


class _EmailNormalized(BaseModel):
    @field_validator("email", check_fields=False)
    @classmethod
    def _lower_email(cls, value: str | None) -> str | None:
        return value.lower() if value is not None else None


class RegisterRequest(_EmailNormalized):
    username: str
    email: EmailStr
    password: str


class LoginRequest(_EmailNormalized):
    email: EmailStr
    password: str


class CreateUserRequest(_EmailNormalized):
    username: str
    email: EmailStr
    password: str | None = None


class UpdateProfileRequest(_EmailNormalized):
    username: str | None = None
    email: EmailStr | None = None


class CreatePostRequest(BaseModel):
    title: str
    content: str
    tags: list[str] | None = None


class UpdatePostRequest(BaseModel):
    title: str | None = None
    content: str | None = None
    tags: list[str] | None = None
