"""
Storage abstraction layer.

All persistence goes through these interfaces. The core never assumes a
particular backend: it relies on the store to enforce unique keys and to
report violations as ``UniqueViolationError``, distinct from any other
fault.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from scribe.core.models import Identity, Post


# =============================================================================
# Errors
# =============================================================================


class StorageError(Exception):
    """Any storage fault. Not operational: surfaces as a 500."""


class UniqueViolationError(StorageError):
    """A unique constraint rejected a write."""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"Unique constraint violated on {field}: {value!r}")


# =============================================================================
# Storage Interfaces
# =============================================================================


class CredentialStore(ABC):
    """
    Identities keyed by id, with unique ``username`` and ``email``.
    """

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Identity | None:
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Identity | None:
        pass

    @abstractmethod
    async def find_by_username(self, username: str) -> Identity | None:
        pass

    async def find_by_key(self, key: str) -> Identity | None:
        """Look up by email or username."""
        return await self.find_by_email(key) or await self.find_by_username(key)

    @abstractmethod
    async def insert(self, username: str, email: str, password_hash: str | None) -> Identity:
        """Create an identity. Raises ``UniqueViolationError`` on a taken key."""
        pass

    @abstractmethod
    async def update(self, user_id: int, fields: dict[str, Any]) -> Identity | None:
        """Partial update. Returns None if the identity is gone."""
        pass

    @abstractmethod
    async def delete(self, user_id: int) -> bool:
        pass

    @abstractmethod
    async def list_all(self) -> list[Identity]:
        pass


class ResourceStore(ABC):
    """
    Owned posts.
    """

    @abstractmethod
    async def find_by_id(self, post_id: int) -> Post | None:
        pass

    @abstractmethod
    async def insert(self, owner_id: int, fields: dict[str, Any]) -> Post:
        pass

    @abstractmethod
    async def update(self, post_id: int, fields: dict[str, Any]) -> Post | None:
        """Partial update. ``owner_id`` is never changed."""
        pass

    @abstractmethod
    async def delete(self, post_id: int) -> bool:
        pass

    @abstractmethod
    async def list_page(self, offset: int, limit: int) -> tuple[list[Post], int]:
        """Newest first. Returns (items, total_count)."""
        pass

    @abstractmethod
    async def list_by_owner(self, owner_id: int) -> list[Post]:
        pass

    @abstractmethod
    async def delete_by_owner(self, owner_id: int) -> int:
        """Delete every post of one owner, returning how many were removed."""
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for all storage backends.

    Initialize once at app startup with appropriate implementations.
    """

    model_config = {"arbitrary_types_allowed": True}

    credentials: CredentialStore
    posts: ResourceStore
