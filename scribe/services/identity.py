"""
Identity service: registration, login, profiles and user administration.
"""

from __future__ import annotations

import logging

from scribe.auth.context import AuthContext
from scribe.auth.jwt import TokenService
from scribe.auth.ownership import ensure_owner
from scribe.auth.passwords import PasswordHasher
from scribe.core.errors import DuplicateKeyError, InvalidCredentialsError, NotFoundError
from scribe.core.models import (
    CreateUserRequest,
    Identity,
    LoginRequest,
    Post,
    RegisterRequest,
    UpdateProfileRequest,
)
from scribe.storage.base import StorageProvider, UniqueViolationError

logger = logging.getLogger(__name__)

ALREADY_EXISTS = "User with this email or username already exists"
ALREADY_TAKEN = "Email or username already taken"


class IdentityService:
    """Everything that reads or writes identities."""

    def __init__(self, storage: StorageProvider, hasher: PasswordHasher, tokens: TokenService):
        self.storage = storage
        self.hasher = hasher
        self.tokens = tokens

    @property
    def credentials(self):
        return self.storage.credentials

    # =========================================================================
    # Authentication
    # =========================================================================

    async def register(self, data: RegisterRequest) -> tuple[Identity, str]:
        """Create a login-capable identity and return it with a fresh token."""
        user = await self._create(data.username, data.email, data.password)
        logger.info("New user registered: %s", user.user_id)
        return user, self.tokens.issue(user.user_id)

    async def login(self, data: LoginRequest) -> tuple[Identity, str]:
        """
        Exchange email and password for a token.

        Unknown email, wrong password, and password-less identities all
        fail the same way.
        """
        user = await self.credentials.find_by_email(data.email)
        if user is None or not await self.hasher.verify_async(data.password, user.password_hash):
            raise InvalidCredentialsError()

        logger.info("User logged in: %s", user.user_id)
        return user, self.tokens.issue(user.user_id)

    # =========================================================================
    # Users
    # =========================================================================

    async def get_user(self, user_id: int) -> Identity:
        user = await self.credentials.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def list_users(self) -> list[Identity]:
        return await self.credentials.list_all()

    async def create_user(self, data: CreateUserRequest) -> Identity:
        """Administrative create. Without a password the identity cannot log in."""
        user = await self._create(data.username, data.email, data.password)
        logger.info("User created: %s", user.user_id)
        return user

    async def update_profile(self, ctx: AuthContext, data: UpdateProfileRequest) -> Identity:
        current = await self.get_user(ctx.user_id)

        changes = data.model_dump(exclude_none=True)
        if not changes:
            return current

        for other in (
            await self.credentials.find_by_email(changes["email"]) if "email" in changes else None,
            await self.credentials.find_by_username(changes["username"]) if "username" in changes else None,
        ):
            if other is not None and other.user_id != ctx.user_id:
                raise DuplicateKeyError(ALREADY_TAKEN)

        try:
            updated = await self.credentials.update(ctx.user_id, changes)
        except UniqueViolationError:
            raise DuplicateKeyError(ALREADY_TAKEN)
        if updated is None:
            raise NotFoundError("User not found")

        logger.info("User updated: %s", updated.user_id)
        return updated

    async def delete_profile(self, ctx: AuthContext) -> None:
        await self.delete_user(ctx, ctx.user_id)

    async def delete_user(self, ctx: AuthContext, user_id: int) -> None:
        """
        Delete an identity and its posts. An identity only owns itself.

        Outstanding tokens for the identity stop working immediately, since
        the auth gate re-checks that the subject exists.
        """
        await ensure_owner(
            self.credentials.find_by_id,
            user_id,
            ctx,
            owner_of=lambda user: user.user_id,
            label="User",
            action="delete",
        )
        removed = await self.storage.posts.delete_by_owner(user_id)
        await self.credentials.delete(user_id)
        logger.info("User deleted: %s (%d posts removed)", user_id, removed)

    async def list_user_posts(self, user_id: int) -> list[Post]:
        await self.get_user(user_id)
        return await self.storage.posts.list_by_owner(user_id)

    # =========================================================================
    # Internal
    # =========================================================================

    async def _create(self, username: str, email: str, password: str | None) -> Identity:
        # Fast path only: the store's unique index is what actually decides.
        if (
            await self.credentials.find_by_email(email) is not None
            or await self.credentials.find_by_username(username) is not None
        ):
            raise DuplicateKeyError(ALREADY_EXISTS)

        password_hash = await self.hasher.hash_async(password) if password else None

        try:
            return await self.credentials.insert(username, email, password_hash)
        except UniqueViolationError:
            raise DuplicateKeyError(ALREADY_EXISTS)
