"""
User routes. All of them require a bearer token.

The caller's own account lives under ``/users/profile``. An identity is
owned by itself, so ``DELETE /users/{user_id}`` only succeeds for the
caller's own id.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from scribe.api import schemas
from scribe.api.deps import get_identity_service
from scribe.api.responses import deleted, success
from scribe.auth.context import AuthContext
from scribe.auth.policies import require_auth
from scribe.core.models import CreateUserRequest, UpdateProfileRequest, UserResponse
from scribe.services import IdentityService

router = APIRouter(prefix="/users", tags=["users"])


# =============================================================================
# Profile
# =============================================================================


@router.get("/profile")
async def get_profile(
    ctx: AuthContext = Depends(require_auth),
    identities: IdentityService = Depends(get_identity_service),
):
    user = await identities.get_user(ctx.user_id)
    return success(user=UserResponse.from_identity(user))


@router.put("/profile")
async def update_profile(
    data: UpdateProfileRequest = Depends(schemas.UPDATE_PROFILE),
    ctx: AuthContext = Depends(require_auth),
    identities: IdentityService = Depends(get_identity_service),
):
    user = await identities.update_profile(ctx, data)
    return success(user=UserResponse.from_identity(user))


@router.delete("/profile")
async def delete_profile(
    ctx: AuthContext = Depends(require_auth),
    identities: IdentityService = Depends(get_identity_service),
):
    """Delete the caller's account and all of its posts."""
    await identities.delete_profile(ctx)
    return deleted("User deleted successfully")


# =============================================================================
# Users
# =============================================================================


@router.get("")
async def list_users(
    ctx: AuthContext = Depends(require_auth),
    identities: IdentityService = Depends(get_identity_service),
):
    users = await identities.list_users()
    return success(users=[UserResponse.from_identity(u) for u in users])


@router.post("", status_code=201)
async def create_user(
    data: CreateUserRequest = Depends(schemas.CREATE_USER),
    ctx: AuthContext = Depends(require_auth),
    identities: IdentityService = Depends(get_identity_service),
):
    """Create a user. Without a password the new account cannot log in."""
    user = await identities.create_user(data)
    return success(user=UserResponse.from_identity(user))


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    ctx: AuthContext = Depends(require_auth),
    identities: IdentityService = Depends(get_identity_service),
):
    user = await identities.get_user(user_id)
    return success(user=UserResponse.from_identity(user))


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    ctx: AuthContext = Depends(require_auth),
    identities: IdentityService = Depends(get_identity_service),
):
    await identities.delete_user(ctx, user_id)
    return deleted("User deleted successfully")


@router.get("/{user_id}/posts")
async def list_user_posts(
    user_id: int,
    ctx: AuthContext = Depends(require_auth),
    identities: IdentityService = Depends(get_identity_service),
):
    posts = await identities.list_user_posts(user_id)
    return success(posts=posts)
