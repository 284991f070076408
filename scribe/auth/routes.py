# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /auth/register     - Create account, returns a token
#   POST /auth/login        - Exchange credentials for a token
#
# Both are public. Tokens are not refreshed: log in again after expiry.
#
# =============================================================================

from fastapi import APIRouter, Depends

from scribe.api import schemas
from scribe.api.deps import get_identity_service
from scribe.api.responses import success
from scribe.core.models import LoginRequest, RegisterRequest, UserResponse
from scribe.services import IdentityService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register(
    data: RegisterRequest = Depends(schemas.REGISTER),
    identities: IdentityService = Depends(get_identity_service),
):
    """
    Create a new account.

    Returns the user and an access token on success.
    """
    user, token = await identities.register(data)
    return success(user=UserResponse.from_identity(user), token=token)


@router.post("/login")
async def login(
    data: LoginRequest = Depends(schemas.LOGIN),
    identities: IdentityService = Depends(get_identity_service),
):
    """
    Authenticate and get a token.
    """
    user, token = await identities.login(data)
    return success(user=UserResponse.from_identity(user), token=token)
