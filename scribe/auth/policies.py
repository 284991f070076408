"""
The auth gate - the dependency that turns a bearer token into an AuthContext.

Usage in routes:

    @router.post("/posts")
    async def create_post(ctx: AuthContext = Depends(require_auth)):
        ...

Steps, each with its own failure:
1. no ``Authorization: Bearer <token>`` header -> NoTokenError
2. token fails verification (signature, shape, expiry) -> InvalidTokenError
3. the token's subject no longer exists -> InvalidTokenError
4. otherwise the context is attached to ``request.state.auth`` and returned
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from scribe.auth.context import AuthContext
from scribe.auth.jwt import TokenService
from scribe.core.errors import InvalidTokenError, NoTokenError
from scribe.storage.base import CredentialStore

logger = logging.getLogger(__name__)


# Optional bearer: a missing header is our error to raise, not FastAPI's.
optional_bearer = HTTPBearer(auto_error=False)


async def authenticate(
    token: str | None,
    tokens: TokenService,
    credentials: CredentialStore,
) -> AuthContext:
    """Verify a raw bearer token and re-confirm its subject still exists."""
    if not token:
        raise NoTokenError()

    user_id = tokens.verify(token)

    if await credentials.find_by_id(user_id) is None:
        logger.info("Token subject %s no longer exists", user_id)
        raise InvalidTokenError()

    return AuthContext(user_id=user_id)


async def require_auth(
    request: Request,
    bearer: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
) -> AuthContext:
    """FastAPI dependency: the verified caller, or a 401."""
    state = request.app.state
    ctx = await authenticate(
        bearer.credentials if bearer else None,
        tokens=state.tokens,
        credentials=state.storage.credentials,
    )
    request.state.auth = ctx
    logger.info("User %s authenticated", ctx.user_id)
    return ctx
