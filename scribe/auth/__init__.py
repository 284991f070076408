"""
Authentication and authorization.

- passwords: salted PBKDF2 hashing
- jwt: token issue / verify
- policies: the bearer-token gate (``require_auth``)
- ownership: owner checks before mutations

Routes live in ``scribe.auth.routes`` and are mounted by the app.
"""

from scribe.auth.context import AuthContext
from scribe.auth.jwt import TokenPayload, TokenService
from scribe.auth.ownership import ensure_owner
from scribe.auth.passwords import PasswordHasher
from scribe.auth.policies import authenticate, require_auth

__all__ = [
    "AuthContext",
    "PasswordHasher",
    "TokenPayload",
    "TokenService",
    "authenticate",
    "ensure_owner",
    "require_auth",
]
