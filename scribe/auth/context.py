"""
Auth context - the verified caller for a request.

Built by the auth gate once the token and the identity behind it have
both checked out. Handlers read ``user_id`` from it; nothing else in the
request is trusted to say who the caller is.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthContext:
    """Authorization context for a request."""

    user_id: int

    def owns(self, owner_id: int) -> bool:
        """Is the caller the recorded owner of something?"""
        return self.user_id == owner_id
