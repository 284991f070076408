"""
Services - what the routes call.

Each service takes its collaborators at construction and holds no
per-request state.
"""

from scribe.services.identity import IdentityService
from scribe.services.posts import PostService

__all__ = ["IdentityService", "PostService"]
