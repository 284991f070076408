"""
Dependencies - services built at startup, looked up per request.
"""

from __future__ import annotations

from fastapi import Request

from scribe.config import Settings
from scribe.services import IdentityService, PostService


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity_service


def get_post_service(request: Request) -> PostService:
    return request.app.state.post_service
