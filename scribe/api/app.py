"""
FastAPI application for Scribe.

Request pipeline, outermost first:

    CORS
    RequestLoggingMiddleware      every request logged with an id
    ErrorBoundaryMiddleware       unexpected exceptions -> response policy
    route dependencies            body validation, then the auth gate
    handler / service             ownership checks before mutations

Every error, wherever it is raised, is rendered by the single
``ResponsePolicy`` held on ``app.state``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scribe import __version__
from scribe.api import posts, users
from scribe.api.errors import ResponsePolicy, register_exception_handlers
from scribe.api.middleware import ErrorBoundaryMiddleware, RequestLoggingMiddleware
from scribe.api.responses import success
from scribe.auth import routes as auth_routes
from scribe.auth.jwt import TokenService
from scribe.auth.passwords import PasswordHasher
from scribe.config import Settings, get_settings
from scribe.integrations.sentry import init_sentry
from scribe.logging import setup_logging
from scribe.services import IdentityService, PostService
from scribe.storage import StorageProvider, create_local_storage

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the process-wide collaborators once, from the frozen settings."""
    settings: Settings = app.state.settings

    setup_logging(settings.log_level)
    init_sentry(settings)

    storage: StorageProvider | None = app.state.storage
    if storage is None:
        storage = create_local_storage()
    hasher = PasswordHasher(iterations=settings.password_hash_iterations)
    tokens = TokenService.from_settings(settings)

    app.state.storage = storage
    app.state.tokens = tokens
    app.state.identity_service = IdentityService(storage, hasher, tokens)
    app.state.post_service = PostService(storage)

    logger.info(
        "Scribe API starting",
        extra={"environment": settings.environment, "verbose_errors": settings.verbose_errors},
    )

    yield

    logger.info("Scribe API shutting down")


# =============================================================================
# App Setup
# =============================================================================


def create_app(settings: Settings | None = None, storage: StorageProvider | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the environment.
        storage: Storage backends; defaults to in-memory stores.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Scribe API",
        description="Users and their posts behind bearer-token authentication",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage

    policy = ResponsePolicy(verbose=settings.verbose_errors)
    app.state.response_policy = policy
    register_exception_handlers(app)

    @app.get(f"{API_PREFIX}/health", tags=["operations"])
    async def health_check():
        """Health check endpoint."""
        return success(service=settings.app_name, healthy=True)

    app.include_router(auth_routes.router, prefix=API_PREFIX)
    app.include_router(users.router, prefix=API_PREFIX)
    app.include_router(posts.router, prefix=API_PREFIX)

    # add_middleware wraps: the last one added is the outermost.
    app.add_middleware(ErrorBoundaryMiddleware, policy=policy)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    return app
