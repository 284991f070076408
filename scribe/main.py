"""
Scribe API - main entry point.

    python -m scribe.main
"""

from __future__ import annotations

import uvicorn

from scribe.api.app import create_app
from scribe.config import get_settings


def main():
    """Run the API server."""
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
