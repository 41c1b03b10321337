#!/usr/bin/env python3
"""
RentFlow API entry point
"""

import uvicorn

from core.config.settings import settings
from apps.api.app import app


def main():
    """Run the API with uvicorn."""
    uvicorn.run(
        "apps.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload if settings.debug else False,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
