#!/usr/bin/env python
"""Run the FastAPI server."""

import uvicorn

from mongo_backup.api.config import settings


def main():
    """Run the FastAPI application."""
    uvicorn.run(
        "mongo_backup.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level="info"
    )


if __name__ == "__main__":
    main()
