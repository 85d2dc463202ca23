#!/usr/bin/env python3
"""Startup script for the Devalaya API."""
import uvicorn

from app.config import settings

if __name__ == "__main__":
    print(f"Starting Devalaya API on port {settings.port}")
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level="info"
    )
