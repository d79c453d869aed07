#!/usr/bin/env python3
"""
Startup script for the Task Manager Backend
This script starts the FastAPI server with proper configuration
"""

import uvicorn

from app.config.settings import settings


def main():
    print("Starting Task Manager Backend Server...")
    print(f"Host: {settings.HOST}")
    print(f"Port: {settings.PORT}")
    print(f"Reload: {settings.RELOAD}")
    print("=" * 50)

    # Start the server
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )

if __name__ == "__main__":
    main()
