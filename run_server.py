#!/usr/bin/env python3
"""
TaskSync API Server Launcher

Starts the REST + WebSocket server.

Usage:
    python run_server.py
    python run_server.py --port 3001
    python run_server.py --host 0.0.0.0 --port 9000 --reload
"""

import argparse

import uvicorn

from tasksync.core.config import get_settings


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="TaskSync API server")
    parser.add_argument("--host", default=settings.server.host, help=f"Host to bind (default: {settings.server.host})")
    parser.add_argument("--port", type=int, default=settings.server.port, help=f"Port to bind (default: {settings.server.port})")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    args = parser.parse_args()

    print(f"TaskSync API listening on http://{args.host}:{args.port} (realtime: ws://{args.host}:{args.port}/ws)")

    uvicorn.run(
        "tasksync.api.server:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
