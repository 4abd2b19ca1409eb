"""
Backend entry point.

psycopg3 async needs the selector event loop on Windows.

    python backend/start_server.py
"""

import asyncio
import os
import sys
from pathlib import Path

backend_dir = Path(__file__).parent.absolute()
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

if hasattr(asyncio, "WindowsSelectorEventLoopPolicy"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

import uvicorn


def main() -> None:
    host = os.getenv("BACKEND_HOST", "127.0.0.1")
    port = int(os.getenv("BACKEND_PORT", "8000"))
    reload = os.getenv("ENVIRONMENT", "development") == "development"
    uvicorn.run("vegmap.main:app", host=host, port=port, reload=reload, log_level="info")


if __name__ == "__main__":
    main()
