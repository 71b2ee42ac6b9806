"""
Entry point for the scrollpath service.

Running this script with ``python run.py`` starts the FastAPI server
that stores curve documents and hosts navigation sessions.  The
application defined in ``backend/scrollpath/main.py`` is imported after
adjusting the Python path to include the ``backend`` directory.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import logging
import uvicorn

logging.basicConfig(
    level=getattr(logging, os.getenv("SCROLLPATH_LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def main() -> None:
    """Run the Uvicorn server hosting the scrollpath application."""
    # Make ``scrollpath`` importable as a top-level package when the
    # project has not been installed.
    backend_dir = Path(__file__).resolve().parent / "backend"
    if str(backend_dir) not in sys.path:
        sys.path.append(str(backend_dir))

    from scrollpath.main import app  # type: ignore

    host = os.getenv("SCROLLPATH_HOST", "0.0.0.0")
    port = int(os.getenv("SCROLLPATH_PORT", "8000"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
