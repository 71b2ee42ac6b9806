"""
Main application module for the scrollpath backend.

This file sets up the FastAPI application, configures CORS so a
browser frontend can make cross-origin requests, mounts the static
frontend files when they exist, and exposes a simple health check
endpoint.

Routers for the curve and session APIs are included under the `/api`
namespace.
"""

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .api.routes_curves import router as curves_router
from .api.routes_sessions import router as sessions_router
from .services.curves_store import init_db


def create_app() -> FastAPI:
    """Factory to create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.
    """
    app = FastAPI(title="scrollpath")

    # Create the SQLite schema before any requests are processed.  The
    # init_db function is idempotent and safe to call multiple times.
    @app.on_event("startup")  # type: ignore[misc]
    async def startup_event() -> None:
        init_db()

    # Allow all origins by default.  In production you should restrict
    # this to the domains that are allowed to access your API.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoint for monitoring and deployment probes.
    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(curves_router, prefix="/api", tags=["curves"])
    app.include_router(sessions_router, prefix="/api", tags=["sessions"])

    # Serve a compiled frontend from the repository's frontend/ directory
    # when one is present.
    frontend_dir = Path(__file__).resolve().parents[2] / "frontend"
    if frontend_dir.exists():
        app.mount(
            "/",
            StaticFiles(directory=str(frontend_dir), html=True),
            name="frontend",
        )

    return app


# Create the application instance.  Uvicorn imports this when running
# `uvicorn scrollpath.main:app` from within backend/.
app = create_app()
