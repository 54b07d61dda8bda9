"""FastAPI server for Valibook."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from threading import Lock
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from valibook import __version__
from valibook.api.routes import discovery, health, tables, validation
from valibook.connectors import LoaderFactory
from valibook.core.store import ProjectStore
from valibook.errors import UnknownColumnError, UnknownTableError, ValibookError
from valibook.utils.config import get_config
from valibook.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Opens the project store on startup and releases it on shutdown.
    """
    project_path = app.state.project_path
    logger.info(f"Starting Valibook API server (project: {project_path})")

    app.state.store = ProjectStore.open(project_path)
    app.state.loader = LoaderFactory.create_loader("tabular")
    app.state.lock = Lock()
    logger.info(f"Project loaded: {app.state.store}")

    yield

    logger.info("Shutting down Valibook API server")
    app.state.store = None
    app.state.loader = None


def create_app(project_path: Optional[str | Path] = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        project_path: Project metadata file (overrides data.project_file)

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Valibook API",
        description="Column linkage discovery and spreadsheet validation",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.project_path = Path(
        project_path or get_config().get("data.project_file", "./data/project.json")
    )
    app.state.store = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(UnknownTableError)
    @app.exception_handler(UnknownColumnError)
    async def not_found_handler(request: Request, exc: ValibookError):
        return JSONResponse(
            status_code=404, content={"error": "not_found", "message": str(exc)}
        )

    @app.exception_handler(ValibookError)
    async def valibook_exception_handler(request: Request, exc: ValibookError):
        logger.warning(f"Request failed: {exc}")
        return JSONResponse(
            status_code=400, content={"error": "bad_request", "message": str(exc)}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
                "detail": str(exc),
            },
        )

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "Valibook API",
            "version": __version__,
            "endpoints": {
                "health": "/health",
                "tables": "/api/v1/tables",
                "discover": "/api/v1/discover",
                "validate": "/api/v1/validate",
                "docs": "/docs",
            },
        }

    app.include_router(health.router)
    app.include_router(tables.router)
    app.include_router(discovery.router)
    app.include_router(validation.router)

    return app


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(
        create_app(),
        host=config.get("api.host", "0.0.0.0"),
        port=config.get("api.port", 8000),
        log_level="info",
    )
