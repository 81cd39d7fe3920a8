"""FastAPI application factory exposing the scanner pipeline over HTTP."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from scanner.api import routes
from scanner.exceptions import InvalidSymbol, UnknownProfile, UpstreamUnavailable
from scanner.logging import get_logger

logger = get_logger(__name__)


async def _upstream_unavailable(request: Request, exc: Exception) -> JSONResponse:
    logger.error("upstream_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=503,
        content={"success": False, "error": "Market data unavailable"},
    )


async def _not_found(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"success": False, "error": f"Not found: {exc}"},
    )


def create_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to build and tear down the pipeline.

    Returns:
        Configured FastAPI application with error mapping and routes.
    """
    app = FastAPI(
        title="Explosion Scanner",
        lifespan=lifespan,
    )

    # Wired by main.py lifespan (or directly by tests)
    app.state.pipeline = None

    app.add_exception_handler(UpstreamUnavailable, _upstream_unavailable)
    app.add_exception_handler(InvalidSymbol, _not_found)
    app.add_exception_handler(UnknownProfile, _not_found)

    app.include_router(routes.router, prefix="/api")

    return app
