# ABOUTME: FastAPI application hosting the Argo CD proxy routes
# ABOUTME: Wires settings, correlation IDs, error handling and the server entry point

"""Backstage backend plugins - HTTP server for the Argo CD proxy."""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backstage_plugins.argocd.client import ArgocdError
from backstage_plugins.argocd.router import create_router
from backstage_plugins.argocd.service import ArgoService
from backstage_plugins.config import ServerSettings, load_settings
from backstage_plugins.utils.logging import configure_logging, set_correlation_id

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = structlog.get_logger(__name__)

ARGOCD_PREFIX = "/api/argocd"


def _error_body(request: Request, exc: Exception, status_code: int) -> dict[str, Any]:
    return {
        "error": {"name": type(exc).__name__, "message": str(exc)},
        "request": {"method": request.method, "url": str(request.url.path)},
        "response": {"statusCode": status_code},
    }


def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """
    Build the proxy application.

    Args:
        settings: Server settings; loaded from the environment when omitted.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Argo CD proxy started",
            instances=[instance.name for instance in settings.argocd.instances],
        )
        yield
        logger.info("Argo CD proxy stopped")

    app = FastAPI(title="Backstage backend plugins", lifespan=lifespan)
    app.state.settings = settings
    app.state.argo_service = ArgoService(settings.argocd)

    @app.middleware("http")
    async def correlation_middleware(request: Request, call_next):
        set_correlation_id(request.headers.get("x-request-id", ""))
        return await call_next(request)

    @app.exception_handler(ArgocdError)
    async def argocd_error_handler(request: Request, exc: ArgocdError) -> JSONResponse:
        logger.error("Argo CD request failed", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content=_error_body(request, exc, 500))

    @app.exception_handler(httpx.HTTPError)
    async def upstream_error_handler(request: Request, exc: httpx.HTTPError) -> JSONResponse:
        logger.error("Argo CD unreachable", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content=_error_body(request, exc, 500))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        logger.error("Request failed", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content=_error_body(request, exc, 500))

    app.include_router(create_router(), prefix=ARGOCD_PREFIX)
    return app


def main() -> None:
    """Run the Argo CD proxy server."""
    settings = load_settings()
    configure_logging(level=settings.log_level, json_output=settings.json_logs)
    logger.info("Backstage backend plugins starting", host=settings.host, port=settings.port)

    try:
        uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
    except KeyboardInterrupt:
        logger.info("Server interrupted")
        sys.exit(0)
    except Exception as e:
        logger.error("Server error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
