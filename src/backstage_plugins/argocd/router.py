# ABOUTME: FastAPI routes of the Argo CD proxy plugin
# ABOUTME: Forwards application lookups by name or selector to configured instances

"""Argo CD proxy routes."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from backstage_plugins.argocd.service import ArgoService

logger = structlog.get_logger(__name__)

INSTANCE_NOT_FOUND = {
    "status": "failed",
    "message": "cannot find an argo instance to match this cluster",
}


def get_argo_service(request: Request) -> ArgoService:
    service = getattr(request.app.state, "argo_service", None)
    if service is None:
        raise HTTPException(status_code=500, detail="Argo CD service not initialised")
    return service


async def _lookup_on_instance(
    service: ArgoService,
    instance_name: str,
    name: str | None = None,
    selector: str | None = None,
) -> Any:
    instance = service.find_instance(instance_name)
    if instance is None:
        logger.warning("Unknown Argo CD instance", instance=instance_name)
        return JSONResponse(status_code=500, content=INSTANCE_NOT_FOUND)

    token = await service.get_argo_token(instance)
    return await service.get_argo_app_data(instance, token, name=name, selector=selector)


def create_router() -> APIRouter:
    router = APIRouter()

    @router.get("/find/name/{app_name}")
    async def find_by_name(app_name: str, service: ArgoService = Depends(get_argo_service)) -> Any:
        logger.info("Finding application on all instances", app=app_name)
        return await service.find_argo_app(name=app_name)

    @router.get("/argoInstance/{instance_name}/applications/name/{app_name}")
    async def get_by_name(
        instance_name: str,
        app_name: str,
        service: ArgoService = Depends(get_argo_service),
    ) -> Any:
        logger.info("Getting application", app=app_name, instance=instance_name)
        return await _lookup_on_instance(service, instance_name, name=app_name)

    @router.get("/find/selector/{selector}")
    async def find_by_selector(selector: str, service: ArgoService = Depends(get_argo_service)) -> Any:
        logger.info("Finding applications by selector on all instances", selector=selector)
        return await service.find_argo_app(selector=selector)

    @router.get("/argoInstance/{instance_name}/applications/selector/{selector}")
    async def get_by_selector(
        instance_name: str,
        selector: str,
        service: ArgoService = Depends(get_argo_service),
    ) -> Any:
        logger.info("Getting applications by selector", selector=selector, instance=instance_name)
        return await _lookup_on_instance(service, instance_name, selector=selector)

    return router
