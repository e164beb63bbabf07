# ABOUTME: Argo CD lookup service shared by the proxy routes
# ABOUTME: Resolves instances, obtains tokens, and searches applications across instances

"""Argo CD lookups across the configured instances."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from backstage_plugins.argocd.client import ArgocdClient, ArgocdError

if TYPE_CHECKING:
    from backstage_plugins.config import ArgocdInstance, ArgocdSettings

logger = structlog.get_logger(__name__)


class ArgoService:
    """Resolves Argo CD instances and forwards application lookups to them."""

    def __init__(self, settings: ArgocdSettings, timeout: float = 30.0) -> None:
        self._settings = settings
        self._timeout = timeout

    @property
    def instances(self) -> list[ArgocdInstance]:
        return self._settings.instances

    def find_instance(self, name: str) -> ArgocdInstance | None:
        return self._settings.get_instance(name)

    async def get_argo_token(self, instance: ArgocdInstance) -> str:
        """
        Return a bearer token for the instance.

        A statically configured token is reused as is. Otherwise a session is
        created with the instance's own credentials, falling back to the
        globally configured ones.
        """
        if instance.token is not None and instance.token.get_secret_value():
            return instance.token.get_secret_value()

        username = instance.username or self._settings.username
        password = (
            instance.password.get_secret_value()
            if instance.password is not None
            else self._settings.password.get_secret_value()
        )
        logger.debug("Logging in to Argo CD", instance=instance.name)
        async with ArgocdClient(instance, timeout=self._timeout) as client:
            return await client.create_session(username, password)

    async def get_argo_app_data(
        self,
        instance: ArgocdInstance,
        token: str,
        name: str | None = None,
        selector: str | None = None,
    ) -> Any:
        """
        Fetch one application by name, or the applications matching a selector.

        The Argo CD response body is returned unmodified.
        """
        async with ArgocdClient(instance, token=token, timeout=self._timeout) as client:
            if name:
                return await client.get_application(name)
            if selector:
                return await client.list_applications(selector)
        raise ValueError("name or selector is required")

    async def _find_on_instance(
        self,
        instance: ArgocdInstance,
        name: str | None,
        selector: str | None,
    ) -> dict[str, Any] | None:
        try:
            token = await self.get_argo_token(instance)
            data = await self.get_argo_app_data(instance, token, name=name, selector=selector)
        except (ArgocdError, httpx.HTTPError) as e:
            logger.info("Application not found on Argo CD instance", instance=instance.name, error=str(e))
            return None

        if selector:
            items = data.get("items") if isinstance(data, dict) else None
            if not items:
                return None
            app_names = [item.get("metadata", {}).get("name") for item in items]
        else:
            app_names = [name]

        return {"name": instance.name, "url": instance.url, "appName": app_names}

    async def find_argo_app(
        self,
        name: str | None = None,
        selector: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Search every configured instance for an application.

        Instances are queried concurrently. An instance that fails the lookup,
        or has no application matching the selector, is left out of the result.

        Returns:
            One {"name", "url", "appName"} entry per instance with a match,
            in configuration order.

        Raises:
            ValueError: If neither name nor selector is given.
        """
        if not name and not selector:
            raise ValueError("name or selector is required")

        results = await asyncio.gather(
            *(self._find_on_instance(instance, name, selector) for instance in self.instances)
        )
        return [result for result in results if result is not None]
