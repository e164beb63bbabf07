# ABOUTME: Argo CD API client wrapper with retry logic and error handling
# ABOUTME: Provides async access to the session and application endpoints

"""
Argo CD API client with retry logic and structured error handling.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

This module provides the HTTP client the proxy uses to reach Argo CD's REST
API. It handles:

1. AUTHENTICATION: Logging in for a session token, or attaching a Bearer token
2. ERROR HANDLING: Converting HTTP errors to ArgocdError
3. RETRY LOGIC: Retrying requests that time out

Responses are returned exactly as Argo CD sent them: the proxy relays them
to its callers without reshaping.

=============================================================================
ARGO CD ENDPOINTS USED
=============================================================================

    POST /api/v1/session                       - Exchange credentials for a token
    GET  /api/v1/applications/{name}           - Get one application
    GET  /api/v1/applications?selector=<sel>   - List applications by label selector
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

if TYPE_CHECKING:
    from backstage_plugins.config import ArgocdInstance

logger = structlog.get_logger(__name__)


class ArgocdError(Exception):
    """
    Structured Argo CD API error.

    USAGE:
    ------
    try:
        app = await client.get_application("nonexistent")
    except ArgocdError as e:
        print(f"Error {e.code}: {e.message}")
    """

    def __init__(self, code: int, message: str, details: str | None = None) -> None:
        self.code = code
        self.message = message
        self.details = details
        super().__init__(str(self))

    def __str__(self) -> str:
        base = f"ArgoCD API error ({self.code}): {self.message}"
        if self.details:
            base += f" - {self.details}"
        return base


class ArgocdClient:
    """
    Async Argo CD API client.

    LIFECYCLE:
    ----------
    ALWAYS use the context manager pattern:

        async with ArgocdClient(instance, token=token) as client:
            app = await client.get_application("my-app")

    The token is optional so the same client can be used to log in first:

        async with ArgocdClient(instance) as client:
            token = await client.create_session("admin", "secret")

    RETRY LOGIC:
    ------------
    Requests that time out are retried with exponential backoff, three
    attempts in total. HTTP errors are never retried.
    """

    def __init__(
        self,
        instance: ArgocdInstance,
        token: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize Argo CD client.

        Args:
            instance: Argo CD instance configuration (URL, TLS settings)
            token: Bearer token to send, or None for unauthenticated calls
            timeout: HTTP request timeout in seconds
        """
        self._instance = instance
        self._token = token
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> ArgocdClient:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        self._client = httpx.AsyncClient(
            base_url=f"{self._instance.url}/api/v1",
            headers=headers,
            timeout=self._timeout,
            verify=not self._instance.insecure,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @retry(
        retry=retry_if_exception_type(httpx.TimeoutException),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make HTTP request to Argo CD API.

        Args:
            method: HTTP method ("GET", "POST")
            path: API path relative to /api/v1 (e.g., "/applications/myapp")
            params: URL query parameters (optional)
            json_data: JSON request body (optional)

        Returns:
            Decoded JSON body, or an empty dict for an empty body

        Raises:
            ArgocdError: On API error (4xx, 5xx)
            httpx.TimeoutException: On request timeout (after retries)
            RuntimeError: If client not initialized (forgot async with)
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        log = logger.bind(method=method, path=path, instance=self._instance.name)
        log.debug("Making ArgoCD API request")

        response = await self._client.request(
            method,
            path,
            params=params,
            json=json_data,
        )

        if response.status_code >= 400:
            error_body = response.text
            log.warning("ArgoCD API error", status=response.status_code, body=error_body[:200])

            message = f"HTTP {response.status_code}"
            details = None
            try:
                error_json = response.json()
                message = error_json.get("message", message)
                details = error_json.get("error")
            except ValueError:
                details = error_body[:200] if error_body else None

            raise ArgocdError(
                code=response.status_code,
                message=message,
                details=details,
            )

        return response.json() if response.content else {}

    async def create_session(self, username: str, password: str) -> str:
        """
        Log in and return a session token.

        Argo CD API: POST /api/v1/session

        Raises:
            ArgocdError: 401 when the credentials are rejected, or any other
                         API error.
        """
        try:
            data = await self._request(
                "POST",
                "/session",
                json_data={"username": username, "password": password},
            )
        except ArgocdError as e:
            logger.error("Failed to get Argo CD token", instance=self._instance.name, url=self._instance.url)
            if e.code == 401:
                raise ArgocdError(
                    code=401,
                    message=f"Getting unauthorized for Argo CD instance {self._instance.url}",
                ) from e
            raise

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise ArgocdError(code=502, message="Argo CD session response did not contain a token")
        return token

    async def get_application(self, name: str) -> Any:
        """
        Get application by name.

        Argo CD API: GET /api/v1/applications/{name}
        """
        return await self._request("GET", f"/applications/{name}")

    async def list_applications(self, selector: str) -> Any:
        """
        List applications matching a Kubernetes label selector.

        Argo CD API: GET /api/v1/applications?selector=<selector>

        Args:
            selector: Label selector, e.g. "team=backend,env=production"
        """
        return await self._request("GET", "/applications", params={"selector": selector})
