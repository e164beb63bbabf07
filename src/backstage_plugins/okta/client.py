# ABOUTME: Okta Management API client with pagination, retry logic and error handling
# ABOUTME: Lazily enumerates users, groups and group members for the catalog providers

"""
Okta Management API client.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

The catalog entity providers need three listings from Okta:

    GET /api/v1/users?search=<expr>          - Users, optionally filtered
    GET /api/v1/groups?search=<expr>         - Groups, optionally filtered
    GET /api/v1/groups/{id}/users            - Members of one group

Okta pages its listings. Each response carries a Link header; the page after
it is announced as rel="next":

    Link: <https://org.okta.com/api/v1/users?after=00u1&limit=200>; rel="next"

The listings here are async generators that follow those links one page at a
time, so a group's members are only fetched when the mapper reaches that group.

Authentication uses an API token in Okta's SSWS scheme:
    Authorization: SSWS <token>
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

from backstage_plugins.okta.models import OktaGroup, OktaUser

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from pydantic import SecretStr

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_SIZE = 200


class OktaError(Exception):
    """
    Structured Okta API error.

    Okta error bodies look like:
        {"errorCode": "E0000007", "errorSummary": "Not found: Resource not found: ..."}
    """

    def __init__(self, code: int, message: str, details: str | None = None) -> None:
        self.code = code
        self.message = message
        self.details = details
        super().__init__(str(self))

    def __str__(self) -> str:
        base = f"Okta API error ({self.code}): {self.message}"
        if self.details:
            base += f" - {self.details}"
        return base


class OktaClient:
    """
    Async Okta client.

    ALWAYS use the context manager pattern:

        async with OktaClient(org_url, token) as client:
            async for group in client.list_groups():
                ...

    Group records handed out by list_groups() enumerate their members through
    this client, so they must be consumed before the context exits.
    """

    def __init__(
        self,
        org_url: str,
        token: SecretStr,
        timeout: float = 30.0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._org_url = org_url
        self._token = token
        self._timeout = timeout
        self._page_size = page_size
        self._client: httpx.AsyncClient | None = None

    @property
    def org_url(self) -> str:
        return self._org_url

    async def __aenter__(self) -> OktaClient:
        self._client = httpx.AsyncClient(
            base_url=f"{self._org_url}/api/v1",
            headers={
                "Authorization": f"SSWS {self._token.get_secret_value()}",
                "Accept": "application/json",
            },
            timeout=self._timeout,
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
    async def _get_page(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """
        Fetch one page of a listing.

        Raises:
            OktaError: On API error (4xx, 5xx)
            httpx.TimeoutException: On request timeout (after retries)
            RuntimeError: If client not initialized (forgot async with)
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        log = logger.bind(url=url, org=self._org_url)
        log.debug("Making Okta API request")

        response = await self._client.get(url, params=params)

        if response.status_code >= 400:
            error_body = response.text
            log.warning("Okta API error", status=response.status_code, body=error_body[:200])

            message = f"HTTP {response.status_code}"
            details = None
            try:
                error_json = response.json()
                message = error_json.get("errorSummary", message)
                details = error_json.get("errorCode")
            except ValueError:
                details = error_body[:200] if error_body else None

            raise OktaError(code=response.status_code, message=message, details=details)

        return response

    async def _paginate(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield every item of a listing, following rel="next" links."""
        query: dict[str, Any] | None = {"limit": self._page_size, **(params or {})}
        url: str | None = path

        while url:
            response = await self._get_page(url, params=query)
            for item in response.json() or []:
                yield item
            url = response.links.get("next", {}).get("url")
            # the next link already carries the cursor and the original query
            query = None

    async def list_users(self, search: str | None = None) -> AsyncIterator[OktaUser]:
        params = {"search": search} if search else None
        async for item in self._paginate("/users", params):
            yield OktaUser.from_api_response(item)

    async def list_group_users(self, group_id: str) -> AsyncIterator[OktaUser]:
        async for item in self._paginate(f"/groups/{group_id}/users"):
            yield OktaUser.from_api_response(item)

    async def list_groups(self, search: str | None = None) -> AsyncIterator[OktaGroup]:
        params = {"search": search} if search else None
        async for item in self._paginate("/groups", params):
            group_id = item.get("id", "")
            yield OktaGroup.from_api_response(
                item,
                members=lambda group_id=group_id: self.list_group_users(group_id),
            )
