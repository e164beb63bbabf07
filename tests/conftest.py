# ABOUTME: Pytest fixtures and configuration for the Backstage backend plugin tests
# ABOUTME: Provides Argo CD settings, fake Okta directories and recording catalog sinks

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from typing import Any

import pytest
from pydantic import SecretStr
from tenacity import wait_none

from backstage_plugins.argocd.client import ArgocdClient
from backstage_plugins.catalog.entities import EntityMutation
from backstage_plugins.config import (
    AppLocatorMethod,
    ArgocdInstance,
    ArgocdSettings,
    OktaAccountConfig,
    ServerSettings,
)
from backstage_plugins.okta.client import OktaClient
from backstage_plugins.okta.models import OktaGroup, OktaUser


@pytest.fixture
def no_retry_wait(monkeypatch: pytest.MonkeyPatch) -> None:
    """Retry timed-out requests without backing off."""
    monkeypatch.setattr(ArgocdClient._request.retry, "wait", wait_none())
    monkeypatch.setattr(OktaClient._get_page.retry, "wait", wait_none())


# =============================================================================
# Argo CD fixtures
# =============================================================================


@pytest.fixture
def token_instance() -> ArgocdInstance:
    """Instance authenticating with a static token."""
    return ArgocdInstance(
        name="argoInstance1",
        url="https://argoinstance1.com",
        token=SecretStr("static-token"),
    )


@pytest.fixture
def login_instance() -> ArgocdInstance:
    """Instance without a token, so the proxy has to log in."""
    return ArgocdInstance(
        name="argoInstance2",
        url="https://argoinstance2.com",
    )


@pytest.fixture
def argocd_settings(token_instance: ArgocdInstance, login_instance: ArgocdInstance) -> ArgocdSettings:
    return ArgocdSettings(
        username="testusername",
        password=SecretStr("testpassword"),
        app_locator_methods=[
            AppLocatorMethod(type="config", instances=[token_instance, login_instance]),
        ],
    )


@pytest.fixture
def server_settings(argocd_settings: ArgocdSettings) -> ServerSettings:
    return ServerSettings(argocd=argocd_settings)


# =============================================================================
# Okta fixtures
# =============================================================================


async def collection(items: Iterable[Any]) -> AsyncIterator[Any]:
    """Async, single-pass enumeration over items, like an Okta listing."""
    for item in items:
        yield item


def make_user(user_id: str, email: str, **profile: Any) -> OktaUser:
    return OktaUser(id=user_id, profile={"email": email, **profile})


def make_group(group_id: str, users: list[OktaUser] | None = None, **profile: Any) -> OktaGroup:
    members = list(users or [])
    return OktaGroup(id=group_id, profile=profile, members=lambda: collection(members))


class FakeOktaClient:
    """Stands in for OktaClient: an async context manager with the listing methods."""

    def __init__(self, groups: list[OktaGroup] | None = None, users: list[OktaUser] | None = None) -> None:
        self.groups = groups or []
        self.users = users or []
        self.group_searches: list[str | None] = []
        self.user_searches: list[str | None] = []
        self.entered = 0

    async def __aenter__(self) -> FakeOktaClient:
        self.entered += 1
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    def list_groups(self, search: str | None = None) -> AsyncIterator[OktaGroup]:
        self.group_searches.append(search)
        return collection(self.groups)

    def list_users(self, search: str | None = None) -> AsyncIterator[OktaUser]:
        self.user_searches.append(search)
        return collection(self.users)


class RecordingConnection:
    """Catalog connection remembering every mutation applied to it."""

    def __init__(self) -> None:
        self.mutations: list[EntityMutation] = []

    async def apply_mutation(self, mutation: EntityMutation) -> None:
        self.mutations.append(mutation)

    @property
    def entities(self) -> list[dict[str, Any]]:
        assert len(self.mutations) == 1
        return [deferred.entity.to_dict() for deferred in self.mutations[0].entities]


@pytest.fixture
def okta_account() -> OktaAccountConfig:
    return OktaAccountConfig(orgUrl="https://okta", token=SecretStr("secret"))


@pytest.fixture
def connection() -> RecordingConnection:
    return RecordingConnection()


@pytest.fixture
def company_groups() -> list[OktaGroup]:
    """Two groups sharing a parent org, one without a description."""
    return [
        make_group(
            "asdfwefwefwef",
            [make_user("asdfwefwefwef", "fname@domain.com")],
            name="Everyone@the-company",
            description="Everyone in the company",
            org_id="1234",
            parent_org_id="1234",
        ),
        make_group(
            "group-with-null-description",
            [make_user("asdfwefwefwef", "fname@domain.com")],
            name="Everyone@the-company",
            description=None,
            org_id="1235",
            parent_org_id="1234",
        ),
    ]
