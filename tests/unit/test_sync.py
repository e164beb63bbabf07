# ABOUTME: Unit tests for the okta-catalog-sync command
# ABOUTME: Tests per-account runs, JSON lines output and failure accounting

import io
import json

import httpx
import pytest
import respx
from pydantic import SecretStr

from backstage_plugins.catalog.connection import JsonLinesConnection
from backstage_plugins.config import OktaAccountConfig, OktaSettings
from backstage_plugins.sync import run_sync


def mock_org(base: str, users: list, groups: list, members: dict) -> None:
    respx.get(f"{base}/api/v1/users").mock(return_value=httpx.Response(200, json=users))
    respx.get(f"{base}/api/v1/groups").mock(return_value=httpx.Response(200, json=groups))
    for group_id, group_members in members.items():
        respx.get(f"{base}/api/v1/groups/{group_id}/users").mock(
            return_value=httpx.Response(200, json=group_members)
        )


@pytest.mark.unit
class TestRunSync:
    """Tests for run_sync."""

    @pytest.fixture
    def settings(self) -> OktaSettings:
        return OktaSettings(
            accounts=[
                OktaAccountConfig(orgUrl="https://a.okta.com", token=SecretStr("a")),
                OktaAccountConfig(orgUrl="https://b.okta.com", token=SecretStr("b")),
            ],
            user_naming_strategy="strip-domain-email",
        )

    @respx.mock
    async def test_writes_one_mutation_per_account(self, settings: OktaSettings):
        user = {"id": "00u1", "profile": {"email": "fname@domain.com"}}
        mock_org(
            "https://a.okta.com",
            [user],
            [{"id": "00g1", "profile": {"name": "Everyone", "description": "All"}}],
            {"00g1": [user]},
        )
        mock_org("https://b.okta.com", [], [], {})
        stream = io.StringIO()

        failures = await run_sync(settings, JsonLinesConnection(stream))

        assert failures == 0
        mutations = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert len(mutations) == 2
        assert mutations[0]["type"] == "full"
        assert [(d["entity"]["kind"], d["entity"]["metadata"]["name"]) for d in mutations[0]["entities"]] == [
            ("User", "fname"),
            ("Group", "00g1"),
        ]
        assert {d["locationKey"] for d in mutations[0]["entities"]} == {"okta-org-provider-https://a.okta.com"}
        assert mutations[1] == {"type": "full", "entities": []}

    @pytest.mark.parametrize(
        "failure",
        [
            {"return_value": httpx.Response(401, json={"errorCode": "E0000011", "errorSummary": "Invalid token"})},
            {"side_effect": httpx.ConnectError("down")},
            {"side_effect": httpx.ReadTimeout("slow")},
        ],
        ids=["api-error", "unreachable", "timeout"],
    )
    @pytest.mark.usefixtures("no_retry_wait")
    @respx.mock
    async def test_failing_account_does_not_stop_others(self, settings: OktaSettings, failure: dict):
        respx.get("https://a.okta.com/api/v1/users").mock(**failure)
        mock_org("https://b.okta.com", [], [], {})
        stream = io.StringIO()

        failures = await run_sync(settings, JsonLinesConnection(stream))

        assert failures == 1
        assert [json.loads(line) for line in stream.getvalue().splitlines()] == [{"type": "full", "entities": []}]

    async def test_no_accounts(self):
        stream = io.StringIO()

        assert await run_sync(OktaSettings(accounts=[]), JsonLinesConnection(stream)) == 0
        assert stream.getvalue() == ""
