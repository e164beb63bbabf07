# ABOUTME: Unit tests for the Argo CD API client
# ABOUTME: Tests session login, application lookups, and error handling

import json

import httpx
import pytest
import respx
from pydantic import SecretStr

from backstage_plugins.argocd.client import ArgocdClient, ArgocdError
from backstage_plugins.config import ArgocdInstance

BASE_URL = "https://argocd.example.com/api/v1"


@pytest.fixture
def instance() -> ArgocdInstance:
    return ArgocdInstance(
        name="test",
        url="https://argocd.example.com",
        token=SecretStr("test-token"),
        insecure=True,
    )


@pytest.mark.unit
class TestArgocdError:
    """Tests for ArgocdError class."""

    def test_str_without_details(self):
        error = ArgocdError(code=404, message="Application not found")

        assert str(error) == "ArgoCD API error (404): Application not found"

    def test_str_with_details(self):
        error = ArgocdError(code=400, message="Bad request", details="Invalid selector")

        assert str(error) == "ArgoCD API error (400): Bad request - Invalid selector"

    def test_inherits_from_exception(self):
        error = ArgocdError(code=500, message="Internal server error")

        assert isinstance(error, Exception)
        assert error.details is None


@pytest.mark.unit
class TestArgocdClient:
    """Tests for ArgocdClient."""

    async def test_request_without_context_raises(self, instance: ArgocdInstance):
        client = ArgocdClient(instance, token="abc")

        with pytest.raises(RuntimeError):
            await client.get_application("my-app")

    async def test_context_closes_http_client(self, instance: ArgocdInstance):
        client = ArgocdClient(instance, token="abc")

        async with client:
            assert client._client is not None

        assert client._client is None

    @respx.mock
    async def test_bearer_token_sent(self, instance: ArgocdInstance):
        route = respx.get(f"{BASE_URL}/applications/my-app").mock(
            return_value=httpx.Response(200, json={"metadata": {"name": "my-app"}})
        )

        async with ArgocdClient(instance, token="abc") as client:
            await client.get_application("my-app")

        assert route.calls[0].request.headers["Authorization"] == "Bearer abc"

    @respx.mock
    async def test_no_authorization_without_token(self, instance: ArgocdInstance):
        route = respx.post(f"{BASE_URL}/session").mock(return_value=httpx.Response(200, json={"token": "t"}))

        async with ArgocdClient(instance) as client:
            await client.create_session("admin", "secret")

        assert "Authorization" not in route.calls[0].request.headers

    @respx.mock
    async def test_get_application_returns_body_unmodified(self, instance: ArgocdInstance):
        body = {
            "metadata": {"name": "my-app", "namespace": "argocd"},
            "spec": {"source": {"repoURL": "https://github.com/example/repo.git"}},
            "status": {"sync": {"status": "Synced"}, "health": {"status": "Healthy"}},
        }
        respx.get(f"{BASE_URL}/applications/my-app").mock(return_value=httpx.Response(200, json=body))

        async with ArgocdClient(instance, token="abc") as client:
            result = await client.get_application("my-app")

        assert result == body

    @respx.mock
    async def test_list_applications_passes_selector(self, instance: ArgocdInstance):
        route = respx.get(f"{BASE_URL}/applications").mock(
            return_value=httpx.Response(200, json={"items": [{"metadata": {"name": "app-1"}}]})
        )

        async with ArgocdClient(instance, token="abc") as client:
            result = await client.list_applications("service=my-service")

        assert route.calls[0].request.url.params["selector"] == "service=my-service"
        assert result == {"items": [{"metadata": {"name": "app-1"}}]}

    @respx.mock
    async def test_error_response(self, instance: ArgocdInstance):
        respx.get(f"{BASE_URL}/applications/nonexistent").mock(
            return_value=httpx.Response(
                404,
                json={"message": "application 'nonexistent' not found", "error": "not found"},
            )
        )

        async with ArgocdClient(instance, token="abc") as client:
            with pytest.raises(ArgocdError) as exc_info:
                await client.get_application("nonexistent")

        assert exc_info.value.code == 404
        assert exc_info.value.message == "application 'nonexistent' not found"
        assert exc_info.value.details == "not found"

    @respx.mock
    async def test_error_with_non_json_body(self, instance: ArgocdInstance):
        respx.get(f"{BASE_URL}/applications/my-app").mock(return_value=httpx.Response(503, text="unavailable"))

        async with ArgocdClient(instance, token="abc") as client:
            with pytest.raises(ArgocdError) as exc_info:
                await client.get_application("my-app")

        assert exc_info.value.message == "HTTP 503"
        assert exc_info.value.details == "unavailable"

    @respx.mock
    async def test_empty_body_returns_empty_dict(self, instance: ArgocdInstance):
        respx.get(f"{BASE_URL}/applications/my-app").mock(return_value=httpx.Response(200, content=b""))

        async with ArgocdClient(instance, token="abc") as client:
            assert await client.get_application("my-app") == {}


@pytest.mark.unit
class TestCreateSession:
    """Tests for ArgocdClient.create_session."""

    @respx.mock
    async def test_returns_token(self, instance: ArgocdInstance):
        route = respx.post(f"{BASE_URL}/session").mock(
            return_value=httpx.Response(200, json={"token": "session-token"})
        )

        async with ArgocdClient(instance) as client:
            token = await client.create_session("admin", "secret")

        assert token == "session-token"
        assert json.loads(route.calls[0].request.content) == {"username": "admin", "password": "secret"}

    @respx.mock
    async def test_unauthorized(self, instance: ArgocdInstance):
        respx.post(f"{BASE_URL}/session").mock(
            return_value=httpx.Response(401, json={"message": "invalid username or password"})
        )

        async with ArgocdClient(instance) as client:
            with pytest.raises(ArgocdError) as exc_info:
                await client.create_session("admin", "wrong")

        assert exc_info.value.code == 401
        assert exc_info.value.message == "Getting unauthorized for Argo CD instance https://argocd.example.com"

    @respx.mock
    async def test_other_errors_propagate(self, instance: ArgocdInstance):
        respx.post(f"{BASE_URL}/session").mock(return_value=httpx.Response(500, json={"message": "boom"}))

        async with ArgocdClient(instance) as client:
            with pytest.raises(ArgocdError) as exc_info:
                await client.create_session("admin", "secret")

        assert exc_info.value.code == 500
        assert exc_info.value.message == "boom"

    @respx.mock
    async def test_missing_token_in_response(self, instance: ArgocdInstance):
        respx.post(f"{BASE_URL}/session").mock(return_value=httpx.Response(200, json={}))

        async with ArgocdClient(instance) as client:
            with pytest.raises(ArgocdError):
                await client.create_session("admin", "secret")
