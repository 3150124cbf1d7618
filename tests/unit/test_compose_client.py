"""
Unit tests for the Compose API client and the gateway that builds it.

The underlying httpx client is replaced with mocks, the same way the
client's own methods would see real responses.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from api.compose import Compose
from api.compose_gateway import ComposeGateway
from config import ApiConfig
from models.exceptions import (
    ComposeParseError,
    ComposeRequestError,
    ComposeResponseError,
)
from models.whitelist_models import WhitelistInput


def create_mock_response(status_code=200, json_data=None, text="", content=b"{}"):
    """Helper to create a mock HTTP response."""
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.text = text
    mock_response.content = content
    if isinstance(json_data, Exception):
        mock_response.json = MagicMock(side_effect=json_data)
    else:
        mock_response.json = MagicMock(return_value=json_data)
    return mock_response


@pytest.fixture
def api_config():
    return ApiConfig(compose_server="https://compose.test/2016-07", use_ssl=True, timeout=5.0)


@pytest.fixture
def compose(api_config):
    """Create a Compose client with a mocked httpx client."""
    client = Compose(access_token="test-token", api_config=api_config)
    client._client = MagicMock()
    return client


class TestComposeGetWhitelist:

    @pytest.mark.asyncio
    async def test_returns_entries(self, compose):
        # Arrange
        compose._client.get = AsyncMock(return_value=create_mock_response(json_data={
            "_embedded": {
                "whitelist": [
                    {"id": "abc123", "ip": "10.0.0.0/24", "description": "office"},
                    {"id": "def456", "ip": "192.168.0.0/16", "description": "vpn"},
                ]
            }
        }))

        # Act
        entries = await compose.get_whitelist("d1")

        # Assert
        assert [e.id for e in entries] == ["abc123", "def456"]
        compose._client.get.assert_awaited_once_with("/deployments/d1/whitelist")

    @pytest.mark.asyncio
    async def test_non_success_status_raises_request_error(self, compose):
        compose._client.get = AsyncMock(
            return_value=create_mock_response(status_code=404, text="not found")
        )

        with pytest.raises(ComposeRequestError) as exc_info:
            await compose.get_whitelist("d1")

        assert exc_info.value.status_code == 404
        assert exc_info.value.response_text == "not found"

    @pytest.mark.asyncio
    async def test_invalid_json_raises_parse_error(self, compose):
        compose._client.get = AsyncMock(
            return_value=create_mock_response(json_data=ValueError("bad json"))
        )

        with pytest.raises(ComposeParseError):
            await compose.get_whitelist("d1")

    @pytest.mark.asyncio
    async def test_unexpected_structure_raises_response_error(self, compose):
        compose._client.get = AsyncMock(return_value=create_mock_response(json_data={
            "_embedded": {"whitelist": [{"description": "no id or ip"}]}
        }))

        with pytest.raises(ComposeResponseError):
            await compose.get_whitelist("d1")


class TestComposeWrites:

    @pytest.mark.asyncio
    async def test_add_whitelist_posts_payload(self, compose):
        # Arrange
        recipe = {"id": "recipe-1", "status": "running"}
        compose._client.post = AsyncMock(
            return_value=create_mock_response(status_code=202, json_data=recipe)
        )

        # Act
        result = await compose.add_whitelist(
            "d1", WhitelistInput(ip="10.0.0.0/24", description="office")
        )

        # Assert
        assert result == recipe
        compose._client.post.assert_awaited_once_with(
            "/deployments/d1/whitelist",
            json={"deployment": {"whitelist": {"ip": "10.0.0.0/24", "description": "office"}}}
        )

    @pytest.mark.asyncio
    async def test_add_whitelist_failure(self, compose):
        compose._client.post = AsyncMock(
            return_value=create_mock_response(status_code=422, text="invalid ip")
        )

        with pytest.raises(ComposeRequestError) as exc_info:
            await compose.add_whitelist(
                "d1", WhitelistInput(ip="10.0.0.0/24", description="office")
            )

        assert exc_info.value.status_code == 422

    @pytest.mark.asyncio
    async def test_delete_whitelist_targets_entry(self, compose):
        compose._client.delete = AsyncMock(
            return_value=create_mock_response(status_code=202, json_data={"id": "recipe-2"})
        )

        await compose.delete_whitelist("d1", "abc123")

        compose._client.delete.assert_awaited_once_with("/deployments/d1/whitelist/abc123")

    @pytest.mark.asyncio
    async def test_delete_whitelist_accepts_empty_body(self, compose):
        response = create_mock_response(
            status_code=204, json_data=ValueError("no body"), content=b""
        )
        compose._client.delete = AsyncMock(return_value=response)

        result = await compose.delete_whitelist("d1", "abc123")

        assert result is None
        response.json.assert_not_called()


class TestComposeContextManager:

    @pytest.mark.asyncio
    async def test_creates_and_closes_http_client(self, api_config):
        compose = Compose(access_token="test-token", api_config=api_config)

        async with compose as client:
            assert client is compose
            http_client = compose._client
            assert http_client.headers["Authorization"] == "Bearer test-token"
            assert str(http_client.base_url).startswith("https://compose.test/2016-07")

        assert http_client.is_closed


class TestComposeGateway:

    def test_no_client_without_token(self, api_config):
        gateway = ComposeGateway(api_config)

        assert gateway.is_ready() is False
        assert gateway.get_client() is None

    def test_fresh_client_per_call(self, api_config):
        gateway = ComposeGateway(api_config)
        gateway.update_token("token")

        first = gateway.get_client()
        second = gateway.get_client()

        assert gateway.is_ready() is True
        assert isinstance(first, Compose)
        assert first is not second
