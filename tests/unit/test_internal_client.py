"""Unit tests for InternalApiClient (mocked aiohttp session)."""
import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.asp_dashboard.asp.exceptions import (
    AspConnectionError,
    AspResponseParseError,
    InternalApiError,
    NotAuthenticatedError,
)
from src.asp_dashboard.asp.internal_client import InternalApiClient


@pytest.fixture
def mock_session():
    """Mock aiohttp ClientSession."""
    return MagicMock()


@pytest.fixture
def internal_client(mock_session):
    return InternalApiClient(
        base_url="http://core.test",
        session_cookie="sess-123",
        session=mock_session,
    )


def _response(mock_session, status=200, text="", reason="OK"):
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.reason = reason
    mock_response.text.return_value = text
    mock_response.__aenter__.return_value = mock_response
    mock_session.request.return_value = mock_response
    return mock_response


@pytest.mark.asyncio
async def test_list_api_keys_forwards_cookie(internal_client, mock_session):
    _response(
        mock_session,
        text='[{"id": "k1", "displayName": "CI", "prefix": "sk_ab", '
        '"scopes": ["accounts:read"], "createdAt": "2024-05-01T10:00:00Z"}]',
    )

    keys = await internal_client.list_api_keys()

    assert len(keys) == 1
    assert keys[0].id == "k1"
    assert keys[0].display_name == "CI"
    args, kwargs = mock_session.request.call_args
    assert args == ("GET", "http://core.test/internal/api-keys")
    assert kwargs["headers"] == {"Cookie": "asp_session=sess-123"}


@pytest.mark.asyncio
async def test_create_api_key_defaults(internal_client, mock_session):
    _response(
        mock_session,
        status=201,
        text='{"id": "k2", "prefix": "sk_cd", "apiKey": "sk_cd_full_secret"}',
    )

    created = await internal_client.create_api_key("My key")

    assert created.api_key == "sk_cd_full_secret"
    _, kwargs = mock_session.request.call_args
    assert kwargs["json"] == {
        "displayName": "My key",
        "scopes": ["ingestions:write", "accounts:read"],
        "sandbox": False,
    }


@pytest.mark.asyncio
async def test_delete_api_key_no_content(internal_client, mock_session):
    _response(mock_session, status=204, text="")

    assert await internal_client.delete_api_key("k1") == {}
    args, _ = mock_session.request.call_args
    assert args == ("DELETE", "http://core.test/internal/api-keys/k1")


@pytest.mark.asyncio
async def test_missing_cookie_raises_without_request(mock_session):
    client = InternalApiClient("http://core.test", None, mock_session)

    with pytest.raises(NotAuthenticatedError):
        await client.list_api_keys()

    mock_session.request.assert_not_called()


@pytest.mark.asyncio
async def test_error_uses_envelope_message(internal_client, mock_session):
    _response(
        mock_session,
        status=403,
        text='{"error": {"code": "FORBIDDEN", "message": "Tenant suspended"}}',
        reason="Forbidden",
    )

    with pytest.raises(InternalApiError) as exc_info:
        await internal_client.list_api_keys()

    assert exc_info.value.status_code == 403
    assert str(exc_info.value) == "Tenant suspended"


@pytest.mark.asyncio
async def test_error_falls_back_to_reason(internal_client, mock_session):
    _response(mock_session, status=401, text="", reason="Unauthorized")

    with pytest.raises(InternalApiError) as exc_info:
        await internal_client.list_api_keys()

    assert exc_info.value.status_code == 401
    assert str(exc_info.value) == "Unauthorized"


@pytest.mark.asyncio
async def test_timeout_raises_connection_error(internal_client, mock_session):
    mock_session.request.side_effect = asyncio.TimeoutError()

    with pytest.raises(AspConnectionError):
        await internal_client.list_api_keys()


@pytest.mark.asyncio
async def test_list_api_keys_accepts_null_display_name(internal_client, mock_session):
    _response(
        mock_session,
        text='[{"id": "k1", "displayName": null, "prefix": "sk_ab", '
        '"createdAt": "2024-05-01T10:00:00Z"}]',
    )

    keys = await internal_client.list_api_keys()

    assert keys[0].display_name is None


@pytest.mark.asyncio
async def test_list_api_keys_malformed_entry_raises_parse_error(internal_client, mock_session):
    """Test a listing entry without createdAt becomes AspResponseParseError."""
    _response(mock_session, text='[{"id": "k1", "prefix": "sk_ab"}]')

    with pytest.raises(AspResponseParseError) as exc_info:
        await internal_client.list_api_keys()

    assert "createdAt" in str(exc_info.value)


@pytest.mark.asyncio
async def test_list_api_keys_non_list_raises_parse_error(internal_client, mock_session):
    _response(mock_session, text='{"keys": []}')

    with pytest.raises(AspResponseParseError):
        await internal_client.list_api_keys()


@pytest.mark.asyncio
async def test_list_api_keys_json_is_untouched(internal_client, mock_session):
    _response(
        mock_session,
        text='[{"id": "k1", "prefix": "sk_ab", "createdAt": "2024-05-01T10:00:00Z"}]',
    )

    assert await internal_client.list_api_keys_json() == [
        {"id": "k1", "prefix": "sk_ab", "createdAt": "2024-05-01T10:00:00Z"}
    ]


@pytest.mark.asyncio
async def test_create_api_key_bad_response_hides_secret(internal_client, mock_session):
    _response(mock_session, status=201, text='{"id": "k2", "apiKey": "sk_cd_full_secret"}')

    with pytest.raises(AspResponseParseError) as exc_info:
        await internal_client.create_api_key("My key")

    assert "prefix" in str(exc_info.value)
    assert "sk_cd_full_secret" not in str(exc_info.value)
