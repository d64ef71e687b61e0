"""Unit tests for AspServerClient (mocked aiohttp session)."""
import aiohttp
import pytest
from unittest.mock import AsyncMock, MagicMock

from src.asp_dashboard.asp.exceptions import (
    AspApiError,
    AspConnectionError,
    AspResponseParseError,
)
from src.asp_dashboard.asp.server_client import AspServerClient, mask_key


@pytest.fixture
def mock_session():
    """Mock aiohttp ClientSession."""
    return MagicMock()


@pytest.fixture
def server_client(mock_session):
    return AspServerClient(
        base_url="http://asp.test/v1/",
        api_key="sk_live_abcdef1234567890",
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


def test_mask_key_short_key_unchanged():
    assert mask_key("sk_short") == "sk_short"


def test_mask_key_long_key():
    assert mask_key("sk_live_abcdef1234567890") == "sk_live_…7890"


@pytest.mark.asyncio
async def test_get_sends_api_key_header(server_client, mock_session):
    """Test X-Api-Key is injected and the JSON body returned."""
    _response(mock_session, text='{"status": "ok", "tenantId": "t1"}')

    result = await server_client.ping()

    assert result == {"status": "ok", "tenantId": "t1"}
    args, kwargs = mock_session.request.call_args
    assert args == ("GET", "http://asp.test/v1/ping")
    assert kwargs["headers"] == {"X-Api-Key": "sk_live_abcdef1234567890"}


@pytest.mark.asyncio
async def test_get_forwards_params(server_client, mock_session):
    _response(mock_session, text='{"transactions": []}')

    await server_client.get("/accounts/a1/transactions", params={"limit": "10"})

    _, kwargs = mock_session.request.call_args
    assert kwargs["params"] == {"limit": "10"}


@pytest.mark.asyncio
async def test_missing_api_key_omits_header(mock_session):
    client = AspServerClient("http://asp.test/v1", None, mock_session)
    _response(mock_session, text="[]")

    assert await client.get_banks() == []
    _, kwargs = mock_session.request.call_args
    assert "X-Api-Key" not in kwargs["headers"]
    assert client.has_api_key is False


@pytest.mark.asyncio
async def test_post_sends_json_body(server_client, mock_session):
    _response(mock_session, text='{"id": "bc_1"}')

    result = await server_client.post("/bank-connections/b1/connect", {"userRef": "u1"})

    assert result == {"id": "bc_1"}
    args, kwargs = mock_session.request.call_args
    assert args[0] == "POST"
    assert kwargs["json"] == {"userRef": "u1"}


@pytest.mark.asyncio
async def test_post_form_data_uses_data_kwarg(server_client, mock_session):
    _response(mock_session, text='{"id": "ing_1", "status": "PENDING"}')
    form = aiohttp.FormData()
    form.add_field("file", b"%PDF", filename="s.pdf", content_type="application/pdf")

    await server_client.post_form_data("/ingestions", form, params={"bankConnectionId": "bc1"})

    _, kwargs = mock_session.request.call_args
    assert kwargs["data"] is form
    assert "json" not in kwargs
    assert kwargs["params"] == {"bankConnectionId": "bc1"}


@pytest.mark.asyncio
async def test_created_with_empty_body_returns_empty_dict(server_client, mock_session):
    _response(mock_session, status=201, text="")

    assert await server_client.post("/api-key/regenerate", {}) == {}


@pytest.mark.asyncio
async def test_no_content_returns_empty_dict(server_client, mock_session):
    _response(mock_session, status=204, text="")

    assert await server_client.delete("/bank-connections/bc1") == {}


@pytest.mark.asyncio
async def test_error_status_keeps_json_body(server_client, mock_session):
    """Test non-2xx responses raise AspApiError carrying the upstream body."""
    body = '{"error": {"code": "NOT_FOUND", "message": "Account not found"}}'
    _response(mock_session, status=404, text=body, reason="Not Found")

    with pytest.raises(AspApiError) as exc_info:
        await server_client.get("/accounts/missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.data == {
        "error": {"code": "NOT_FOUND", "message": "Account not found"}
    }


@pytest.mark.asyncio
async def test_error_status_with_html_body(server_client, mock_session):
    _response(mock_session, status=502, text="<html>Bad Gateway</html>", reason="Bad Gateway")

    with pytest.raises(AspApiError) as exc_info:
        await server_client.get("/accounts")

    assert exc_info.value.status_code == 502
    assert exc_info.value.data is None
    assert "502" in str(exc_info.value)


@pytest.mark.asyncio
async def test_success_with_invalid_json_raises_parse_error(server_client, mock_session):
    _response(mock_session, status=200, text="not json")

    with pytest.raises(AspResponseParseError) as exc_info:
        await server_client.get("/accounts")

    assert exc_info.value.status_code == 200
    assert exc_info.value.body == "not json"


@pytest.mark.asyncio
async def test_network_error_raises_connection_error(server_client, mock_session):
    mock_session.request.side_effect = aiohttp.ClientConnectionError("refused")

    with pytest.raises(AspConnectionError) as exc_info:
        await server_client.get("/ping")

    assert exc_info.value.status_code == 502
    assert "refused" in str(exc_info.value)
