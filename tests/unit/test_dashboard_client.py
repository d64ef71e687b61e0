"""Unit tests for DashboardClient session, tenant and logout calls."""
import aiohttp
import pytest
from unittest.mock import AsyncMock, MagicMock

from src.asp_dashboard.asp.dashboard_client import DashboardClient
from src.asp_dashboard.asp.exceptions import AspApiError, AspConnectionError


@pytest.fixture
def mock_session():
    """Mock aiohttp ClientSession."""
    return MagicMock()


@pytest.fixture
def dashboard_client(mock_session):
    return DashboardClient(base_url="http://core.test/", session=mock_session)


def _response(status=200, payload=None, reason="OK"):
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.reason = reason
    mock_response.json.return_value = payload
    mock_response.__aenter__.return_value = mock_response
    return mock_response


@pytest.mark.asyncio
async def test_fetch_session_without_cookie(dashboard_client, mock_session):
    info = await dashboard_client.fetch_session(None)

    assert info.authenticated is False
    mock_session.get.assert_not_called()


@pytest.mark.asyncio
async def test_fetch_session_authenticated(dashboard_client, mock_session):
    mock_session.get.return_value = _response(
        payload={"authenticated": True, "email": "dev@example.com", "tenantId": "t1"}
    )

    info = await dashboard_client.fetch_session("sess-1")

    assert info.authenticated is True
    assert info.email == "dev@example.com"
    assert info.tenant_id == "t1"
    args, kwargs = mock_session.get.call_args
    assert args == ("http://core.test/auth/session/me",)
    assert kwargs["headers"] == {"Cookie": "asp_session=sess-1"}


@pytest.mark.asyncio
async def test_fetch_session_unauthorized(dashboard_client, mock_session):
    mock_session.get.return_value = _response(status=401, reason="Unauthorized")

    info = await dashboard_client.fetch_session("expired")

    assert info.authenticated is False


@pytest.mark.asyncio
async def test_fetch_session_network_error(dashboard_client, mock_session):
    mock_session.get.side_effect = aiohttp.ClientConnectionError("down")

    info = await dashboard_client.fetch_session("sess-1")

    assert info.authenticated is False


@pytest.mark.asyncio
async def test_fetch_tenant(dashboard_client, mock_session):
    mock_session.get.return_value = _response(
        payload={"id": "t1", "name": "Acme", "slug": "acme", "plan": "free"}
    )

    tenant = await dashboard_client.fetch_tenant("sess-1")

    assert tenant.id == "t1"
    assert tenant.name == "Acme"


@pytest.mark.asyncio
async def test_fetch_tenant_server_error_returns_none(dashboard_client, mock_session):
    mock_session.get.return_value = _response(status=500, reason="Server Error")

    assert await dashboard_client.fetch_tenant("sess-1") is None


@pytest.mark.asyncio
async def test_logout_success(dashboard_client, mock_session):
    mock_session.post.return_value = _response(status=204)

    await dashboard_client.logout("sess-1")

    args, kwargs = mock_session.post.call_args
    assert args == ("http://core.test/auth/logout",)
    assert kwargs["headers"] == {"Cookie": "asp_session=sess-1"}


@pytest.mark.asyncio
async def test_logout_rejected(dashboard_client, mock_session):
    mock_session.post.return_value = _response(status=500, reason="Server Error")

    with pytest.raises(AspApiError):
        await dashboard_client.logout("sess-1")


@pytest.mark.asyncio
async def test_logout_network_error(dashboard_client, mock_session):
    mock_session.post.side_effect = aiohttp.ClientConnectionError("down")

    with pytest.raises(AspConnectionError):
        await dashboard_client.logout("sess-1")


@pytest.mark.asyncio
async def test_fetch_session_data_returns_raw_json(dashboard_client, mock_session):
    payload = {"email": "dev@example.com", "userId": None, "roles": ["owner"]}
    mock_session.get.return_value = _response(payload=payload)

    assert await dashboard_client.fetch_session_data("sess-1") == payload


@pytest.mark.asyncio
async def test_fetch_session_data_unauthorized(dashboard_client, mock_session):
    mock_session.get.return_value = _response(status=401, reason="Unauthorized")

    assert await dashboard_client.fetch_session_data("expired") is None


@pytest.mark.asyncio
async def test_fetch_session_non_object_payload(dashboard_client, mock_session):
    mock_session.get.return_value = _response(payload=["not", "a", "session"])

    info = await dashboard_client.fetch_session("sess-1")

    assert info.authenticated is False
