"""Tests for the MCP tool layer"""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from cifra_mcp import server
from cifra_mcp.catalog import RESOURCES
from cifra_mcp.consts import MAX_RECORDS_PER_CALL
from cifra_mcp.exceptions import AuthenticationError, RemoteAPIError
from cifra_mcp.models import LoginResult, ResourceEnvelope
from cifra_mcp.resources import get_catalog_resource, get_info_resource


@pytest.fixture
def mock_service():
    service = Mock()
    service.list_resource = AsyncMock(
        return_value=ResourceEnvelope.from_items([{"id": 1}], "users")
    )
    service.login = AsyncMock(return_value=LoginResult(token="tok"))
    with patch("cifra_mcp.server.get_resource_service", return_value=service):
        yield service


def test_mcp_server_created():
    assert server.mcp.name == "cifra-mcp"


@pytest.mark.asyncio
async def test_list_users_tool(mock_service):
    response = await server.list_users(query="ana")

    assert response.status == "success"
    assert response.message == "Obtained 1 users"
    assert response.data["total"] == 1
    assert response.data["items"] == [{"id": 1}]
    mock_service.list_resource.assert_awaited_once_with("users", {"query": "ana"})


@pytest.mark.asyncio
async def test_list_payments_tool_passes_all_filters(mock_service):
    await server.list_payments(status="cobrado", date_from="2024-09-01")

    mock_service.list_resource.assert_awaited_once_with(
        "payments",
        {
            "status": "cobrado",
            "payment_method_id": None,
            "date_from": "2024-09-01",
            "date_to": None,
        },
    )


@pytest.mark.parametrize(
    "tool,resource",
    [
        (server.list_companies, "companies"),
        (server.list_payment_methods, "payment_methods"),
        (server.list_plans, "plans"),
        (server.list_roles, "roles"),
        (server.list_academic_years, "academic_years"),
        (server.list_incident_reports, "incident_reports"),
        (server.list_transport_routes, "transport_routes"),
        (server.list_services, "services"),
    ],
)
@pytest.mark.asyncio
async def test_unfiltered_tools(mock_service, tool, resource):
    await tool()
    mock_service.list_resource.assert_awaited_once_with(resource, None)


@pytest.mark.asyncio
async def test_filtered_tools(mock_service):
    await server.list_school_structures(academic_year_id=4)
    await server.list_transport_stops(shift_id=2)

    calls = [c.args for c in mock_service.list_resource.await_args_list]
    assert calls == [
        ("school_structures", {"academic_year_id": 4}),
        ("transport_stops", {"shift_id": 2}),
    ]


def test_every_resource_has_a_tool():
    for resource in RESOURCES:
        assert callable(getattr(server, f"list_{resource.name}"))


@pytest.mark.asyncio
async def test_full_page_suggests_narrowing(mock_service):
    mock_service.list_resource.return_value = ResourceEnvelope.from_items(
        [{}] * MAX_RECORDS_PER_CALL, "payments"
    )

    response = await server.list_payments()

    assert response.status == "success"
    assert "narrow the filters" in response.suggestions[0]


@pytest.mark.asyncio
async def test_errors_become_error_responses(mock_service):
    mock_service.list_resource.side_effect = RemoteAPIError(
        "GET /api_publica/v1/roles returned HTTP 503", status_code=503
    )

    response = await server.list_roles()

    assert response.status == "error"
    assert "503" in response.message
    assert response.metadata["status_code"] == 503


@pytest.mark.asyncio
async def test_login_tool(mock_service):
    response = await server.login()

    assert response.status == "success"
    assert response.data == {"token": "tok", "message": "Login successful"}


@pytest.mark.asyncio
async def test_login_tool_failure(mock_service):
    mock_service.login.side_effect = AuthenticationError("Login failed: no token")

    response = await server.login()

    assert response.status == "error"
    assert response.metadata["exception_type"] == "AuthenticationError"


def test_info_resource(config):
    info = get_info_resource(config)
    assert "https://cifra.test" in info
    assert "password" in info
    assert str(MAX_RECORDS_PER_CALL) in info


def test_catalog_resource():
    catalog = get_catalog_resource()
    assert [entry["name"] for entry in catalog] == [r.name for r in RESOURCES]
    payments = next(entry for entry in catalog if entry["name"] == "payments")
    assert set(payments["filters"]) == {
        "status",
        "payment_method_id",
        "date_from",
        "date_to",
    }
