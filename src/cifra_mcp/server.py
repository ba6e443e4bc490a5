"""Cifra MCP server implementation."""

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import get_config, setup_logging
from .consts import MAX_RECORDS_PER_CALL, SERVER_NAME
from .models import Response
from .resources import register_resources
from .service import get_resource_service

logger = logging.getLogger("cifra-mcp.server")

mcp = FastMCP(
    name=SERVER_NAME,
    instructions=f"""
    Cifra public API MCP server.

    This MCP server gives read-only access to a school's data in Cifra:
    1. Economic management: companies, payments, payment methods, plans.
    2. People: users and roles.
    3. School structure: academic years, levels, courses and groups.
    4. Behaviour incident reports, school transport and services.

    Each listing returns at most {MAX_RECORDS_PER_CALL} records per call.
    """,
    log_level=get_config().log_level,
)

register_resources(mcp, get_config())


async def _list(resource: str, **filters: Any) -> Response:
    """Run one listing and turn the outcome into a tool Response."""
    logger.info(f"Listing {resource}")

    try:
        service = get_resource_service()
        envelope = await service.list_resource(resource, filters or None)

        suggestions = []
        if envelope.total >= MAX_RECORDS_PER_CALL:
            suggestions.append(
                f"Result hit the {MAX_RECORDS_PER_CALL}-record limit - narrow the filters"
            )

        return Response(
            status="success",
            message=envelope.message,
            data=envelope.model_dump(),
            suggestions=suggestions,
            metadata={"resource": resource, "total": envelope.total},
        )
    except Exception as e:
        return Response.from_error(e)


# ===== ECONOMIC MANAGEMENT =====


@mcp.tool()
async def list_companies() -> Response:
    """List the school's companies used in economic management.

    Returns at most 1000 records per call.
    """
    return await _list("companies")


@mcp.tool()
async def list_payments(
    status: str | None = None,
    payment_method_id: int | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
) -> Response:
    """List the payments/receipts of the school's economic management.

    Returns at most 1000 records per call; narrow the filters to see more.

    Args:
        status: 'cobrado' (collected) or 'pendiente' (pending)
        payment_method_id: Numeric payment method id (from list_payment_methods)
        date_from: Receipt date from, YYYY-MM-DD
        date_to: Receipt date to, YYYY-MM-DD
    """
    return await _list(
        "payments",
        status=status,
        payment_method_id=payment_method_id,
        date_from=date_from,
        date_to=date_to,
    )


@mcp.tool()
async def list_payment_methods() -> Response:
    """List the payment methods available (card, transfer, direct debit, cash...).

    Useful to find the ids accepted by list_payments(payment_method_id=...).
    """
    return await _list("payment_methods")


@mcp.tool()
async def list_plans() -> Response:
    """List billing plans/concepts with amount, VAT, periodicity and linked service."""
    return await _list("plans")


# ===== USERS =====


@mcp.tool()
async def list_users(query: str | None = None) -> Response:
    """List the users of the school.

    Args:
        query: Free-text search by name or other fields
    """
    return await _list("users", query=query)


@mcp.tool()
async def list_roles() -> Response:
    """List the roles/profiles of the school (student, teacher, tutor...)."""
    return await _list("roles")


# ===== SCHOOL STRUCTURE =====


@mcp.tool()
async def list_academic_years() -> Response:
    """List the academic years of the school."""
    return await _list("academic_years")


@mcp.tool()
async def list_school_structures(academic_year_id: int | None = None) -> Response:
    """List the school structure: levels, courses and groups.

    Args:
        academic_year_id: Limit the structure to one academic year (from list_academic_years)
    """
    return await _list("school_structures", academic_year_id=academic_year_id)


# ===== BEHAVIOUR, TRANSPORT, SERVICES =====


@mcp.tool()
async def list_incident_reports() -> Response:
    """List the behaviour incident reports of the school."""
    return await _list("incident_reports")


@mcp.tool()
async def list_transport_routes() -> Response:
    """List the active school transport routes."""
    return await _list("transport_routes")


@mcp.tool()
async def list_transport_stops(shift_id: int | None = None) -> Response:
    """List the school transport stops.

    Args:
        shift_id: Only stops of this shift
    """
    return await _list("transport_stops", shift_id=shift_id)


@mcp.tool()
async def list_services() -> Response:
    """List the active services of the school (canteen, extracurricular activities...)."""
    return await _list("services")


# ===== AUTHENTICATION =====


@mcp.tool()
async def login() -> Response:
    """Log in to the Cifra public API and obtain a new token.

    Tokens are obtained and renewed automatically; call this only after an
    authentication error, to force a fresh token.
    """
    logger.info("Forcing login")

    try:
        result = await get_resource_service().login()
        return Response(
            status="success",
            message=result.message,
            data=result.model_dump(),
        )
    except Exception as e:
        return Response.from_error(e)


def main() -> None:
    """Run the MCP server."""
    setup_logging(get_config().log_level)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
