"""MCP server resources describing the Cifra connection and resource catalog."""

import logging
from typing import Any

from .catalog import RESOURCES
from .config import Config
from .consts import MAX_RECORDS_PER_CALL

logger = logging.getLogger("cifra-mcp.resources")


def get_info_resource(config: Config | None = None) -> str:
    """Basic information about the configured Cifra server.

    Args:
        config: Config instance. If None, creates new instance.

    Returns:
        Info string about the Cifra connection.
    """
    if config is None:
        config = Config()

    return f"""Cifra Public API MCP Server

Endpoint: {config.base_url}
Login strategy: {config.login_strategy}
Token reused for: {config.refresh_window}
Log Level: {config.log_level}

Every listing returns at most {MAX_RECORDS_PER_CALL} records per call.
Narrow the filters when a listing comes back full."""


def get_catalog_resource() -> list[dict[str, Any]]:
    """Available listings with their endpoints and filters.

    Returns:
        One dict per resource, in catalog order.
    """
    return [spec.to_dict() for spec in RESOURCES]


def register_resources(mcp, config: Config | None = None) -> None:
    """Register all resources with the MCP server.

    Args:
        mcp: FastMCP instance to register resources with.
        config: Config instance. If None, creates new instance.
    """
    logger.debug("Registering MCP resources")

    @mcp.resource("cifra://info")
    def info_resource() -> str:
        """Basic information about the configured Cifra server."""
        return get_info_resource(config)

    @mcp.resource("cifra://resources")
    def catalog_resource() -> list[dict[str, Any]]:
        """Available listings with their endpoints and filters."""
        return get_catalog_resource()

    logger.info("Registered 2 MCP resources")
