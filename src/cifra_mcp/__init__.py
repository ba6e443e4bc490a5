"""Cifra MCP Server Package

A Model Context Protocol (MCP) server and async client for the read-only
Cifra public API of a school-management backend, with token caching and
HMAC request signatures.
"""

from .auth import (
    ApiKeyLogin,
    AuthManager,
    FallbackLogin,
    PasswordLogin,
    parse_token_response,
)
from .catalog import RESOURCES, ResourceSpec, get_resource
from .client import CifraClient, get_client
from .config import Config, get_config
from .consts import PACKAGE_VERSION
from .exceptions import (
    AuthenticationError,
    CifraMCPError,
    ConfigError,
    MissingCredentialsError,
    NoSuchResourceError,
    RemoteAPIError,
    TransportError,
)
from .models import Credentials, LoginResult, ResourceEnvelope, Response
from .service import ResourceService, get_resource_service
from .signature import sign

__version__ = PACKAGE_VERSION

__all__ = [
    "__version__",
    "get_config",
    "get_client",
    "get_resource",
    "get_resource_service",
    "sign",
    "parse_token_response",
    "Config",
    "Credentials",
    "CifraClient",
    "AuthManager",
    "PasswordLogin",
    "ApiKeyLogin",
    "FallbackLogin",
    "ResourceService",
    "ResourceSpec",
    "RESOURCES",
    "ResourceEnvelope",
    "LoginResult",
    "Response",
    "CifraMCPError",
    "ConfigError",
    "MissingCredentialsError",
    "AuthenticationError",
    "TransportError",
    "RemoteAPIError",
    "NoSuchResourceError",
]
