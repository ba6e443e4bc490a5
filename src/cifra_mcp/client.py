"""Cifra client — handles low-level API calls."""

import logging
from collections.abc import Mapping
from datetime import date
from functools import cache
from typing import Any

import httpx

from .auth import AuthManager
from .config import Config, get_config
from .consts import SIGNATURE_HEADER, USER_AGENT
from .protocols import TokenProvider
from .signature import sign
from .utils import check_status, decode_json, send_request

logger = logging.getLogger("cifra-mcp.client")


def _query_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop unset filters; dates go out as YYYY-MM-DD."""
    query = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        query[key] = value.isoformat() if isinstance(value, date) else value
    return query


class CifraClient:
    """Cifra public API client with authentication.

    Responsibilities:
    - Sign every request with the current token
    - Provide GET/POST helpers returning parsed JSON
    - Translate HTTP failures into domain exceptions
    """

    def __init__(
        self,
        config: Config | None = None,
        token_provider: TokenProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize CifraClient.

        Args:
            config: Config instance. If None, uses get_config().
            token_provider: Authentication token provider. If None, creates AuthManager.
            http_client: HTTP client. If None, creates a new one.
        """
        self.config = config or get_config()

        self.http_client = http_client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=self.config.timeout_seconds,
            follow_redirects=True,
        )

        self.token_provider = token_provider or AuthManager(
            self.config, self.http_client
        )

        logger.info(f"Cifra client created for {self.config.base_url}")

    def url(self, path: str) -> str:
        """Complete URL for an API path."""
        return f"{self.config.base_url}{path}"

    def auth_headers(self, token: str) -> dict[str, str]:
        """Authorization and signature headers for a token."""
        return {
            "Authorization": f"Token token={token}",
            SIGNATURE_HEADER: sign(token, self.config.secret_key),
        }

    async def get_json(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Get JSON from an API path with authentication.

        Args:
            path: API path, appended to the configured base URL.
            params: Query filters. None values are left out.
            timeout: Per-request timeout in seconds, overriding the client's.
                Also bounds the token step, login included.

        Returns:
            Parsed JSON data.

        Raises:
            AuthenticationError: From auth if no token can be obtained,
                including MissingCredentialsError for blank credentials.
            TransportError: For network errors, timeouts, DNS failures, or
                when obtaining the token outlasts the timeout.
            RemoteAPIError: For HTTP 4xx/5xx responses or malformed bodies.
        """
        return await self._request(
            "GET", path, timeout=timeout, params=_query_params(params)
        )

    async def post_json(
        self,
        path: str,
        json: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Post JSON to an API path with authentication.

        Args:
            path: API path, appended to the configured base URL.
            json: Request body.
            timeout: Per-request timeout in seconds, overriding the client's.
                Also bounds the token step, login included.

        Returns:
            Parsed JSON response data.

        Raises:
            Same as get_json.
        """
        return await self._request("POST", path, timeout=timeout, json=json)

    async def _request(
        self, method: str, path: str, *, timeout: float | None, **kwargs
    ) -> Any:
        url = self.url(path)
        if timeout is not None:
            kwargs["timeout"] = timeout

        token = await self.token_provider.get_valid_token(timeout)
        response = await send_request(
            self.http_client, method, url, headers=self.auth_headers(token), **kwargs
        )

        if response.status_code == 401 and self.config.retry_on_auth_failure:
            # Server dropped the token before our refresh window ran out
            logger.warning(f"{method} {path} got HTTP 401, retrying with a new token")
            self.token_provider.invalidate(token)
            token = await self.token_provider.get_valid_token(timeout)
            response = await send_request(
                self.http_client,
                method,
                url,
                headers=self.auth_headers(token),
                **kwargs,
            )

        check_status(response)
        logger.debug(f"{method} {path} successful")
        return decode_json(response)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.http_client.aclose()

    async def __aenter__(self) -> "CifraClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


@cache
def get_client() -> CifraClient:
    """Get a cached CifraClient instance with default configuration.

    Raises:
        No exceptions raised directly.
        May propagate exceptions from Config() initialization via get_config().
    """
    return CifraClient()
