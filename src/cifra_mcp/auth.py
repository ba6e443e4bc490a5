"""Authentication management with token refresh."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Annotated, Any

import httpx
from pydantic import AfterValidator, BaseModel, ValidationError

from .config import Config
from .consts import API_KEY_HEADER, LOGIN_UUID
from .exceptions import (
    AuthenticationError,
    ConfigError,
    MissingCredentialsError,
    TransportError,
)
from .models import Credentials
from .protocols import LoginStrategy
from .utils import check_status, decode_json, send_request

logger = logging.getLogger("cifra-mcp.auth")


# =============================================================================
# LOGIN RESPONSE SHAPES
# =============================================================================
# The login endpoints answer either {"data": {"token": ...}} or {"token": ...}.
# Shapes are tried in TOKEN_RESPONSE_SHAPES order; the first that validates wins.


def _non_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("token is blank")
    return value


TokenValue = Annotated[str, AfterValidator(_non_blank)]


class _TokenData(BaseModel):
    token: TokenValue


class NestedTokenResponse(BaseModel):
    """``{"data": {"token": "..."}}``"""

    data: _TokenData

    @property
    def token(self) -> str:
        return self.data.token


class FlatTokenResponse(BaseModel):
    """``{"token": "..."}``"""

    token: TokenValue


TOKEN_RESPONSE_SHAPES: tuple[type[BaseModel], ...] = (
    NestedTokenResponse,
    FlatTokenResponse,
)


def parse_token_response(payload: Any) -> str:
    """Extract the token from a login response body.

    Args:
        payload: Decoded JSON body of the login response.

    Returns:
        The non-blank token.

    Raises:
        AuthenticationError: If no accepted shape yields a non-blank token.
    """
    errors = []
    for shape in TOKEN_RESPONSE_SHAPES:
        try:
            return shape.model_validate(payload).token
        except ValidationError as e:
            errors.append(f"{shape.__name__}: {e.errors()[0]['msg']}")

    raise AuthenticationError(
        "Login failed: no token in server response",
        errors=errors,
        suggestions=[
            "Verify the configured login credentials",
            "Check that the server exposes the expected login endpoint",
        ],
    )


# =============================================================================
# LOGIN STRATEGIES
# =============================================================================


async def _post_login(
    http_client: httpx.AsyncClient, url: str, timeout: float | None, **kwargs
) -> str:
    if timeout is not None:
        kwargs["timeout"] = timeout
    response = await send_request(http_client, "POST", url, **kwargs)
    if response.status_code in (401, 403):
        raise AuthenticationError(
            f"Login rejected by server (HTTP {response.status_code})",
            suggestions=["Verify the configured login credentials"],
            context={"login_url": url, "status_code": response.status_code},
        )
    check_status(response)
    return parse_token_response(decode_json(response))


class PasswordLogin:
    """Form-encoded user/password login against /api/login."""

    name = "password"

    async def login(
        self,
        http_client: httpx.AsyncClient,
        credentials: Credentials,
        *,
        timeout: float | None = None,
    ) -> str:
        if not credentials.user or not credentials.password:
            raise MissingCredentialsError(
                "Login user and password are not configured",
                suggestions=["Set CIFRAMCP_USER and CIFRAMCP_PASSWORD"],
            )
        return await _post_login(
            http_client,
            credentials.login_url,
            timeout,
            params={"uuid": LOGIN_UUID},
            data={"user": credentials.user, "password": credentials.password},
        )


class ApiKeyLogin:
    """Login with the client api key in a header and an empty body."""

    name = "api_key"

    async def login(
        self,
        http_client: httpx.AsyncClient,
        credentials: Credentials,
        *,
        timeout: float | None = None,
    ) -> str:
        if not credentials.api_key:
            raise MissingCredentialsError(
                "API key is not configured",
                suggestions=["Set CIFRAMCP_API_KEY"],
            )
        return await _post_login(
            http_client,
            credentials.api_key_login_url,
            timeout,
            headers={API_KEY_HEADER: credentials.api_key},
        )


class FallbackLogin:
    """Try several strategies in order until one yields a token.

    Only authentication failures, missing credentials included, move on to the next
    strategy; transport and server errors propagate immediately.
    """

    def __init__(self, strategies: Iterable[LoginStrategy]):
        self.strategies = list(strategies)
        if not self.strategies:
            raise ValueError("FallbackLogin needs at least one strategy")
        self.name = "_then_".join(s.name for s in self.strategies)

    async def login(
        self,
        http_client: httpx.AsyncClient,
        credentials: Credentials,
        *,
        timeout: float | None = None,
    ) -> str:
        failures = []
        for strategy in self.strategies:
            try:
                return await strategy.login(http_client, credentials, timeout=timeout)
            except AuthenticationError as e:
                logger.warning(f"Login strategy '{strategy.name}' failed: {e.message}")
                failures.append(f"{strategy.name}: {e.message}")

        raise AuthenticationError(
            "Login failed with every configured strategy",
            errors=failures,
            suggestions=["Verify the configured login credentials and api key"],
        )


def build_login_strategy(name: str) -> LoginStrategy:
    """Build the login strategy named in Config.login_strategy."""
    if name == "password":
        return PasswordLogin()
    if name == "api_key":
        return ApiKeyLogin()
    if name == "password_then_api_key":
        return FallbackLogin([PasswordLogin(), ApiKeyLogin()])
    raise ConfigError(
        f"Unknown login strategy: {name}",
        suggestions=["Use one of: password, api_key, password_then_api_key"],
    )


# =============================================================================
# TOKEN CACHE
# =============================================================================


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class CachedToken:
    """A token plus when, and with which credentials, it was obtained."""

    value: str
    obtained_at: datetime
    credentials: Credentials


class AuthManager:
    """Authentication token manager.

    Responsibilities:
    - Manage token lifecycle (refresh, expiry)
    - Request new tokens through the configured login strategy
    - Serialize refreshes so at most one login is in flight
    """

    def __init__(
        self,
        config: Config,
        http_client: httpx.AsyncClient,
        login_strategy: LoginStrategy | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize AuthManager.

        Args:
            config: Config instance with credentials and refresh window.
            http_client: HTTP client (for token requests only)
            login_strategy: How to log in. If None, built from config.login_strategy.
            clock: Returns the current aware datetime. Defaults to UTC now.
        """
        self.config = config
        self.http_client = http_client
        self.login_strategy = login_strategy or build_login_strategy(
            config.login_strategy
        )
        self._clock = clock or _utcnow
        self._cached: CachedToken | None = None
        self._lock = asyncio.Lock()

    @property
    def cached_token(self) -> CachedToken | None:
        """The token currently held, fresh or not."""
        return self._cached

    async def get_valid_token(self, timeout: float | None = None) -> str:
        """Get a valid authentication token.

        Args:
            timeout: Seconds allowed for the whole step, including waiting for
                a refresh already in flight and the login request itself.

        Returns:
            Cached token while inside the refresh window, otherwise a new one.

        Raises:
            MissingCredentialsError: If the login strategy lacks credentials.
            AuthenticationError: If a token cannot be obtained.
            TransportError: If the timeout runs out first.
        """
        async with self._deadline(timeout):
            async with self._lock:
                if self._needs_refresh():
                    await self._refresh_token(timeout)
                return self._cached.value

    async def refresh_token(self, timeout: float | None = None) -> str:
        """Log in again regardless of the cached token's age."""
        async with self._deadline(timeout):
            async with self._lock:
                await self._refresh_token(timeout)
                return self._cached.value

    def invalidate(self, token: str) -> None:
        """Drop the cached token if it is still the given one."""
        if self._cached is not None and self._cached.value == token:
            logger.info("Discarding cached token rejected by server")
            self._cached = None

    def _needs_refresh(self) -> bool:
        """Check if token needs refresh."""
        if self._cached is None:
            return True

        if self._cached.credentials != self.config.credentials:
            logger.info("Credentials changed since last login")
            return True

        age = self._clock() - self._cached.obtained_at
        return age >= self.config.refresh_window

    @asynccontextmanager
    async def _deadline(self, timeout: float | None):
        """Bound the token step, lock wait included."""
        try:
            async with asyncio.timeout(timeout):
                yield
        except TimeoutError as e:
            raise TransportError(
                f"Timed out after {timeout}s obtaining a token",
                suggestions=["Retry later or raise the request timeout"],
                context={"timeout": timeout},
            ) from e

    async def _refresh_token(self, timeout: float | None = None) -> None:
        """Log in and replace the cached token. Caller holds the lock."""
        logger.debug(f"Requesting new token ({self.login_strategy.name} login)")

        credentials = self.config.credentials
        token = await self.login_strategy.login(
            self.http_client, credentials, timeout=timeout
        )
        self._cached = CachedToken(token, self._clock(), credentials)

        logger.info("Token refreshed successfully")
