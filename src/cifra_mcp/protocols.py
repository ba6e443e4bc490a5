"""Protocol definitions for dependency injection and interface contracts."""

from typing import Protocol

import httpx

from .models import Credentials


class TokenProvider(Protocol):
    """Protocol for authentication token providers."""

    async def get_valid_token(self, timeout: float | None = None) -> str:
        """Get a valid authentication token within timeout seconds.

        Returns:
            Token string, reused while fresh.

        Raises:
            AuthenticationError: If a token cannot be obtained.
        """
        ...

    async def refresh_token(self, timeout: float | None = None) -> str:
        """Log in again regardless of the cached token's age."""
        ...

    def invalidate(self, token: str) -> None:
        """Forget token if it is still the cached one."""
        ...


class LoginStrategy(Protocol):
    """Protocol for the ways a token can be requested from the server."""

    name: str

    async def login(
        self,
        http_client: httpx.AsyncClient,
        credentials: Credentials,
        *,
        timeout: float | None = None,
    ) -> str:
        """Perform one login handshake.

        Returns:
            Non-blank token string.

        Raises:
            MissingCredentialsError: If the credentials this strategy needs are blank.
            AuthenticationError: If the server yields no usable token.
            TransportError: For network errors, timeouts, DNS failures.
            RemoteAPIError: For unexpected HTTP statuses from the login endpoint.
        """
        ...
