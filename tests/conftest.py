"""Pytest configuration and shared fixtures"""

import asyncio
import os
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import pytest

from cifra_mcp.auth import AuthManager
from cifra_mcp.client import CifraClient
from cifra_mcp.config import Config
from cifra_mcp.consts import API_KEY_LOGIN_URL_PATH, LOGIN_URL_PATH
from cifra_mcp.service import ResourceService

BASE_URL = "https://cifra.test"
SECRET_KEY = "s3cret"


class FakeCifraServer:
    """In-process stand-in for the Cifra public API, used as a MockTransport handler.

    Every login issues a new token tok-1, tok-2, ... unless login_payload is
    set. API paths answer with the payload registered in routes.
    """

    def __init__(self):
        self.routes: dict[str, Any] = {}
        self.login_payload: Any = None
        self.login_status = 200
        self.login_delay = 0.0
        self.login_calls = 0
        self.rejected_tokens: set[str] = set()
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path in (LOGIN_URL_PATH, API_KEY_LOGIN_URL_PATH):
            self.login_calls += 1
            if self.login_delay:
                await asyncio.sleep(self.login_delay)
            if self.login_payload is not None:
                return httpx.Response(self.login_status, json=self.login_payload)
            return httpx.Response(
                self.login_status, json={"data": {"token": f"tok-{self.login_calls}"}}
            )

        token = request.headers.get("Authorization", "").removeprefix("Token token=")
        if token in self.rejected_tokens:
            return httpx.Response(401, json={"error": "invalid token"})
        if request.url.path not in self.routes:
            return httpx.Response(404, json={"error": "not found"})
        return httpx.Response(200, json=self.routes[request.url.path])

    @property
    def api_requests(self) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if r.url.path not in (LOGIN_URL_PATH, API_KEY_LOGIN_URL_PATH)
        ]


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clean_env():
    """Fixture that temporarily clears CIFRAMCP_* environment variables.

    This ensures Config tests see the true defaults without interference
    from environment variables that might be set in the user's shell.
    """
    cifra_vars = {
        key: value for key, value in os.environ.items() if key.startswith("CIFRAMCP_")
    }

    for key in cifra_vars:
        os.environ.pop(key, None)

    try:
        yield
    finally:
        for key in list(os.environ):
            if key.startswith("CIFRAMCP_"):
                os.environ.pop(key)
        for key, value in cifra_vars.items():
            os.environ[key] = value


@pytest.fixture
def clean_config(clean_env):
    """Config instance built from defaults only."""
    return Config()


@pytest.fixture
def config(clean_env):
    """Config pointing at the fake server with full credentials."""
    return Config(
        base_url=BASE_URL,
        api_key="key-123",
        secret_key=SECRET_KEY,
        user="admin",
        password="pw",
        log_level="DEBUG",
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 13, 9, 0, tzinfo=UTC))


@pytest.fixture
def fake_server():
    return FakeCifraServer()


@pytest.fixture
def http_client(fake_server):
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_server))


@pytest.fixture
def auth_manager(config, http_client, clock):
    return AuthManager(config, http_client, clock=clock)


@pytest.fixture
def client(config, http_client, auth_manager):
    return CifraClient(config, token_provider=auth_manager, http_client=http_client)


@pytest.fixture
def service(client):
    return ResourceService(client)
