"""Utility functions for string similarity and HTTP error translation."""

import logging
from typing import Any

import httpx

from .exceptions import RemoteAPIError, TransportError

logger = logging.getLogger("cifra-mcp.utils")


def suggest_similar_strings(
    target: str,
    candidates: set[str] | list[str],
    threshold: float = 0.6,
    max_results: int = 3,
) -> list[str]:
    """Suggest similar strings using basic similarity scoring.

    Args:
        target: String to match against.
        candidates: Set or list of candidate strings.
        threshold: Minimum similarity threshold (0.0 to 1.0).
        max_results: Maximum number of suggestions to return.

    Returns:
        List of similar strings, sorted by similarity (highest first).
    """
    from difflib import SequenceMatcher

    suggestions = []
    for candidate in candidates:
        similarity = SequenceMatcher(None, target.lower(), candidate.lower()).ratio()
        if similarity >= threshold:
            suggestions.append((candidate, similarity))

    # Sort by similarity (descending) and return just the strings
    suggestions.sort(key=lambda x: x[1], reverse=True)
    return [s[0] for s in suggestions[:max_results]]


async def send_request(
    http_client: httpx.AsyncClient, method: str, url: str, **kwargs
) -> httpx.Response:
    """Send one request, translating network failures.

    Raises:
        TransportError: For network errors, timeouts, DNS failures.
    """
    logger.debug(f"{method} {url}")
    try:
        return await http_client.request(method, url, **kwargs)
    except httpx.RequestError as e:
        raise TransportError(
            f"Could not reach Cifra server: {e}",
            errors=[str(e)],
            suggestions=[
                "Check that the Cifra server is running",
                "Verify the configured base URL",
                "Try again - this may be a temporary network issue",
            ],
            context={"url": url, "method": method},
        ) from e


def check_status(response: httpx.Response) -> None:
    """Raise RemoteAPIError for 4xx/5xx responses."""
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise RemoteAPIError(
            f"{response.request.method} {response.request.url.path} "
            f"returned HTTP {response.status_code}",
            status_code=response.status_code,
            errors=[response.text[:500]] if response.text else [],
            context={"url": str(response.request.url)},
        ) from e


def decode_json(response: httpx.Response) -> Any:
    """Parse a response body as JSON.

    Raises:
        RemoteAPIError: If the body is not valid JSON.
    """
    try:
        return response.json()
    except ValueError as e:
        raise RemoteAPIError(
            "Server returned a malformed (non-JSON) payload",
            errors=[str(e)],
            context={"url": str(response.request.url)},
        ) from e
