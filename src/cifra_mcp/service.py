"""Resource listing operations over the Cifra public API."""

import logging
from functools import cache
from typing import Any

from .catalog import ResourceFilters, ResourceSpec, get_resource
from .client import CifraClient, get_client
from .consts import MAX_RECORDS_PER_CALL
from .exceptions import RemoteAPIError
from .models import LoginResult, ResourceEnvelope

logger = logging.getLogger("cifra-mcp.service")


class ResourceService:
    """Runs any row of the resource table and wraps the result.

    Requires a client instance.
    """

    def __init__(self, client: CifraClient):
        """Initialize ResourceService.

        Args:
            client: CifraClient instance for API calls.
        """
        self.client = client
        self.config = client.config

    async def list_resource(
        self,
        resource: str | ResourceSpec,
        filters: ResourceFilters | dict[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> ResourceEnvelope:
        """List the records of one resource.

        Args:
            resource: Resource name from the catalog, or its ResourceSpec.
            filters: Filter model or mapping of filter names to values. Unset
                filters are not sent.
            timeout: Per-request timeout in seconds.

        Returns:
            Envelope with total, items and a summary message. The server
            caps a single call at MAX_RECORDS_PER_CALL records.

        Raises:
            NoSuchResourceError: If the resource name is unknown.
            pydantic.ValidationError: If filters do not fit the resource.
            AuthenticationError: From auth, MissingCredentialsError included.
            TransportError, RemoteAPIError: From the client.
        """
        spec = resource if isinstance(resource, ResourceSpec) else get_resource(resource)
        params = spec.build_filters(filters).to_params()

        logger.debug(f"Listing {spec.name} with filters {params}")
        payload = await self.client.get_json(spec.path, params, timeout=timeout)
        items = self._as_items(spec, payload)

        if len(items) >= MAX_RECORDS_PER_CALL:
            logger.warning(
                f"{spec.name} returned {len(items)} records, the per-call maximum; "
                "results may be truncated, narrow the filters"
            )

        envelope = ResourceEnvelope.from_items(items, spec.noun)
        logger.info(envelope.message)
        return envelope

    async def login(self) -> LoginResult:
        """Force a new login and cache the resulting token."""
        token = await self.client.token_provider.refresh_token()
        return LoginResult(token=token)

    @staticmethod
    def _as_items(spec: ResourceSpec, payload: Any) -> list[Any]:
        if isinstance(payload, list):
            return payload
        if spec.coerce_single:
            if payload is None:
                return []
            if isinstance(payload, dict):
                return [payload]
        raise RemoteAPIError(
            f"Expected a list of {spec.noun}, got {type(payload).__name__}",
            context={"resource": spec.name, "path": spec.path},
        )


@cache
def get_resource_service() -> ResourceService:
    """Get a cached ResourceService instance using the default client."""
    return ResourceService(get_client())
