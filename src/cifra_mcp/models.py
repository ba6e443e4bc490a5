from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .consts import API_KEY_LOGIN_URL_PATH, LOGIN_URL_PATH
from .exceptions import CifraMCPError, RemoteAPIError

# =============================================================================
# UNIFIED RESPONSE MODEL
# =============================================================================
# Single response type for all MCP tools


class Response(BaseModel):
    """Unified response type for all MCP tools."""

    status: Literal["success", "error"] = Field(
        ..., description="Response status indicating outcome"
    )
    message: str = Field(..., description="Human-readable summary of the response")
    data: Any | None = Field(
        None,
        description="Response payload - can be dict, pydantic model, or any serializable type",
    )
    errors: list[str] = Field(
        default_factory=list, description="List of error messages"
    )
    suggestions: list[str] = Field(
        default_factory=list, description="Actionable suggestions for the user"
    )
    metadata: dict[str, Any] | None = Field(
        None, description="Additional context and domain-specific information"
    )

    @classmethod
    def from_error(cls, error: Exception) -> "Response":
        """Create Response from any Exception, with potentially helpful info for recovery.

        Args:
            error: Any Exception instance

        Returns:
            Response object with error details
        """
        if isinstance(error, RemoteAPIError) and error.status_code is not None:
            # HTTP errors get user-friendly messaging
            status_code = error.status_code
            if status_code >= 500:
                message = f"Cifra server error ({status_code}): {error.message}"
                suggestions = ["Try again later - the server may be temporarily down"]
            elif status_code == 401:
                message = f"Authentication failed ({status_code}): {error.message}"
                suggestions = [
                    "Call login() to obtain a fresh token",
                    "Verify the configured secret key matches the server",
                ]
            elif status_code == 404:
                message = f"Resource not found ({status_code}): {error.message}"
                suggestions = ["Check the Cifra base URL configuration"]
            else:
                message = f"HTTP error ({status_code}): {error.message}"
                suggestions = ["Check the filter values and try again"]

            return cls(
                status="error",
                message=message,
                errors=error.errors or [error.message],
                suggestions=suggestions + error.suggestions,
                metadata={
                    **error.context,
                    "exception_type": type(error).__name__,
                    "status_code": status_code,
                },
            )
        elif isinstance(error, CifraMCPError):
            # Use rich context from CifraMCPError
            return cls(
                status="error",
                message=error.message,
                errors=error.errors,
                suggestions=error.suggestions,
                metadata={**error.context, "exception_type": type(error).__name__},
            )
        elif isinstance(error, ValidationError):
            # Filter arguments rejected at the call boundary
            return cls(
                status="error",
                message=f"Invalid arguments: {error.error_count()} error(s)",
                errors=[
                    f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}"
                    for e in error.errors()
                ],
                suggestions=["Fix the listed arguments and call the tool again"],
                metadata={"exception_type": type(error).__name__},
            )
        else:
            # Generic exception handling
            return cls(
                status="error",
                message=f"Unexpected error: {str(error)}",
                errors=[str(error)],
                suggestions=[
                    "Check server logs for detailed information",
                    "Try again - this may be a temporary issue",
                ],
                metadata={"exception_type": type(error).__name__},
            )


# =============================================================================
# CIFRA API MODELS
# =============================================================================


class Credentials(BaseModel):
    """Everything needed to log in to and sign requests for one Cifra server.

    Immutable; a new snapshot is taken from Config whenever it is needed, so
    comparing two snapshots tells whether the server was reconfigured.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str
    api_key: str = Field("", repr=False)
    secret_key: str = Field(..., repr=False)
    user: str = ""
    password: str = Field("", repr=False)

    @property
    def login_url(self) -> str:
        """URL for user/password logins."""
        return f"{self.base_url}{LOGIN_URL_PATH}"

    @property
    def api_key_login_url(self) -> str:
        """URL for api-key logins."""
        return f"{self.base_url}{API_KEY_LOGIN_URL_PATH}"


class ResourceEnvelope(BaseModel):
    """Result of one resource listing: the records plus a count and summary."""

    total: int = Field(..., ge=0, description="Number of records in items")
    items: list[Any] = Field(default_factory=list, description="Records as returned")
    message: str = Field(..., description="Human-readable summary for the user")

    @model_validator(mode="after")
    def _total_matches_items(self) -> "ResourceEnvelope":
        if self.total != len(self.items):
            raise ValueError(
                f"total ({self.total}) does not match number of items ({len(self.items)})"
            )
        return self

    @classmethod
    def from_items(cls, items: list[Any], noun: str) -> "ResourceEnvelope":
        """Wrap records, deriving total and message from them."""
        total = len(items)
        return cls(total=total, items=items, message=f"Obtained {total} {noun}")


class LoginResult(BaseModel):
    """Outcome of an explicit login."""

    token: str
    message: str = "Login successful"
