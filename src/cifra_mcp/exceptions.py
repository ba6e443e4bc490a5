"""Cifra MCP custom exceptions.

Exception Design Principles:
1. Use these custom exceptions only when additional useful context can be provided
2. Handle exceptions as late as possible (preserve details until domain context is available)
3. Split on domain of actionable information:
   - Recoverable by user reconfiguration outside session (ConfigError, AuthenticationError)
   - Recoverable by retrying later (TransportError, RemoteAPIError with 5xx)
   - Potentially recoverable by LLM action in-session (NoSuchResourceError, RemoteAPIError with 4xx)
"""


class CifraMCPError(Exception):
    """Base exception for all Cifra MCP errors.

    Provides rich context and actionable suggestions beyond standard exceptions.
    All Cifra MCP custom exceptions inherit from this base class.
    """

    def __init__(
        self,
        message: str,  # the error message
        *,
        errors: list[str] = None,  # detailed list of errors (if available)
        suggestions: list[str] = None,  # remedial actions
        context: dict = None,  # additional detailed context
    ):
        """Initialize CifraMCPError.

        Args:
            message: Primary error message for users
            errors: List of specific error details
            suggestions: List of actionable suggestions for resolution
            context: Additional context information as key-value pairs
        """
        super().__init__(message)
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        self.context = context or {}


class ConfigError(CifraMCPError):
    """Application configuration errors - recoverable by user reconfiguration.

    Raised for an unknown login strategy name, and through
    MissingCredentialsError when the selected strategy has blank
    credentials. Field-level validation of the Config itself is left to
    pydantic.
    """

    pass


class AuthenticationError(CifraMCPError):
    """Login did not yield a usable token.

    Either the login endpoint rejected the credentials, or its response
    carried no non-blank token in any of the accepted shapes. Never retried
    automatically; the cached token is left untouched.
    """

    pass


class MissingCredentialsError(ConfigError, AuthenticationError):
    """The selected login strategy has no credentials to log in with.

    Both a configuration problem and a failed login, so callers catching
    either ConfigError or AuthenticationError see it.
    """

    pass


class TransportError(CifraMCPError):
    """Network level failure talking to the Cifra server.

    Wraps httpx.RequestError (connection refused, DNS failure, timeout).
    The original exception is kept as __cause__.
    """

    pass


class RemoteAPIError(CifraMCPError):
    """The server answered, but not with something usable.

    Covers non-success HTTP statuses (status_code is set) and payloads that
    are not JSON or do not have the expected shape (status_code is None).
    """

    def __init__(self, message: str, *, status_code: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class NoSuchResourceError(CifraMCPError):
    """Unknown resource name - recoverable by picking a listed resource.

    Carries similarity-based suggestions drawn from the resource table.
    """

    pass
