"""High-value constants for the Cifra MCP package."""

# Package metadata
PACKAGE_VERSION = "0.3.0"
SERVER_NAME = "cifra-mcp"
USER_AGENT = f"{SERVER_NAME}/{PACKAGE_VERSION}"

# External API contract consts
LOGIN_URL_PATH = "/api/login"
LOGIN_UUID = "111"
API_KEY_LOGIN_URL_PATH = "/api_publica/login"
API_KEY_HEADER = "api-key"
SIGNATURE_HEADER = "signature"
MAX_RECORDS_PER_CALL = 1000  # enforced server-side

# Business logic consts
DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_SECRET_KEY = "secret"
DEFAULT_TOKEN_EXPIRY_MINUTES = 60
TOKEN_REFRESH_MARGIN_MINUTES = 10  # refresh 10min early
