"""Request signatures for the Cifra public API."""

import hashlib
import hmac


def sign(token: str, secret_key: str) -> str:
    """Sign a token for the ``signature`` header.

    Args:
        token: Token currently used in the Authorization header.
        secret_key: Client private key shared with the server.

    Returns:
        Lowercase hex HMAC-SHA256 of the token keyed with secret_key.
    """
    return hmac.new(
        secret_key.encode("utf-8"), token.encode("utf-8"), hashlib.sha256
    ).hexdigest()
