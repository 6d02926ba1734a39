"""
SwaggerMock Authentication Helpers

Bearer-token presence checks and the mocked OAuth token endpoint.
The mock server does not verify tokens; it only checks that a request
carries something shaped like a JWT bearer token.
"""

from typing import Dict, Any, Optional


DEFAULT_TOKEN_PATH = "/oauth/connect/token"

# Unsigned-looking JWT ({"alg":"HS256","typ":"JWT"}.{"foo":"bar"}), never verified
MOCK_ACCESS_TOKEN = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9"
    ".eyJmb28iOiJiYXIifQ"
    ".UIZchxQD36xuhacrJF9HQ5SIUxH5HBiv9noESAacsxU"
)


def is_token_request(method: str, path: str, token_path: str = DEFAULT_TOKEN_PATH) -> bool:
    """Check whether a request targets the OAuth token endpoint."""
    return method.upper() == "POST" and path == token_path


def oauth_token_response() -> Dict[str, Any]:
    """Body returned by the mocked OAuth token endpoint."""
    return {
        'access_token': MOCK_ACCESS_TOKEN,
        'expires_in': 3600,
        'token_type': 'Bearer'
    }


def validate_bearer_token(authorization: Optional[str]) -> bool:
    """
    Check that an Authorization header holds a JWT bearer token.

    Any token is accepted as long as the header reads "Bearer <token>"
    and the token starts like a base64url-encoded JWT header ("ey").

    Args:
        authorization: Value of the Authorization header, or None

    Returns:
        True if the header looks like a bearer JWT
    """
    if authorization is None or not authorization.strip():
        return False

    parts = authorization.split(" ")
    if len(parts) != 2:
        return False

    scheme, token = parts
    if scheme.lower() != "bearer":
        return False

    return token.lower().startswith("ey")
