"""Client-credentials token exchange."""

import base64
from typing import Optional

import requests

from toptracks.constants import DEFAULT_HTTP_TIMEOUT_SEC, TOKEN_URL, get_logger
from toptracks.errors import AuthError
from toptracks.models import Credentials

logger = get_logger("auth")


def basic_auth_header(credentials: Credentials) -> str:
    raw = f"{credentials.client_id}:{credentials.client_secret}".encode("utf-8")
    return f"Basic {base64.b64encode(raw).decode('ascii')}"


def acquire_token(
    credentials: Credentials,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_HTTP_TIMEOUT_SEC,
) -> str:
    """
    Exchange client credentials for a bearer token.

    Args:
        credentials: Client id and secret of the Spotify application
        session: Optional requests session, a fresh request is made otherwise
        timeout: Request timeout in seconds

    Raises:
        AuthError: On transport failure, a non-200 status or a body
            without a string ``access_token``.
    """
    http = session or requests
    try:
        response = http.post(
            TOKEN_URL,
            headers={"Authorization": basic_auth_header(credentials)},
            data={"grant_type": "client_credentials"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise AuthError(f"Exception getting token: {e}") from e

    if response.status_code != 200:
        raise AuthError(f"Failed to get token: {response.status_code} {response.reason}")

    try:
        token = response.json()["access_token"]
    except (ValueError, KeyError, TypeError) as e:
        raise AuthError(f"Exception getting token: malformed response ({e!r})") from e
    if not isinstance(token, str):
        raise AuthError("Exception getting token: access_token is not a string")

    logger.debug("Access token acquired")
    return token
