"""CSRF state handling and redirect URI checks for authorization requests."""

from __future__ import annotations

import secrets
import string
from urllib.parse import urlparse

from entra_oauth.models.errors import MalformedUrlError, StateValidationError

STATE_LENGTH = 32
_UNRESERVED = string.ascii_letters + string.digits + "-._~"


def generate_state(length: int = STATE_LENGTH) -> str:
    """Return a random ``state`` value built from RFC 3986 unreserved characters.

    The value is echoed back on the redirect and must be checked with
    ``validate_state`` before the authorization code is redeemed.
    """
    return "".join(secrets.choice(_UNRESERVED) for _ in range(length))


def validate_state(expected: str, actual: str) -> None:
    """Compare the ``state`` sent with the one returned, in constant time.

    Raises:
        StateValidationError: If the redirect carries a different state
    """
    if not secrets.compare_digest(expected, actual):
        raise StateValidationError("State parameter mismatch - possible CSRF attack")


def require_absolute_url(url: str) -> str:
    """Return ``url`` unchanged if it has both a scheme and a host.

    Raises:
        MalformedUrlError: If the URL cannot be parsed or is relative
    """
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise MalformedUrlError(url, str(e)) from e

    if not parsed.scheme or not parsed.netloc:
        raise MalformedUrlError(url, "expected an absolute URL with scheme and host")
    return url
