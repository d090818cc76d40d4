"""Token endpoint response parsing.

Turns the raw response returned by the executor into a TokenResponse.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from entra_oauth.models.errors import TokenError
from entra_oauth.models.tokens import TokenResponse

logger = logging.getLogger(__name__)


def parse_token_response(response: httpx.Response) -> TokenResponse:
    """Parse token endpoint response into TokenResponse.

    Handles both successful responses (200) and error responses (400+)
    according to RFC 6749 Section 5.

    Args:
        response: HTTP response from token endpoint

    Returns:
        TokenResponse: Parsed response (success or error)

    Raises:
        TokenError: If response cannot be parsed
    """
    try:
        response_data = response.json()
    except ValueError as e:
        raise TokenError(
            f"Token endpoint returned non-JSON response ({response.status_code})"
        ) from e

    if not isinstance(response_data, dict):
        raise TokenError("Token endpoint returned an unexpected JSON document")

    if response.status_code == 200 and "access_token" not in response_data:
        raise TokenError("Token response missing required access_token")

    try:
        token_response = TokenResponse(**response_data)
    except ValidationError as e:
        raise TokenError(f"Invalid token response format: {e}") from e

    if token_response.is_error():
        logger.warning(
            f"Token request failed with {response.status_code}: "
            f"{token_response.error} - {token_response.error_description}"
        )
    else:
        logger.info("Token request successful")

    return token_response
