"""Token endpoint response model.

Represents the JSON returned by the token endpoint for both successful
and error responses.
"""

from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict


class TokenResponse(BaseModel):
    """Token response (RFC 6749 Section 5).

    Includes both successful responses (Section 5.1) and error responses
    (Section 5.2), plus the identity platform's diagnostic extensions.
    """

    model_config = ConfigDict(extra="ignore")

    # Success response fields
    access_token: str | None = None
    token_type: str = "Bearer"
    expires_in: int | None = None  # Seconds until expiry
    ext_expires_in: int | None = None
    refresh_token: str | None = None
    scope: str | None = None
    id_token: str | None = None

    # Error response fields
    error: str | None = None
    error_description: str | None = None
    error_codes: list[int] | None = None
    error_uri: str | None = None
    correlation_id: str | None = None
    trace_id: str | None = None

    def is_success(self) -> bool:
        """Check if token response indicates success."""
        return self.error is None and self.access_token is not None

    def is_error(self) -> bool:
        """Check if token response indicates an error."""
        return self.error is not None

    def calculate_expires_at(self) -> float | None:
        """Calculate absolute expiry timestamp from expires_in.

        Returns:
            Unix timestamp when token expires, or None if no expiry
        """
        if self.expires_in is None:
            return None
        return time.time() + self.expires_in

    def scopes(self) -> list[str]:
        return self.scope.split() if self.scope else []
