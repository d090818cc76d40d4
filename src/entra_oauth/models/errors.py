"""Exception hierarchy for identity platform request construction.

Provides specific exception types for each failure mode so callers can present
a precise diagnostic naming the missing or conflicting field.
"""

from __future__ import annotations


class OAuth2Error(Exception):
    """Base exception for all OAuth 2.0 / OpenID Connect errors."""

    pass


class IdentityValidationError(OAuth2Error):
    """Raised when a request fails validation before any network call."""

    pass


class MissingRequiredValueError(IdentityValidationError):
    """Raised when a required request parameter is absent or blank."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        detail = f": {message}" if message else ""
        super().__init__(f"Missing required value: {field}{detail}")


class ConflictingValuesError(IdentityValidationError):
    """Raised when two mutually exclusive parameters are both set."""

    def __init__(self, first: str, second: str):
        self.first = first
        self.second = second
        super().__init__(
            f"Conflicting values: {first} and {second} must not both be set"
        )


class InvalidValueError(IdentityValidationError):
    """Raised when a parameter is present but not allowed in this request."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid value for {field}: {reason}")


class MalformedUrlError(IdentityValidationError):
    """Raised when a URL cannot be parsed or lacks a scheme and host."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Malformed URL {url!r}: {reason}")


class UpstreamHttpError(OAuth2Error):
    """Raised when the transport fails to complete a token request."""

    pass


class TokenError(OAuth2Error):
    """Raised when a token endpoint response cannot be used."""

    pass


class AuthorizationError(OAuth2Error):
    """Raised when user authorization fails."""

    pass


class UserAuthCancelledError(AuthorizationError):
    """Raised when the user or caller cancels the interactive authorization."""

    pass


class AuthorizationTimeoutError(AuthorizationError):
    """Raised when no redirect is captured within the allotted time."""

    pass


class PKCEError(OAuth2Error):
    """Raised when PKCE parameter generation or validation fails."""

    pass


class CertificateError(OAuth2Error):
    """Raised when certificate material cannot be used to sign an assertion."""

    pass


class AuthorizationCallbackError(OAuth2Error):
    """Raised when redirect callback data is malformed or invalid.

    This indicates the authorization server sent an invalid redirect URL,
    not that our callback handling code failed.
    """

    pass


class MissingRedirectPayloadError(AuthorizationCallbackError):
    """Raised when a redirect URL carries neither a query nor a fragment."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"No query or fragment returned on redirect, url: {url}"
        )


class StateValidationError(AuthorizationCallbackError):
    """Raised when OAuth state parameter validation fails.

    This indicates either a missing state parameter or a state mismatch,
    which could indicate a CSRF attack or authorization server issue.
    """

    pass
