"""Authorization code flow orchestration service.

Coordinates PKCE generation, state handling, authorization URL construction
and redirect callback parsing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from urllib.parse import parse_qsl, urlparse

from pydantic import ValidationError

from entra_oauth.models.config import IdentityConfig
from entra_oauth.models.errors import (
    AuthorizationCallbackError,
    MalformedUrlError,
    MissingRedirectPayloadError,
    StateValidationError,
)
from entra_oauth.models.flow import AuthorizationQueryResponse, Prompt
from entra_oauth.models.security import PKCEParameters
from entra_oauth.primitives.pkce import PKCEManager
from entra_oauth.services.authorization_url import AuthorizationUrlBuilder
from entra_oauth.services.security import generate_state, validate_state

logger = logging.getLogger(__name__)


def parse_authorization_redirect(redirect_url: str) -> AuthorizationQueryResponse:
    """Parse the final redirect URL of an authorization request.

    The query component is used when present, otherwise the fragment.

    Args:
        redirect_url: Full redirect URL captured after authorization

    Returns:
        AuthorizationQueryResponse: Parsed redirect parameters

    Raises:
        MalformedUrlError: If the URL cannot be parsed
        MissingRedirectPayloadError: If the URL has neither query nor fragment
        AuthorizationCallbackError: If the payload has invalid field values
    """
    try:
        parsed = urlparse(redirect_url)
    except ValueError as e:
        raise MalformedUrlError(redirect_url, str(e)) from e

    payload = parsed.query or parsed.fragment
    if not payload:
        raise MissingRedirectPayloadError(redirect_url)

    try:
        return AuthorizationQueryResponse.model_validate(dict(parse_qsl(payload)))
    except ValidationError as e:
        raise AuthorizationCallbackError(
            f"Invalid redirect payload from {redirect_url}: {e}"
        ) from e


class OAuth2FlowManager:
    """Orchestrates authorization code flows.

    Handles the authorization flow from initial request generation through
    callback processing, including:
    - PKCE parameter generation
    - State parameter security (CSRF protection)
    - Authorization URL construction
    - Callback URL parsing and validation
    """

    def __init__(self):
        """Initialize the flow manager."""
        self._pkce_manager = PKCEManager()

    def start_authorization_flow(
        self,
        app_config: IdentityConfig,
        scope: Iterable[str],
        prompt: Prompt | None = None,
        login_hint: str | None = None,
    ) -> tuple[str, PKCEParameters, str]:
        """Start an authorization code flow with PKCE.

        Args:
            app_config: Client configuration including the redirect URI
            scope: Scopes to request
            prompt: Optional prompt behaviour
            login_hint: Optional username to pre-fill

        Returns:
            Tuple of (authorization_url, pkce_parameters, state)
            - authorization_url: URL for user to visit
            - pkce_parameters: Keep these for token exchange
            - state: Keep this for callback validation

        Raises:
            IdentityValidationError: If the request is invalid
            PKCEError: If PKCE generation fails
        """
        pkce_params = self._pkce_manager.generate_parameters()
        state = generate_state()

        logger.debug(f"Starting authorization flow for client {app_config.client_id}")

        builder = (
            AuthorizationUrlBuilder.from_config(app_config)
            .with_scope(scope)
            .with_state(state)
            .with_pkce(pkce_params)
        )
        if prompt is not None:
            builder = builder.with_prompt(prompt)
        if login_hint is not None:
            builder = builder.with_login_hint(login_hint)

        authorization_url = builder.url()

        logger.info(f"Generated authorization URL for client {app_config.client_id}")

        return authorization_url, pkce_params, state

    def handle_authorization_callback(
        self,
        callback_url: str,
        expected_state: str,
    ) -> AuthorizationQueryResponse:
        """Handle the redirect callback from the authorization server.

        Args:
            callback_url: Full callback URL received from authorization server
            expected_state: State parameter that was sent in authorization request

        Returns:
            AuthorizationQueryResponse: Parsed callback response

        Raises:
            AuthorizationCallbackError: If callback URL is malformed
            StateValidationError: If state parameter is missing or doesn't match
        """
        logger.debug(f"Processing authorization callback: {callback_url}")

        auth_response = parse_authorization_redirect(callback_url)

        if auth_response.state is None:
            raise StateValidationError(
                "Authorization server callback missing required state parameter"
            )

        validate_state(expected_state, auth_response.state)

        if auth_response.is_success():
            logger.info("Authorization callback successful")
        elif auth_response.is_error():
            logger.warning(
                f"Authorization callback contained error: {auth_response.error} - "
                f"{auth_response.error_description}"
            )
        else:
            logger.warning("Authorization callback missing both code and error")

        return auth_response
