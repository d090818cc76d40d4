"""Immutable builders for authorization URLs.

Each ``with_*`` call returns a new builder, so a partially configured
builder can be shared and branched safely. Validation runs once, in
``build()`` or ``url()``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from entra_oauth.models.config import (
    AuthoritySelector,
    CloudInstance,
    IdentityConfig,
    TenantId,
)
from entra_oauth.models.flow import (
    AuthorizationRequest,
    OpenIdAuthorizationRequest,
    Prompt,
    ResponseMode,
    ResponseType,
)
from entra_oauth.models.security import PKCEParameters
from entra_oauth.primitives.pkce import generate_nonce
from entra_oauth.services.security import generate_state

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationUrlBuilder:
    """Builds the ``/authorize`` URL for the authorization code grant."""

    request: AuthorizationRequest = field(
        default_factory=lambda: AuthorizationRequest(app_config=IdentityConfig())
    )

    @classmethod
    def for_client(cls, client_id: str) -> AuthorizationUrlBuilder:
        return cls().with_client_id(client_id)

    @classmethod
    def from_config(cls, app_config: IdentityConfig) -> AuthorizationUrlBuilder:
        return cls(request=AuthorizationRequest(app_config=app_config))

    def _replace(self, **changes: Any) -> AuthorizationUrlBuilder:
        return replace(self, request=replace(self.request, **changes))

    def _replace_config(self, **changes: Any) -> AuthorizationUrlBuilder:
        return self._replace(app_config=replace(self.request.app_config, **changes))

    # Configuration

    def with_client_id(self, client_id: str) -> AuthorizationUrlBuilder:
        return self._replace_config(client_id=client_id)

    def with_redirect_uri(self, redirect_uri: str) -> AuthorizationUrlBuilder:
        return self._replace_config(redirect_uri=redirect_uri)

    def with_tenant(self, tenant: str) -> AuthorizationUrlBuilder:
        """Convenience for ``with_authority(TenantId(tenant))``."""
        return self._replace_config(authority=TenantId(tenant))

    def with_authority(self, authority: AuthoritySelector) -> AuthorizationUrlBuilder:
        return self._replace_config(authority=authority)

    def with_cloud_instance(
        self, cloud_instance: CloudInstance
    ) -> AuthorizationUrlBuilder:
        return self._replace_config(cloud_instance=cloud_instance)

    def with_extra_query_parameters(
        self, parameters: Mapping[str, str]
    ) -> AuthorizationUrlBuilder:
        merged = {**self.request.app_config.extra_query_parameters, **parameters}
        return self._replace_config(extra_query_parameters=merged)

    # Request parameters

    def with_response_type(
        self, response_type: ResponseType | Iterable[ResponseType]
    ) -> AuthorizationUrlBuilder:
        """Add response types. Defaults to ``code`` when none are added.

        Include ``code`` for the authorization code flow; ``id_token`` or
        ``token`` may be added for the hybrid flow.
        """
        if isinstance(response_type, ResponseType):
            response_type = [response_type]
        return self._replace(
            response_type=self.request.response_type | frozenset(response_type)
        )

    def with_response_mode(self, response_mode: ResponseMode) -> AuthorizationUrlBuilder:
        """Specify how the identity platform returns the response.

        - query: code as a query string parameter on the redirect URI. Not
          supported when requesting an id_token.
        - fragment: default when an id_token is requested.
        - form_post: POST containing the code to the redirect URI.
        """
        return self._replace(response_mode=response_mode)

    def with_nonce(self, nonce: str) -> AuthorizationUrlBuilder:
        return self._replace(nonce=nonce)

    def with_generated_nonce(self) -> AuthorizationUrlBuilder:
        return self._replace(nonce=generate_nonce())

    def with_state(self, state: str) -> AuthorizationUrlBuilder:
        return self._replace(state=state)

    def with_generated_state(self) -> AuthorizationUrlBuilder:
        return self._replace(state=generate_state())

    def with_scope(self, scope: str | Iterable[str]) -> AuthorizationUrlBuilder:
        """Add scopes the user is asked to consent to."""
        if isinstance(scope, str):
            scope = [scope]
        # A space-joined string carries several scopes
        added = tuple(s for item in scope for s in item.split())
        return self._replace(scope=self.request.scope + added)

    def with_offline_access(self) -> AuthorizationUrlBuilder:
        """Request a refresh token by adding the ``offline_access`` scope."""
        return self.with_scope("offline_access")

    def with_prompt(self, prompt: Prompt) -> AuthorizationUrlBuilder:
        return self._replace(prompt=prompt)

    def with_domain_hint(self, domain_hint: str) -> AuthorizationUrlBuilder:
        return self._replace(domain_hint=domain_hint)

    def with_login_hint(self, login_hint: str) -> AuthorizationUrlBuilder:
        return self._replace(login_hint=login_hint)

    def with_code_challenge(self, code_challenge: str) -> AuthorizationUrlBuilder:
        return self._replace(code_challenge=code_challenge)

    def with_code_challenge_method(self, method: str) -> AuthorizationUrlBuilder:
        return self._replace(code_challenge_method=method)

    def with_pkce(self, pkce: PKCEParameters) -> AuthorizationUrlBuilder:
        """Set code_challenge and code_challenge_method from PKCE parameters.

        Keep the parameters: the code_verifier is needed to redeem the code.
        """
        return self._replace(
            code_challenge=pkce.code_challenge,
            code_challenge_method=pkce.code_challenge_method,
        )

    # Terminal operations

    def build(self) -> AuthorizationRequest:
        """Validate and return the immutable request.

        Raises:
            IdentityValidationError: If the request cannot produce a URL
        """
        self.request.build_authorization_url()
        return self.request

    def url(self, cloud_instance: CloudInstance | None = None) -> str:
        url = self.request.build_authorization_url(cloud_instance)
        logger.debug(
            f"Built authorization URL for client {self.request.app_config.client_id}"
        )
        return url


@dataclass(frozen=True)
class OpenIdAuthorizationUrlBuilder(AuthorizationUrlBuilder):
    """Builds the ``/authorize`` URL for OpenID Connect sign-in.

    A nonce is generated when none is supplied. Call ``build()`` and keep
    the returned request to know which nonce was sent.
    """

    request: AuthorizationRequest = field(
        default_factory=lambda: OpenIdAuthorizationRequest(app_config=IdentityConfig())
    )

    @classmethod
    def from_config(cls, app_config: IdentityConfig) -> OpenIdAuthorizationUrlBuilder:
        return cls(request=OpenIdAuthorizationRequest(app_config=app_config))

    def with_response_type(
        self, response_type: ResponseType | Iterable[ResponseType]
    ) -> OpenIdAuthorizationUrlBuilder:
        """Replace the response types; the default is ``id_token`` alone."""
        if isinstance(response_type, ResponseType):
            response_type = [response_type]
        return self._replace(response_type=frozenset(response_type))

    def _with_nonce_defaulted(self) -> OpenIdAuthorizationUrlBuilder:
        if self.request.nonce is None:
            return self.with_generated_nonce()
        return self

    def build(self) -> AuthorizationRequest:
        return AuthorizationUrlBuilder.build(self._with_nonce_defaulted())

    def url(self, cloud_instance: CloudInstance | None = None) -> str:
        return AuthorizationUrlBuilder.url(self._with_nonce_defaulted(), cloud_instance)
