"""Confidential client application facade.

Holds exactly one credential of a known grant kind and forwards the
executor capability set to it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Self

import httpx

from entra_oauth.credentials.authorization_code import (
    AuthorizationCodeCredential,
    AuthorizationCodeCredentialBuilder,
)
from entra_oauth.credentials.authorization_code_certificate import (
    AuthorizationCodeCertificateCredential,
    AuthorizationCodeCertificateCredentialBuilder,
)
from entra_oauth.credentials.client_credentials import (
    ClientAssertionCredential,
    ClientAssertionCredentialBuilder,
    ClientCertificateCredential,
    ClientCertificateCredentialBuilder,
    ClientSecretCredential,
    ClientSecretCredentialBuilder,
)
from entra_oauth.credentials.open_id import OpenIdCredential, OpenIdCredentialBuilder
from entra_oauth.models.config import (
    AuthoritySelector,
    CloudInstance,
    IdentityConfig,
    TenantId,
    TokenCredentialOptions,
)
from entra_oauth.primitives.assertion import ClientCertificate
from entra_oauth.services.authorization_url import (
    AuthorizationUrlBuilder,
    OpenIdAuthorizationUrlBuilder,
)
from entra_oauth.settings import IdentitySettings

logger = logging.getLogger(__name__)

ConfidentialCredential = (
    AuthorizationCodeCredential
    | AuthorizationCodeCertificateCredential
    | ClientSecretCredential
    | ClientCertificateCredential
    | ClientAssertionCredential
    | OpenIdCredential
)


class GrantKind(str, Enum):
    AUTHORIZATION_CODE = "authorization_code"
    AUTHORIZATION_CODE_CERTIFICATE = "authorization_code_certificate"
    CLIENT_SECRET = "client_secret"
    CLIENT_CERTIFICATE = "client_certificate"
    CLIENT_ASSERTION = "client_assertion"
    OPENID = "openid"


class ConfidentialClientApplication:
    """A registered application that can keep a secret.

    Example:
        credential = (
            ConfidentialClientApplication.builder(client_id)
            .with_tenant(tenant_id)
            .with_client_secret(secret)
            .build()
        )
        app = ConfidentialClientApplication(credential)
        response = app.execute()
    """

    def __init__(self, credential: ConfidentialCredential):
        match credential:
            case OpenIdCredential():
                grant_kind = GrantKind.OPENID
            case AuthorizationCodeCredential():
                grant_kind = GrantKind.AUTHORIZATION_CODE
            case AuthorizationCodeCertificateCredential():
                grant_kind = GrantKind.AUTHORIZATION_CODE_CERTIFICATE
            case ClientSecretCredential():
                grant_kind = GrantKind.CLIENT_SECRET
            case ClientCertificateCredential():
                grant_kind = GrantKind.CLIENT_CERTIFICATE
            case ClientAssertionCredential():
                grant_kind = GrantKind.CLIENT_ASSERTION
            case _:
                raise TypeError(
                    f"Unsupported credential type: {type(credential).__name__}"
                )

        self._credential = credential
        self._grant_kind = grant_kind

    @staticmethod
    def builder(client_id: str) -> ConfidentialClientApplicationBuilder:
        return ConfidentialClientApplicationBuilder.for_client(client_id)

    @property
    def credential(self) -> ConfidentialCredential:
        return self._credential

    @property
    def grant_kind(self) -> GrantKind:
        return self._grant_kind

    def uri(self) -> str:
        return self._credential.uri()

    def form_urlencode(self) -> dict[str, str]:
        return self._credential.form_urlencode()

    def basic_auth(self) -> tuple[str, str] | None:
        return self._credential.basic_auth()

    def options(self) -> TokenCredentialOptions:
        return self._credential.options()

    def execute(self, http_client: httpx.Client | None = None) -> httpx.Response:
        logger.debug(f"Executing {self._grant_kind.value} token request")
        return self._credential.execute(http_client)

    async def execute_async(
        self, http_client: httpx.AsyncClient | None = None
    ) -> httpx.Response:
        logger.debug(f"Executing {self._grant_kind.value} token request")
        return await self._credential.execute_async(http_client)

    def with_refresh_token(self, refresh_token: str) -> ConfidentialClientApplication:
        """Return an application redeeming ``refresh_token`` instead of the code.

        Raises:
            TypeError: If the grant kind has no refresh branch
        """
        match self._credential:
            case (
                AuthorizationCodeCredential()
                | AuthorizationCodeCertificateCredential()
            ):
                return ConfidentialClientApplication(
                    self._credential.with_refresh_token(refresh_token)
                )
            case _:
                raise TypeError(
                    f"{self._grant_kind.value} credentials cannot redeem refresh tokens"
                )


@dataclass(frozen=True)
class ConfidentialClientApplicationBuilder:
    """Collects shared configuration, then seeds a grant-specific builder."""

    app_config: IdentityConfig = field(default_factory=IdentityConfig)
    token_credential_options: TokenCredentialOptions = field(
        default_factory=TokenCredentialOptions
    )
    client_secret: str | None = field(default=None, repr=False)

    @classmethod
    def for_client(cls, client_id: str) -> Self:
        return cls(app_config=IdentityConfig(client_id=client_id))

    @classmethod
    def from_settings(cls, settings: IdentitySettings) -> Self:
        return cls(
            app_config=settings.to_identity_config(),
            token_credential_options=settings.to_token_credential_options(),
            client_secret=settings.client_secret,
        )

    def _replace_config(self, **changes: Any) -> Self:
        return replace(self, app_config=replace(self.app_config, **changes))

    def with_tenant(self, tenant: str) -> Self:
        return self._replace_config(authority=TenantId(tenant))

    def with_authority(self, authority: AuthoritySelector) -> Self:
        return self._replace_config(authority=authority)

    def with_cloud_instance(self, cloud_instance: CloudInstance) -> Self:
        return self._replace_config(cloud_instance=cloud_instance)

    def with_redirect_uri(self, redirect_uri: str) -> Self:
        return self._replace_config(redirect_uri=redirect_uri)

    def with_extra_query_parameters(self, parameters: dict[str, str]) -> Self:
        merged = {**self.app_config.extra_query_parameters, **parameters}
        return self._replace_config(extra_query_parameters=merged)

    def with_extra_header_parameters(self, headers: dict[str, str]) -> Self:
        merged = {**self.app_config.extra_header_parameters, **headers}
        return self._replace_config(extra_header_parameters=merged)

    def with_timeout(self, timeout: float) -> Self:
        return replace(
            self,
            token_credential_options=replace(
                self.token_credential_options, timeout=timeout
            ),
        )

    # Grant-specific builders

    def with_authorization_code(
        self, authorization_code: str
    ) -> AuthorizationCodeCredentialBuilder:
        return AuthorizationCodeCredentialBuilder.from_config(
            self.app_config,
            self.token_credential_options,
            authorization_code=authorization_code,
            client_secret=self._secret(None),
        )

    def with_authorization_code_certificate(
        self, authorization_code: str, certificate: ClientCertificate
    ) -> AuthorizationCodeCertificateCredentialBuilder:
        return AuthorizationCodeCertificateCredentialBuilder.from_config(
            self.app_config,
            self.token_credential_options,
            authorization_code=authorization_code,
            certificate=certificate,
        )

    def _secret(self, client_secret: str | None) -> str:
        # Falls back to the secret loaded from settings
        if client_secret is not None:
            return client_secret
        return self.client_secret or ""

    def with_client_secret(
        self, client_secret: str | None = None
    ) -> ClientSecretCredentialBuilder:
        return ClientSecretCredentialBuilder.from_config(
            self.app_config,
            self.token_credential_options,
            client_secret=self._secret(client_secret),
        )

    def with_client_assertion(
        self, client_assertion: str
    ) -> ClientAssertionCredentialBuilder:
        return ClientAssertionCredentialBuilder.from_config(
            self.app_config,
            self.token_credential_options,
            client_assertion=client_assertion,
        )

    def with_client_certificate(
        self, certificate: ClientCertificate
    ) -> ClientCertificateCredentialBuilder:
        return ClientCertificateCredentialBuilder.from_config(
            self.app_config,
            self.token_credential_options,
            certificate=certificate,
        )

    def with_openid(
        self, authorization_code: str, client_secret: str | None = None
    ) -> OpenIdCredentialBuilder:
        return OpenIdCredentialBuilder.from_config(
            self.app_config,
            self.token_credential_options,
            authorization_code=authorization_code,
            client_secret=self._secret(client_secret),
        )

    def auth_code_url_builder(self) -> AuthorizationUrlBuilder:
        return AuthorizationUrlBuilder.from_config(self.app_config)

    def openid_url_builder(self) -> OpenIdAuthorizationUrlBuilder:
        return OpenIdAuthorizationUrlBuilder.from_config(self.app_config)
