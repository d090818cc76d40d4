"""Shared state and builder plumbing for token credentials."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Generic, Self, TypeVar
from urllib.parse import urlencode

from entra_oauth.models.config import (
    AuthoritySelector,
    CloudInstance,
    IdentityConfig,
    TenantId,
    TokenCredentialOptions,
)
from entra_oauth.models.errors import (
    ConflictingValuesError,
    MissingRequiredValueError,
)
from entra_oauth.primitives.authority import AuthorityEndpoints, resolve_authority
from entra_oauth.primitives.parameters import OAuthParameter, ParameterBag
from entra_oauth.services.executor import TokenCredentialExecutor

DEFAULT_CLIENT_CREDENTIALS_SCOPE = "https://graph.microsoft.com/.default"


@dataclass(frozen=True)
class TokenCredential(TokenCredentialExecutor):
    """Configuration common to every grant-type credential."""

    app_config: IdentityConfig
    scope: tuple[str, ...] = ()
    token_credential_options: TokenCredentialOptions = field(
        default_factory=TokenCredentialOptions
    )

    def endpoints(self) -> AuthorityEndpoints:
        return resolve_authority(
            self.app_config.cloud_instance, self.app_config.authority
        )

    def uri(self) -> str:
        token_url = self.endpoints().token_url
        extra = self.app_config.extra_query_parameters
        if not extra:
            return token_url
        return f"{token_url}?{urlencode(list(extra.items()))}"

    def options(self) -> TokenCredentialOptions:
        headers = {
            **self.app_config.extra_header_parameters,
            **self.token_credential_options.extra_header_parameters,
        }
        return replace(self.token_credential_options, extra_header_parameters=headers)

    def effective_scope(self) -> list[str]:
        return [s for s in self.scope if s]

    def _parameters(self) -> ParameterBag:
        """Start a parameter bag holding the validated client id."""
        client_id = self.app_config.client_id
        if not client_id or not client_id.strip():
            raise MissingRequiredValueError(OAuthParameter.CLIENT_ID.alias)
        return ParameterBag().client_id(client_id)

    @abstractmethod
    def _authenticate(self, bag: ParameterBag) -> list[OAuthParameter]:
        """Add client authentication to ``bag`` and return its required keys."""


@dataclass(frozen=True)
class CodeGrantCredential(TokenCredential):
    """Redeems an authorization code, or a refresh token in its place.

    Exactly one of ``authorization_code`` and ``refresh_token`` may be set.
    """

    authorization_code: str | None = None
    refresh_token: str | None = None
    code_verifier: str | None = None

    scope_required: ClassVar[bool] = False

    def with_refresh_token(self, refresh_token: str) -> Self:
        """Return a copy that redeems ``refresh_token``; the code is cleared."""
        return replace(self, authorization_code=None, refresh_token=refresh_token)

    def form_urlencode(self) -> dict[str, str]:
        if self.authorization_code is not None and self.refresh_token is not None:
            raise ConflictingValuesError(
                OAuthParameter.AUTHORIZATION_CODE.alias,
                OAuthParameter.REFRESH_TOKEN.alias,
            )

        bag = self._parameters()
        client_keys = [OAuthParameter.CLIENT_ID, *self._authenticate(bag)]

        scopes = self.effective_scope()
        if scopes:
            bag.scope(scopes)
        scope_keys = [OAuthParameter.SCOPE]
        required_scope = scope_keys if self.scope_required else []
        optional_scope = [] if self.scope_required else scope_keys

        if self.refresh_token is not None:
            if not self.refresh_token.strip():
                raise MissingRequiredValueError(OAuthParameter.REFRESH_TOKEN.alias)
            bag.refresh_token(self.refresh_token).grant_type("refresh_token")
            return bag.form(
                optional_scope,
                [
                    *client_keys,
                    OAuthParameter.REFRESH_TOKEN,
                    OAuthParameter.GRANT_TYPE,
                    *required_scope,
                ],
            )

        if self.authorization_code is not None:
            if not self.authorization_code.strip():
                raise MissingRequiredValueError(
                    OAuthParameter.AUTHORIZATION_CODE.alias
                )
            redirect_uri = self.app_config.redirect_uri
            if not redirect_uri or not redirect_uri.strip():
                raise MissingRequiredValueError(OAuthParameter.REDIRECT_URI.alias)

            bag.authorization_code(self.authorization_code)
            bag.redirect_uri(redirect_uri).grant_type("authorization_code")
            if self.code_verifier:
                bag.code_verifier(self.code_verifier)

            return bag.form(
                [*optional_scope, OAuthParameter.CODE_VERIFIER],
                [
                    *client_keys,
                    OAuthParameter.REDIRECT_URI,
                    OAuthParameter.AUTHORIZATION_CODE,
                    OAuthParameter.GRANT_TYPE,
                    *required_scope,
                ],
            )

        raise MissingRequiredValueError("authorization_code or refresh_token")


@dataclass(frozen=True)
class ClientCredentialsGrant(TokenCredential):
    """Application-only token via ``grant_type=client_credentials``."""

    def effective_scope(self) -> list[str]:
        return super().effective_scope() or [DEFAULT_CLIENT_CREDENTIALS_SCOPE]

    def form_urlencode(self) -> dict[str, str]:
        bag = self._parameters()
        client_keys = [OAuthParameter.CLIENT_ID, *self._authenticate(bag)]
        bag.grant_type("client_credentials").scope(self.effective_scope())
        return bag.form(
            [],
            [*client_keys, OAuthParameter.GRANT_TYPE, OAuthParameter.SCOPE],
        )


C = TypeVar("C", bound=TokenCredential)


@dataclass(frozen=True)
class CredentialBuilder(Generic[C]):
    """Immutable builder; every ``with_*`` call returns a new builder."""

    credential: C

    credential_type: ClassVar[type[TokenCredential]]

    @classmethod
    def from_config(
        cls,
        app_config: IdentityConfig,
        token_credential_options: TokenCredentialOptions | None = None,
        **fields: Any,
    ) -> Self:
        if token_credential_options is not None:
            fields["token_credential_options"] = token_credential_options
        return cls(credential=cls.credential_type(app_config=app_config, **fields))

    @classmethod
    def for_client(cls, client_id: str, **fields: Any) -> Self:
        return cls.from_config(IdentityConfig(client_id=client_id), **fields)

    def _replace(self, **changes: Any) -> Self:
        return replace(self, credential=replace(self.credential, **changes))

    def _replace_config(self, **changes: Any) -> Self:
        return self._replace(app_config=replace(self.credential.app_config, **changes))

    def _replace_options(self, **changes: Any) -> Self:
        return self._replace(
            token_credential_options=replace(
                self.credential.token_credential_options, **changes
            )
        )

    def with_client_id(self, client_id: str) -> Self:
        return self._replace_config(client_id=client_id)

    def with_tenant(self, tenant: str) -> Self:
        return self._replace_config(authority=TenantId(tenant))

    def with_authority(self, authority: AuthoritySelector) -> Self:
        return self._replace_config(authority=authority)

    def with_cloud_instance(self, cloud_instance: CloudInstance) -> Self:
        return self._replace_config(cloud_instance=cloud_instance)

    def with_redirect_uri(self, redirect_uri: str) -> Self:
        return self._replace_config(redirect_uri=redirect_uri)

    def with_extra_query_parameters(self, parameters: Mapping[str, str]) -> Self:
        merged = {**self.credential.app_config.extra_query_parameters, **parameters}
        return self._replace_config(extra_query_parameters=merged)

    def with_extra_header_parameters(self, headers: Mapping[str, str]) -> Self:
        merged = {
            **self.credential.token_credential_options.extra_header_parameters,
            **headers,
        }
        return self._replace_options(extra_header_parameters=merged)

    def with_timeout(self, timeout: float) -> Self:
        return self._replace_options(timeout=timeout)

    def with_scope(self, scope: str | Iterable[str]) -> Self:
        """Append scopes to the token request."""
        if isinstance(scope, str):
            scope = [scope]
        # A space-joined string carries several scopes
        added = tuple(s for item in scope for s in item.split())
        return self._replace(scope=self.credential.scope + added)

    def build(self) -> C:
        """Validate once and return the immutable credential.

        Raises:
            IdentityValidationError: If the credential cannot produce a request
        """
        self.credential.form_urlencode()
        return self.credential


class CodeGrantCredentialBuilder(CredentialBuilder[C]):
    """Setters shared by the code-redeeming credentials."""

    def with_authorization_code(self, authorization_code: str) -> Self:
        return self._replace(authorization_code=authorization_code)

    def with_refresh_token(self, refresh_token: str) -> Self:
        return self._replace(refresh_token=refresh_token)

    def with_code_verifier(self, code_verifier: str) -> Self:
        return self._replace(code_verifier=code_verifier)
