"""Authorization flow models.

Contains the authorization request records that render the ``/authorize``
URL, and the parsed redirect callback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict

from entra_oauth.models.config import CloudInstance, IdentityConfig
from entra_oauth.models.errors import InvalidValueError, MissingRequiredValueError
from entra_oauth.primitives.parameters import OAuthParameter, ParameterBag
from entra_oauth.services.security import require_absolute_url


class ResponseType(str, Enum):
    """Artifacts the authorization endpoint may return.

    Declaration order is the canonical rendering order.
    """

    CODE = "code"
    ID_TOKEN = "id_token"
    TOKEN = "token"

    @classmethod
    def render(cls, response_types: frozenset[ResponseType]) -> str:
        order = list(cls)
        return " ".join(
            t.value for t in sorted(response_types, key=order.index)
        )


class ResponseMode(str, Enum):
    """How the authorization endpoint delivers its response."""

    QUERY = "query"
    FRAGMENT = "fragment"
    FORM_POST = "form_post"


class Prompt(str, Enum):
    """Type of user interaction required on the sign-in page."""

    LOGIN = "login"
    NONE = "none"
    CONSENT = "consent"
    SELECT_ACCOUNT = "select_account"
    CREATE = "create"


@dataclass(frozen=True)
class AuthorizationRequest:
    """Authorization code grant request for the ``/authorize`` endpoint.

    Immutable; validated only when the URL is built.
    """

    app_config: IdentityConfig
    scope: tuple[str, ...] = ()
    response_type: frozenset[ResponseType] = frozenset()
    response_mode: ResponseMode | None = None
    nonce: str | None = None
    state: str | None = None
    prompt: Prompt | None = None
    domain_hint: str | None = None
    login_hint: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None

    REQUIRED_PARAMETERS: ClassVar[tuple[OAuthParameter, ...]] = (
        OAuthParameter.CLIENT_ID,
        OAuthParameter.RESPONSE_TYPE,
        OAuthParameter.REDIRECT_URI,
        OAuthParameter.SCOPE,
    )
    OPTIONAL_PARAMETERS: ClassVar[tuple[OAuthParameter, ...]] = (
        OAuthParameter.RESPONSE_MODE,
        OAuthParameter.STATE,
        OAuthParameter.PROMPT,
        OAuthParameter.LOGIN_HINT,
        OAuthParameter.DOMAIN_HINT,
        OAuthParameter.NONCE,
        OAuthParameter.CODE_CHALLENGE,
        OAuthParameter.CODE_CHALLENGE_METHOD,
    )

    @property
    def redirect_uri(self) -> str | None:
        return self.app_config.redirect_uri

    def build_authorization_url(
        self, cloud_instance: CloudInstance | None = None
    ) -> str:
        """Build the complete authorization URL.

        Args:
            cloud_instance: Host override; defaults to the configured instance

        Returns:
            The authorization endpoint with the encoded query

        Raises:
            MissingRequiredValueError: If redirect_uri, client_id or scope is missing
            InvalidValueError: If the scope is not allowed for this request
            MalformedUrlError: If the redirect_uri is not an absolute URL
        """
        redirect_uri = self.app_config.redirect_uri
        if redirect_uri is None or not redirect_uri.strip():
            raise MissingRequiredValueError(OAuthParameter.REDIRECT_URI.alias)
        require_absolute_url(redirect_uri)

        client_id = self.app_config.client_uuid()
        if client_id is None:
            raise MissingRequiredValueError(OAuthParameter.CLIENT_ID.alias)

        scopes = self.effective_scope()
        if not scopes:
            raise MissingRequiredValueError(OAuthParameter.SCOPE.alias)
        self._validate_scope(scopes)

        bag = ParameterBag()
        bag.client_id(str(client_id)).redirect_uri(redirect_uri).scope(scopes)
        bag.authority(
            cloud_instance or self.app_config.cloud_instance,
            self.app_config.authority,
        )
        self._apply_response_type(bag)

        if self.state is not None:
            bag.state(self.state)
        if self.prompt is not None:
            bag.prompt(self.prompt.value)
        if self.domain_hint is not None:
            bag.domain_hint(self.domain_hint)
        if self.login_hint is not None:
            bag.login_hint(self.login_hint)
        if self.nonce is not None:
            bag.nonce(self.nonce)
        if self.code_challenge is not None:
            bag.code_challenge(self.code_challenge)
        if self.code_challenge_method is not None:
            bag.code_challenge_method(self.code_challenge_method)

        query = bag.encode(self.OPTIONAL_PARAMETERS, self.REQUIRED_PARAMETERS)
        query = self._append_extra_query(query)

        return f"{bag.endpoints.authorization_url}?{query}"

    def effective_scope(self) -> list[str]:
        return [s for s in self.scope if s]

    def _validate_scope(self, scopes: list[str]) -> None:
        if "openid" in scopes:
            raise InvalidValueError("openid", "use OpenIdCredential instead")

    def _apply_response_type(self, bag: ParameterBag) -> None:
        if not self.response_type:
            bag.response_type(ResponseType.CODE.value)
            if self.response_mode is not None:
                bag.response_mode(self.response_mode.value)
            return

        bag.response_type(ResponseType.render(self.response_type))

        # Query-string delivery of an id_token is not supported by the platform
        if ResponseType.ID_TOKEN in self.response_type:
            if self.response_mode in (None, ResponseMode.QUERY):
                bag.response_mode(ResponseMode.FRAGMENT.value)
            else:
                bag.response_mode(self.response_mode.value)
        elif self.response_mode is not None:
            bag.response_mode(self.response_mode.value)

    def _append_extra_query(self, query: str) -> str:
        reserved = {p.wire_name for p in OAuthParameter}
        extra = [
            (key, value)
            for key, value in self.app_config.extra_query_parameters.items()
            if key not in reserved
        ]
        if not extra:
            return query
        return f"{query}&{urlencode(extra)}"


@dataclass(frozen=True)
class OpenIdAuthorizationRequest(AuthorizationRequest):
    """OpenID Connect sign-in request.

    ``openid`` is always sent as the first scope and a nonce is mandatory.
    """

    response_type: frozenset[ResponseType] = field(
        default_factory=lambda: frozenset({ResponseType.ID_TOKEN})
    )

    REQUIRED_PARAMETERS: ClassVar[tuple[OAuthParameter, ...]] = (
        OAuthParameter.CLIENT_ID,
        OAuthParameter.RESPONSE_TYPE,
        OAuthParameter.REDIRECT_URI,
        OAuthParameter.SCOPE,
        OAuthParameter.NONCE,
    )
    OPTIONAL_PARAMETERS: ClassVar[tuple[OAuthParameter, ...]] = (
        OAuthParameter.RESPONSE_MODE,
        OAuthParameter.STATE,
        OAuthParameter.PROMPT,
        OAuthParameter.LOGIN_HINT,
        OAuthParameter.DOMAIN_HINT,
        OAuthParameter.CODE_CHALLENGE,
        OAuthParameter.CODE_CHALLENGE_METHOD,
    )

    def effective_scope(self) -> list[str]:
        return ["openid"] + [s for s in self.scope if s and s != "openid"]

    def _validate_scope(self, scopes: list[str]) -> None:
        pass


class AuthorizationQueryResponse(BaseModel):
    """Parameters returned on the redirect after authorization.

    Decoded from the query component of the redirect URL, or from its
    fragment when the response mode was ``fragment``.
    """

    model_config = ConfigDict(extra="ignore")

    code: str | None = None
    id_token: str | None = None
    access_token: str | None = None
    token_type: str | None = None
    expires_in: int | None = None
    state: str | None = None
    nonce: str | None = None
    session_state: str | None = None

    # Error response fields (RFC 6749 Section 4.1.2.1)
    error: str | None = None
    error_description: str | None = None
    error_uri: str | None = None

    def is_success(self) -> bool:
        return self.error is None and (
            self.code is not None
            or self.id_token is not None
            or self.access_token is not None
        )

    def is_error(self) -> bool:
        return self.error is not None
