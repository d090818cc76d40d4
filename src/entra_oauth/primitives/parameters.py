"""Ordered OAuth parameter store with deterministic encoding.

Backs both the authorization URL query and the token endpoint form body.
Setters only record values; validation happens when the caller encodes with
an explicit list of required and optional parameters.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum
from urllib.parse import urlencode

from entra_oauth.models.config import AuthoritySelector, CloudInstance
from entra_oauth.models.errors import MissingRequiredValueError
from entra_oauth.primitives.authority import AuthorityEndpoints, resolve_authority


class OAuthParameter(str, Enum):
    """Canonical OAuth / OpenID Connect request parameters.

    The member value is the parameter alias used in diagnostics. Use
    ``wire_name`` for the key that is actually sent.
    """

    CLIENT_ID = "client_id"
    CLIENT_SECRET = "client_secret"
    REDIRECT_URI = "redirect_uri"
    SCOPE = "scope"
    RESPONSE_TYPE = "response_type"
    RESPONSE_MODE = "response_mode"
    STATE = "state"
    PROMPT = "prompt"
    LOGIN_HINT = "login_hint"
    DOMAIN_HINT = "domain_hint"
    NONCE = "nonce"
    CODE_CHALLENGE = "code_challenge"
    CODE_CHALLENGE_METHOD = "code_challenge_method"
    CODE_VERIFIER = "code_verifier"
    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"
    GRANT_TYPE = "grant_type"
    CLIENT_ASSERTION = "client_assertion"
    CLIENT_ASSERTION_TYPE = "client_assertion_type"

    @property
    def alias(self) -> str:
        return self.value

    @property
    def wire_name(self) -> str:
        if self is OAuthParameter.AUTHORIZATION_CODE:
            return "code"
        return self.value


class ParameterBag:
    """Mapping from canonical parameter to its string value.

    Setters insert or overwrite and never fail. ``encode`` and ``form`` emit
    values in exactly the order of the key lists they are given, so output is
    reproducible regardless of the order the setters were called in.
    """

    def __init__(self):
        self._values: dict[OAuthParameter, str] = {}
        self._endpoints: AuthorityEndpoints | None = None

    def __contains__(self, parameter: OAuthParameter) -> bool:
        return parameter in self._values

    def __setitem__(self, parameter: OAuthParameter, value: str) -> None:
        self._values[parameter] = value

    def get(self, parameter: OAuthParameter) -> str | None:
        return self._values.get(parameter)

    def remove(self, parameter: OAuthParameter) -> ParameterBag:
        self._values.pop(parameter, None)
        return self

    # Typed setters

    def client_id(self, value: str) -> ParameterBag:
        self[OAuthParameter.CLIENT_ID] = value
        return self

    def client_secret(self, value: str) -> ParameterBag:
        self[OAuthParameter.CLIENT_SECRET] = value
        return self

    def redirect_uri(self, value: str) -> ParameterBag:
        self[OAuthParameter.REDIRECT_URI] = value
        return self

    def scope(self, scopes: Iterable[str]) -> ParameterBag:
        self[OAuthParameter.SCOPE] = " ".join(scopes)
        return self

    def extend_scopes(self, scopes: Iterable[str]) -> ParameterBag:
        """Append scopes after any already set, skipping duplicates."""
        current = self.get(OAuthParameter.SCOPE)
        merged = current.split(" ") if current else []
        for scope in scopes:
            if scope and scope not in merged:
                merged.append(scope)
        return self.scope(merged)

    def response_type(self, value: str) -> ParameterBag:
        self[OAuthParameter.RESPONSE_TYPE] = value
        return self

    def response_mode(self, value: str) -> ParameterBag:
        self[OAuthParameter.RESPONSE_MODE] = value
        return self

    def state(self, value: str) -> ParameterBag:
        self[OAuthParameter.STATE] = value
        return self

    def prompt(self, value: str) -> ParameterBag:
        self[OAuthParameter.PROMPT] = value
        return self

    def login_hint(self, value: str) -> ParameterBag:
        self[OAuthParameter.LOGIN_HINT] = value
        return self

    def domain_hint(self, value: str) -> ParameterBag:
        self[OAuthParameter.DOMAIN_HINT] = value
        return self

    def nonce(self, value: str) -> ParameterBag:
        self[OAuthParameter.NONCE] = value
        return self

    def code_challenge(self, value: str) -> ParameterBag:
        self[OAuthParameter.CODE_CHALLENGE] = value
        return self

    def code_challenge_method(self, value: str) -> ParameterBag:
        self[OAuthParameter.CODE_CHALLENGE_METHOD] = value
        return self

    def code_verifier(self, value: str) -> ParameterBag:
        self[OAuthParameter.CODE_VERIFIER] = value
        return self

    def authorization_code(self, value: str) -> ParameterBag:
        self[OAuthParameter.AUTHORIZATION_CODE] = value
        return self

    def refresh_token(self, value: str) -> ParameterBag:
        self[OAuthParameter.REFRESH_TOKEN] = value
        return self

    def grant_type(self, value: str) -> ParameterBag:
        self[OAuthParameter.GRANT_TYPE] = value
        return self

    def client_assertion(self, value: str) -> ParameterBag:
        self[OAuthParameter.CLIENT_ASSERTION] = value
        return self

    def client_assertion_type(self, value: str) -> ParameterBag:
        self[OAuthParameter.CLIENT_ASSERTION_TYPE] = value
        return self

    # Authority

    def authority(
        self, cloud_instance: CloudInstance, authority: AuthoritySelector
    ) -> ParameterBag:
        self._endpoints = resolve_authority(cloud_instance, authority)
        return self

    @property
    def endpoints(self) -> AuthorityEndpoints | None:
        return self._endpoints

    # Encoding

    def pairs(
        self,
        optional_keys: Sequence[OAuthParameter],
        required_keys: Sequence[OAuthParameter],
    ) -> list[tuple[str, str]]:
        """Collect (wire name, value) pairs, required keys first.

        Args:
            optional_keys: Parameters emitted only when present, in order
            required_keys: Parameters that must be present, in order

        Returns:
            Ordered list of (wire name, value) pairs

        Raises:
            MissingRequiredValueError: On the first absent required parameter
        """
        pairs: list[tuple[str, str]] = []

        for key in required_keys:
            value = self._values.get(key)
            if value is None:
                raise MissingRequiredValueError(key.alias)
            pairs.append((key.wire_name, value))

        for key in optional_keys:
            value = self._values.get(key)
            if value is not None:
                pairs.append((key.wire_name, value))

        return pairs

    def encode(
        self,
        optional_keys: Sequence[OAuthParameter],
        required_keys: Sequence[OAuthParameter],
    ) -> str:
        """URL-form-encode the selected parameters into a query string."""
        return urlencode(self.pairs(optional_keys, required_keys))

    def form(
        self,
        optional_keys: Sequence[OAuthParameter],
        required_keys: Sequence[OAuthParameter],
    ) -> dict[str, str]:
        """Return the selected parameters as an ordered form body."""
        return dict(self.pairs(optional_keys, required_keys))
