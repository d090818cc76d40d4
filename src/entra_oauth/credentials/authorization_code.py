"""Authorization code grant with a client secret.

Redeems the code returned by the ``/authorize`` redirect, or a refresh token
obtained from an earlier redemption.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from entra_oauth.credentials.base import CodeGrantCredential, CodeGrantCredentialBuilder
from entra_oauth.models.errors import MissingRequiredValueError
from entra_oauth.models.security import PKCEParameters
from entra_oauth.primitives.parameters import OAuthParameter, ParameterBag


@dataclass(frozen=True)
class AuthorizationCodeCredential(CodeGrantCredential):
    """Token request body for ``authorization_code`` and ``refresh_token``.

    The client secret is sent in the body and also offered as HTTP Basic
    credentials through ``basic_auth``.
    """

    client_secret: str = ""

    def basic_auth(self) -> tuple[str, str] | None:
        return self.app_config.client_id, self.client_secret

    def _authenticate(self, bag: ParameterBag) -> list[OAuthParameter]:
        if not self.client_secret or not self.client_secret.strip():
            raise MissingRequiredValueError(OAuthParameter.CLIENT_SECRET.alias)
        bag.client_secret(self.client_secret)
        return [OAuthParameter.CLIENT_SECRET]


class AuthorizationCodeCredentialBuilder(
    CodeGrantCredentialBuilder[AuthorizationCodeCredential]
):
    credential_type = AuthorizationCodeCredential

    def with_client_secret(self, client_secret: str) -> Self:
        return self._replace(client_secret=client_secret)

    def with_pkce(self, pkce: PKCEParameters) -> Self:
        """Send the verifier matching the challenge used in the authorize URL."""
        return self.with_code_verifier(pkce.code_verifier)
