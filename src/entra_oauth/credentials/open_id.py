"""OpenID Connect code redemption.

Same code and refresh branches as the authorization code credential, but
``openid`` is always requested first and the scope is mandatory.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Self

from entra_oauth.credentials.authorization_code import AuthorizationCodeCredential
from entra_oauth.credentials.base import CodeGrantCredentialBuilder
from entra_oauth.models.security import PKCEParameters


@dataclass(frozen=True)
class OpenIdCredential(AuthorizationCodeCredential):
    scope_required: ClassVar[bool] = True

    def effective_scope(self) -> list[str]:
        return ["openid"] + [s for s in self.scope if s and s != "openid"]


class OpenIdCredentialBuilder(CodeGrantCredentialBuilder[OpenIdCredential]):
    credential_type = OpenIdCredential

    def with_client_secret(self, client_secret: str) -> Self:
        return self._replace(client_secret=client_secret)

    def with_pkce(self, pkce: PKCEParameters) -> Self:
        return self.with_code_verifier(pkce.code_verifier)
