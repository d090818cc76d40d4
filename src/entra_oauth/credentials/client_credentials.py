"""Client credentials grant variants.

Application permissions only; no user is involved. The scope defaults to
the Microsoft Graph ``.default`` scope when none is given.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from entra_oauth.credentials.authorization_code_certificate import (
    apply_client_assertion,
)
from entra_oauth.credentials.base import ClientCredentialsGrant, CredentialBuilder
from entra_oauth.models.errors import MissingRequiredValueError
from entra_oauth.primitives.assertion import ClientCertificate
from entra_oauth.primitives.parameters import OAuthParameter, ParameterBag


@dataclass(frozen=True)
class ClientSecretCredential(ClientCredentialsGrant):
    client_secret: str = ""

    def basic_auth(self) -> tuple[str, str] | None:
        return self.app_config.client_id, self.client_secret

    def _authenticate(self, bag: ParameterBag) -> list[OAuthParameter]:
        if not self.client_secret or not self.client_secret.strip():
            raise MissingRequiredValueError(OAuthParameter.CLIENT_SECRET.alias)
        bag.client_secret(self.client_secret)
        return [OAuthParameter.CLIENT_SECRET]


@dataclass(frozen=True)
class ClientCertificateCredential(ClientCredentialsGrant):
    """Signs a fresh client assertion with the certificate for each request."""

    certificate: ClientCertificate | None = None

    def _authenticate(self, bag: ParameterBag) -> list[OAuthParameter]:
        return apply_client_assertion(
            bag,
            self.app_config.client_id,
            self.endpoints().token_url,
            None,
            self.certificate,
        )


@dataclass(frozen=True)
class ClientAssertionCredential(ClientCredentialsGrant):
    """Uses a caller-provided signed assertion, e.g. a federated token."""

    client_assertion: str = ""

    def _authenticate(self, bag: ParameterBag) -> list[OAuthParameter]:
        return apply_client_assertion(
            bag,
            self.app_config.client_id,
            self.endpoints().token_url,
            self.client_assertion,
            None,
        )


class ClientSecretCredentialBuilder(CredentialBuilder[ClientSecretCredential]):
    credential_type = ClientSecretCredential

    def with_client_secret(self, client_secret: str) -> Self:
        return self._replace(client_secret=client_secret)


class ClientCertificateCredentialBuilder(
    CredentialBuilder[ClientCertificateCredential]
):
    credential_type = ClientCertificateCredential

    def with_certificate(self, certificate: ClientCertificate) -> Self:
        return self._replace(certificate=certificate)


class ClientAssertionCredentialBuilder(CredentialBuilder[ClientAssertionCredential]):
    credential_type = ClientAssertionCredential

    def with_client_assertion(self, client_assertion: str) -> Self:
        return self._replace(client_assertion=client_assertion)
