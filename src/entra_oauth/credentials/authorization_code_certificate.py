"""Authorization code grant authenticated with a certificate assertion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from entra_oauth.credentials.base import CodeGrantCredential, CodeGrantCredentialBuilder
from entra_oauth.models.errors import MissingRequiredValueError
from entra_oauth.models.security import PKCEParameters
from entra_oauth.primitives.assertion import CLIENT_ASSERTION_TYPE, ClientCertificate
from entra_oauth.primitives.parameters import OAuthParameter, ParameterBag


def apply_client_assertion(
    bag: ParameterBag,
    client_id: str,
    audience: str,
    client_assertion: str | None,
    certificate: ClientCertificate | None,
) -> list[OAuthParameter]:
    """Add a signed client assertion to ``bag``.

    A supplied assertion is used as is; otherwise one is signed with
    ``certificate`` for the given audience.

    Raises:
        MissingRequiredValueError: If neither an assertion nor a certificate is set
        CertificateError: If signing fails
    """
    if client_assertion and client_assertion.strip():
        assertion = client_assertion
    elif certificate is not None:
        assertion = certificate.sign_assertion(client_id, audience)
    else:
        raise MissingRequiredValueError(OAuthParameter.CLIENT_ASSERTION.alias)

    bag.client_assertion(assertion).client_assertion_type(CLIENT_ASSERTION_TYPE)
    return [OAuthParameter.CLIENT_ASSERTION, OAuthParameter.CLIENT_ASSERTION_TYPE]


@dataclass(frozen=True)
class AuthorizationCodeCertificateCredential(CodeGrantCredential):
    """Redeems a code with ``client_assertion`` in place of a shared secret."""

    client_assertion: str | None = None
    certificate: ClientCertificate | None = None

    def _authenticate(self, bag: ParameterBag) -> list[OAuthParameter]:
        return apply_client_assertion(
            bag,
            self.app_config.client_id,
            self.endpoints().token_url,
            self.client_assertion,
            self.certificate,
        )


class AuthorizationCodeCertificateCredentialBuilder(
    CodeGrantCredentialBuilder[AuthorizationCodeCertificateCredential]
):
    credential_type = AuthorizationCodeCertificateCredential

    def with_certificate(self, certificate: ClientCertificate) -> Self:
        return self._replace(certificate=certificate)

    def with_client_assertion(self, client_assertion: str) -> Self:
        return self._replace(client_assertion=client_assertion)

    def with_pkce(self, pkce: PKCEParameters) -> Self:
        return self.with_code_verifier(pkce.code_verifier)
