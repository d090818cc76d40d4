"""Client assertions signed with an X.509 certificate.

Builds the RS256 JWT the token endpoint accepts in place of a client secret
(``client_assertion_type`` jwt-bearer). The ``x5t`` header carries the
base64url SHA-1 thumbprint of the certificate registered for the app.
"""

from __future__ import annotations

import base64
import time
import uuid
from dataclasses import dataclass

import jwt
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization

from entra_oauth.models.errors import CertificateError

CLIENT_ASSERTION_TYPE = "urn:ietf:params:oauth:client-assertion-type:jwt-bearer"


@dataclass(frozen=True)
class ClientCertificate:
    """Certificate and private key used to sign client assertions.

    Either ``certificate_pem`` or ``thumbprint`` (hex SHA-1, as shown in the
    app registration portal) must be given to derive the ``x5t`` header.
    """

    private_key_pem: bytes
    certificate_pem: bytes | None = None
    thumbprint: str | None = None
    password: bytes | None = None
    lifetime_seconds: int = 600

    def x5t(self) -> str:
        """Return the base64url SHA-1 thumbprint of the certificate."""
        try:
            if self.thumbprint:
                digest = bytes.fromhex(self.thumbprint.replace(":", ""))
            elif self.certificate_pem:
                certificate = x509.load_pem_x509_certificate(self.certificate_pem)
                digest = certificate.fingerprint(hashes.SHA1())
            else:
                raise CertificateError(
                    "A certificate or thumbprint is required to build x5t"
                )
        except ValueError as e:
            raise CertificateError(f"Invalid certificate material: {e}") from e

        return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")

    def sign_assertion(
        self, client_id: str, audience: str, now: float | None = None
    ) -> str:
        """Sign a client assertion for the given token endpoint.

        Args:
            client_id: Application (client) id, used as issuer and subject
            audience: Token endpoint URL the assertion is presented to
            now: Issue time override, seconds since the epoch

        Returns:
            Compact serialized JWT

        Raises:
            CertificateError: If the key cannot be loaded or used
        """
        issued_at = int(now if now is not None else time.time())
        claims = {
            "aud": audience,
            "exp": issued_at + self.lifetime_seconds,
            "iss": client_id,
            "jti": str(uuid.uuid4()),
            "nbf": issued_at,
            "sub": client_id,
        }
        headers = {"x5t": self.x5t(), "typ": "JWT"}

        try:
            private_key = serialization.load_pem_private_key(
                self.private_key_pem, password=self.password
            )
            return jwt.encode(claims, private_key, algorithm="RS256", headers=headers)
        except (ValueError, TypeError, jwt.PyJWTError) as e:
            raise CertificateError(f"Failed to sign client assertion: {e}") from e
