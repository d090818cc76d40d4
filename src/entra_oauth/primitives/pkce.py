"""Proof Key for Code Exchange (RFC 7636) and OpenID Connect nonces."""

from __future__ import annotations

import base64
import hashlib
import secrets
import string

from entra_oauth.models.errors import PKCEError
from entra_oauth.models.security import PKCEParameters

VERIFIER_LENGTH = 128
_UNRESERVED = string.ascii_letters + string.digits + "-._~"


def _base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def generate_nonce() -> str:
    """Return a 43 character nonce for the ``/authorize`` request.

    32 random octets are base64url encoded, hashed with SHA-256 and the
    digest base64url encoded again.
    """
    seed = _base64url(secrets.token_bytes(32))
    return _base64url(hashlib.sha256(seed.encode("ascii")).digest())


class PKCEManager:
    """Creates verifier/challenge pairs for the authorization code grant.

    The challenge goes into the authorization URL; the verifier is sent with
    the code redemption so the token endpoint can match the two.
    """

    def generate_parameters(self) -> PKCEParameters:
        """Create a fresh S256 verifier and challenge.

        Raises:
            PKCEError: If the pair cannot be generated
        """
        verifier = self._generate_code_verifier()
        try:
            return PKCEParameters(
                code_verifier=verifier,
                code_challenge=self.derive_code_challenge(verifier),
                code_challenge_method="S256",
            )
        except ValueError as e:
            raise PKCEError(f"Failed to generate PKCE parameters: {e}") from e

    def derive_code_challenge(self, code_verifier: str, method: str = "S256") -> str:
        """Compute the ``code_challenge`` for a verifier.

        ``S256`` is BASE64URL(SHA256(verifier)); ``plain`` is the verifier.

        Raises:
            PKCEError: If the method is not supported
        """
        match method:
            case "plain":
                return code_verifier
            case "S256":
                return _base64url(hashlib.sha256(code_verifier.encode("ascii")).digest())
            case _:
                raise PKCEError(f"Unsupported code challenge method: {method}")

    def _generate_code_verifier(self) -> str:
        # Unreserved characters only, at the RFC maximum length
        return "".join(secrets.choice(_UNRESERVED) for _ in range(VERIFIER_LENGTH))
