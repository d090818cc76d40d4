"""Tests for certificate-authenticated authorization code redemption."""

import jwt
import pytest

from entra_oauth.credentials.authorization_code_certificate import (
    AuthorizationCodeCertificateCredentialBuilder,
)
from entra_oauth.models.errors import MissingRequiredValueError
from entra_oauth.primitives.assertion import CLIENT_ASSERTION_TYPE

CLIENT_ID = "6731de76-14a6-49ae-97bc-6eba6914391e"
REDIRECT_URI = "https://localhost:8080/callback"


class TestAuthorizationCodeCertificateCredential:
    def setup_method(self):
        self.builder = (
            AuthorizationCodeCertificateCredentialBuilder.for_client(CLIENT_ID)
            .with_tenant("t1")
            .with_redirect_uri(REDIRECT_URI)
            .with_authorization_code("code-123")
        )

    def test_signed_assertion_replaces_secret(self, client_certificate):
        # Act
        credential = self.builder.with_certificate(client_certificate).build()
        form = credential.form_urlencode()

        # Assert
        assert list(form) == [
            "client_id",
            "client_assertion",
            "client_assertion_type",
            "redirect_uri",
            "code",
            "grant_type",
        ]
        assert "client_secret" not in form
        assert form["client_assertion_type"] == CLIENT_ASSERTION_TYPE
        assert credential.basic_auth() is None

        claims = jwt.decode(
            form["client_assertion"], options={"verify_signature": False}
        )
        assert claims["aud"] == credential.uri()

    def test_supplied_assertion_is_used_verbatim(self):
        form = self.builder.with_client_assertion("eyJ.pre.signed").build().form_urlencode()

        assert form["client_assertion"] == "eyJ.pre.signed"

    def test_refresh_branch(self):
        form = (
            self.builder.with_authorization_code(None)
            .with_refresh_token("refresh-456")
            .with_client_assertion("eyJ.pre.signed")
            .build()
            .form_urlencode()
        )

        assert form["grant_type"] == "refresh_token"
        assert form["refresh_token"] == "refresh-456"

    def test_missing_assertion_material(self):
        with pytest.raises(MissingRequiredValueError) as exc_info:
            self.builder.build()

        assert exc_info.value.field == "client_assertion"
