"""Tests for OpenID Connect code redemption."""

import pytest

from entra_oauth.credentials.open_id import OpenIdCredentialBuilder
from entra_oauth.models.errors import ConflictingValuesError, MissingRequiredValueError

CLIENT_ID = "6731de76-14a6-49ae-97bc-6eba6914391e"
REDIRECT_URI = "https://localhost:8080/callback"


class TestOpenIdCredential:
    def setup_method(self):
        self.builder = (
            OpenIdCredentialBuilder.for_client(CLIENT_ID)
            .with_redirect_uri(REDIRECT_URI)
            .with_client_secret("s3cret")
            .with_authorization_code("code-123")
        )

    def test_openid_scope_is_required_and_first(self):
        form = self.builder.with_scope(["User.Read", "openid"]).build().form_urlencode()

        assert form["scope"] == "openid User.Read"
        assert list(form)[-1] == "scope"

    def test_scope_defaults_to_openid(self):
        form = self.builder.build().form_urlencode()

        assert form["scope"] == "openid"
        assert form["grant_type"] == "authorization_code"

    def test_refresh_branch_keeps_openid_scope(self):
        form = (
            self.builder.with_authorization_code(None)
            .with_refresh_token("refresh-456")
            .build()
            .form_urlencode()
        )

        assert form["grant_type"] == "refresh_token"
        assert form["scope"] == "openid"

    def test_space_joined_openid_scope_is_not_repeated(self):
        form = self.builder.with_scope("openid User.Read").build().form_urlencode()

        assert form["scope"] == "openid User.Read"

    def test_conflict(self):
        with pytest.raises(ConflictingValuesError):
            self.builder.with_refresh_token("refresh-456").build()

    def test_blank_secret(self):
        with pytest.raises(MissingRequiredValueError) as exc_info:
            self.builder.with_client_secret("").build()

        assert exc_info.value.field == "client_secret"
