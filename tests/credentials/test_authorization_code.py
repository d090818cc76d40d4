"""Tests for the authorization code and refresh token request bodies."""

import pytest

from entra_oauth.credentials.authorization_code import (
    AuthorizationCodeCredential,
    AuthorizationCodeCredentialBuilder,
)
from entra_oauth.models.config import IdentityConfig, TenantId
from entra_oauth.models.errors import ConflictingValuesError, MissingRequiredValueError
from entra_oauth.primitives.pkce import PKCEManager

CLIENT_ID = "6731de76-14a6-49ae-97bc-6eba6914391e"
REDIRECT_URI = "https://localhost:8080/callback"


class TestAuthorizationCodeBranch:
    def setup_method(self):
        # Arrange
        self.builder = (
            AuthorizationCodeCredentialBuilder.for_client(CLIENT_ID)
            .with_redirect_uri(REDIRECT_URI)
            .with_client_secret("s3cret")
            .with_authorization_code("code-123")
        )

    def test_form_fields_in_order(self):
        # Act
        form = self.builder.build().form_urlencode()

        # Assert
        assert list(form.items()) == [
            ("client_id", CLIENT_ID),
            ("client_secret", "s3cret"),
            ("redirect_uri", REDIRECT_URI),
            ("code", "code-123"),
            ("grant_type", "authorization_code"),
        ]

    def test_scope_and_code_verifier_are_optional_extras(self):
        pkce = PKCEManager().generate_parameters()

        form = (
            self.builder.with_scope(["User.Read", "offline_access"])
            .with_pkce(pkce)
            .build()
            .form_urlencode()
        )

        assert form["scope"] == "User.Read offline_access"
        assert form["code_verifier"] == pkce.code_verifier
        assert list(form)[-2:] == ["scope", "code_verifier"]

    def test_missing_redirect_uri(self):
        builder = self.builder.with_redirect_uri("")

        with pytest.raises(MissingRequiredValueError) as exc_info:
            builder.build()

        assert exc_info.value.field == "redirect_uri"

    def test_blank_code(self):
        with pytest.raises(MissingRequiredValueError) as exc_info:
            self.builder.with_authorization_code(" ").build()

        assert exc_info.value.field == "authorization_code"

    def test_basic_auth_pair_and_body_secret(self):
        credential = self.builder.build()

        assert credential.basic_auth() == (CLIENT_ID, "s3cret")
        assert credential.form_urlencode()["client_secret"] == "s3cret"

    def test_uri_is_tenant_token_endpoint(self):
        credential = self.builder.with_tenant("t1").build()

        assert credential.uri() == (
            "https://login.microsoftonline.com/t1/oauth2/v2.0/token"
        )

    def test_uri_carries_extra_query_parameters(self):
        credential = self.builder.with_extra_query_parameters({"dc": "ESTS-PUB"}).build()

        assert credential.uri().endswith("/common/oauth2/v2.0/token?dc=ESTS-PUB")


class TestRefreshTokenBranch:
    def setup_method(self):
        self.builder = (
            AuthorizationCodeCredentialBuilder.for_client(CLIENT_ID)
            .with_client_secret("s3cret")
            .with_refresh_token("refresh-456")
        )

    def test_form_fields_in_order(self):
        form = self.builder.with_scope("User.Read").build().form_urlencode()

        assert list(form.items()) == [
            ("client_id", CLIENT_ID),
            ("client_secret", "s3cret"),
            ("refresh_token", "refresh-456"),
            ("grant_type", "refresh_token"),
            ("scope", "User.Read"),
        ]

    def test_redirect_uri_is_not_required(self):
        form = self.builder.build().form_urlencode()

        assert "redirect_uri" not in form

    def test_blank_refresh_token(self):
        with pytest.raises(MissingRequiredValueError) as exc_info:
            self.builder.with_refresh_token("").build()

        assert exc_info.value.field == "refresh_token"

    def test_with_refresh_token_clears_code_and_keeps_original(self):
        # Arrange
        credential = AuthorizationCodeCredential(
            app_config=IdentityConfig(client_id=CLIENT_ID, redirect_uri=REDIRECT_URI),
            client_secret="s3cret",
            authorization_code="code-123",
        )

        # Act
        refreshed = credential.with_refresh_token("refresh-456")

        # Assert
        assert refreshed.authorization_code is None
        assert refreshed.form_urlencode()["grant_type"] == "refresh_token"
        assert credential.authorization_code == "code-123"


class TestValidationOrder:
    def test_code_and_refresh_token_conflict(self):
        builder = (
            AuthorizationCodeCredentialBuilder.for_client(CLIENT_ID)
            .with_client_secret("s3cret")
            .with_authorization_code("code-123")
            .with_refresh_token("refresh-456")
        )

        with pytest.raises(ConflictingValuesError) as exc_info:
            builder.build()

        assert (exc_info.value.first, exc_info.value.second) == (
            "authorization_code",
            "refresh_token",
        )

    def test_conflict_is_reported_before_blank_client_id(self):
        credential = AuthorizationCodeCredential(
            app_config=IdentityConfig(),
            authorization_code="a",
            refresh_token="b",
        )

        with pytest.raises(ConflictingValuesError):
            credential.form_urlencode()

    @pytest.mark.parametrize("client_id", ["", "   "])
    def test_blank_client_id(self, client_id):
        credential = AuthorizationCodeCredential(
            app_config=IdentityConfig(client_id=client_id),
            client_secret="s3cret",
            refresh_token="r",
        )

        with pytest.raises(MissingRequiredValueError) as exc_info:
            credential.form_urlencode()

        assert exc_info.value.field == "client_id"

    def test_blank_client_secret(self):
        credential = AuthorizationCodeCredential(
            app_config=IdentityConfig(client_id=CLIENT_ID),
            client_secret=" ",
            refresh_token="r",
        )

        with pytest.raises(MissingRequiredValueError) as exc_info:
            credential.form_urlencode()

        assert exc_info.value.field == "client_secret"

    def test_neither_code_nor_refresh_token(self):
        credential = AuthorizationCodeCredential(
            app_config=IdentityConfig(client_id=CLIENT_ID, authority=TenantId("t1")),
            client_secret="s3cret",
        )

        with pytest.raises(MissingRequiredValueError) as exc_info:
            credential.form_urlencode()

        assert exc_info.value.field == "authorization_code or refresh_token"
