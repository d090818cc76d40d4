"""Tests for the confidential client application facade."""

from unittest.mock import MagicMock

import httpx
import pytest

from entra_oauth.confidential_client import (
    ConfidentialClientApplication,
    ConfidentialClientApplicationBuilder,
    GrantKind,
)
from entra_oauth.credentials.authorization_code import AuthorizationCodeCredential
from entra_oauth.credentials.client_credentials import (
    ClientCertificateCredential,
    ClientSecretCredential,
)
from entra_oauth.credentials.open_id import OpenIdCredential
from entra_oauth.models.config import CloudInstance
from entra_oauth.models.errors import MissingRequiredValueError
from entra_oauth.services.authorization_url import AuthorizationUrlBuilder
from entra_oauth.settings import IdentitySettings

CLIENT_ID = "6731de76-14a6-49ae-97bc-6eba6914391e"
REDIRECT_URI = "https://localhost:8080/callback"


class TestConfidentialClientApplication:
    def setup_method(self):
        # Arrange
        self.builder = (
            ConfidentialClientApplication.builder(CLIENT_ID)
            .with_tenant("t1")
            .with_redirect_uri(REDIRECT_URI)
        )

    def test_authorization_code_dispatch(self):
        # Act
        app = ConfidentialClientApplication(
            self.builder.with_authorization_code("code-123")
            .with_client_secret("s3cret")
            .build()
        )

        # Assert
        assert app.grant_kind is GrantKind.AUTHORIZATION_CODE
        assert isinstance(app.credential, AuthorizationCodeCredential)
        assert app.uri() == "https://login.microsoftonline.com/t1/oauth2/v2.0/token"
        assert app.form_urlencode()["code"] == "code-123"
        assert app.basic_auth() == (CLIENT_ID, "s3cret")

    def test_openid_dispatch_precedes_authorization_code(self):
        app = ConfidentialClientApplication(
            self.builder.with_openid("code-123", "s3cret").build()
        )

        assert app.grant_kind is GrantKind.OPENID
        assert isinstance(app.credential, OpenIdCredential)
        assert app.form_urlencode()["scope"] == "openid"

    def test_client_secret_dispatch(self):
        app = ConfidentialClientApplication(
            self.builder.with_client_secret("s3cret").build()
        )

        assert app.grant_kind is GrantKind.CLIENT_SECRET
        assert isinstance(app.credential, ClientSecretCredential)
        assert app.form_urlencode()["grant_type"] == "client_credentials"

    def test_client_certificate_dispatch(self, client_certificate):
        app = ConfidentialClientApplication(
            self.builder.with_client_certificate(client_certificate).build()
        )

        assert app.grant_kind is GrantKind.CLIENT_CERTIFICATE
        assert isinstance(app.credential, ClientCertificateCredential)
        assert app.basic_auth() is None

    def test_client_assertion_dispatch(self):
        app = ConfidentialClientApplication(
            self.builder.with_client_assertion("eyJ.a.b").build()
        )

        assert app.grant_kind is GrantKind.CLIENT_ASSERTION

    def test_authorization_code_certificate_dispatch(self, client_certificate):
        app = ConfidentialClientApplication(
            self.builder.with_authorization_code_certificate(
                "code-123", client_certificate
            ).build()
        )

        assert app.grant_kind is GrantKind.AUTHORIZATION_CODE_CERTIFICATE

    def test_unknown_credential_type_is_rejected(self):
        with pytest.raises(TypeError, match="Unsupported credential type"):
            ConfidentialClientApplication(object())

    def test_with_refresh_token_returns_new_application(self):
        app = ConfidentialClientApplication(
            self.builder.with_authorization_code("code-123")
            .with_client_secret("s3cret")
            .build()
        )

        refreshed = app.with_refresh_token("refresh-456")

        assert refreshed.form_urlencode()["grant_type"] == "refresh_token"
        assert app.form_urlencode()["grant_type"] == "authorization_code"

    def test_client_credentials_cannot_refresh(self):
        app = ConfidentialClientApplication(
            self.builder.with_client_secret("s3cret").build()
        )

        with pytest.raises(TypeError):
            app.with_refresh_token("refresh-456")

    def test_execute_forwards_to_credential(self):
        # Arrange
        app = ConfidentialClientApplication(
            self.builder.with_client_secret("s3cret").build()
        )
        http_client = MagicMock(spec=httpx.Client)
        http_client.post.return_value = httpx.Response(200, json={"access_token": "a"})

        # Act
        response = app.execute(http_client)

        # Assert
        assert response.status_code == 200
        assert http_client.post.call_args.kwargs["data"]["client_secret"] == "s3cret"

    def test_timeout_reaches_credential_options(self):
        app = ConfidentialClientApplication(
            self.builder.with_timeout(5.0).with_client_secret("s3cret").build()
        )

        assert app.options().timeout == 5.0


class TestConfidentialClientApplicationBuilder:
    def test_auth_code_url_builder_shares_configuration(self):
        url = (
            ConfidentialClientApplication.builder(CLIENT_ID)
            .with_redirect_uri(REDIRECT_URI)
            .with_cloud_instance(CloudInstance.AZURE_CHINA)
            .auth_code_url_builder()
            .with_scope("User.Read")
            .url()
        )

        assert url.startswith("https://login.chinacloudapi.cn/common/oauth2/v2.0/authorize?")

    def test_url_builder_type(self):
        builder = ConfidentialClientApplication.builder(CLIENT_ID).auth_code_url_builder()

        assert isinstance(builder, AuthorizationUrlBuilder)

    def test_from_settings(self):
        settings = IdentitySettings(
            client_id=CLIENT_ID,
            tenant_id="t1",
            redirect_uri=REDIRECT_URI,
            http_timeout=12.5,
        )

        builder = ConfidentialClientApplicationBuilder.from_settings(settings)
        credential = builder.with_client_secret("s3cret").build()

        assert credential.uri() == "https://login.microsoftonline.com/t1/oauth2/v2.0/token"
        assert credential.options().timeout == 12.5

    def test_settings_secret_is_the_default(self):
        # Arrange
        settings = IdentitySettings(
            client_id=CLIENT_ID,
            client_secret="from-env",
            tenant_id="t1",
            redirect_uri=REDIRECT_URI,
        )
        builder = ConfidentialClientApplicationBuilder.from_settings(settings)

        # Act
        client_form = builder.with_client_secret().build().form_urlencode()
        openid_form = builder.with_openid("code-123").build().form_urlencode()
        code_form = builder.with_authorization_code("code-123").build().form_urlencode()

        # Assert
        assert client_form["client_secret"] == "from-env"
        assert openid_form["client_secret"] == "from-env"
        assert code_form["client_secret"] == "from-env"
        assert "from-env" not in repr(builder)

    def test_explicit_secret_overrides_settings(self):
        settings = IdentitySettings(client_id=CLIENT_ID, client_secret="from-env")
        builder = ConfidentialClientApplicationBuilder.from_settings(settings)

        form = builder.with_client_secret("explicit").build().form_urlencode()

        assert form["client_secret"] == "explicit"

    def test_missing_secret_is_reported(self):
        builder = ConfidentialClientApplication.builder(CLIENT_ID)

        with pytest.raises(MissingRequiredValueError) as exc_info:
            builder.with_client_secret().build()

        assert exc_info.value.field == "client_secret"
