"""Environment-driven identity settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from entra_oauth.models.config import (
    CloudInstance,
    IdentityConfig,
    TenantId,
    TokenCredentialOptions,
    parse_authority,
)


class IdentitySettings(BaseSettings):
    """Client registration loaded from ``ENTRA_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ENTRA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    client_id: str = ""
    client_secret: str | None = None
    tenant_id: str | None = None
    authority: str = "common"
    cloud_instance: CloudInstance = CloudInstance.AZURE_PUBLIC
    redirect_uri: str | None = None

    # Token endpoint transport
    http_timeout: float = 30.0

    def to_identity_config(self) -> IdentityConfig:
        # A tenant id takes precedence over the shared realm
        if self.tenant_id:
            authority = TenantId(self.tenant_id)
        else:
            authority = parse_authority(self.authority)

        return IdentityConfig(
            client_id=self.client_id,
            authority=authority,
            cloud_instance=self.cloud_instance,
            redirect_uri=self.redirect_uri,
        )

    def to_token_credential_options(self) -> TokenCredentialOptions:
        return TokenCredentialOptions(timeout=self.http_timeout)


@lru_cache
def get_settings() -> IdentitySettings:
    """Get cached settings instance."""
    return IdentitySettings()
