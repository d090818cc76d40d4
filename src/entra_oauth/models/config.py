"""Identity configuration models.

Contains the application configuration shared by every request builder:
client identifier, authority (tenant) selection, cloud host selection and
redirect URI.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum


class Authority(str, Enum):
    """Shared directory realms of the identity platform."""

    COMMON = "common"
    ORGANIZATIONS = "organizations"
    CONSUMERS = "consumers"
    AZURE_DIRECTORY_FEDERATED_SERVICES = "adfs"


@dataclass(frozen=True)
class TenantId:
    """A specific tenant, by directory id or verified domain name."""

    value: str

    def __str__(self) -> str:
        return self.value


AuthoritySelector = Authority | TenantId


def authority_segment(authority: AuthoritySelector) -> str:
    """Return the path segment the authority contributes to endpoint URLs."""
    return authority.value


def parse_authority(value: str) -> AuthoritySelector:
    """Map a configured string to a shared realm, or treat it as a tenant id."""
    try:
        return Authority(value.strip().lower())
    except ValueError:
        return TenantId(value.strip())


class CloudInstance(str, Enum):
    """National and public cloud hosts of the identity platform."""

    AZURE_PUBLIC = "https://login.microsoftonline.com"
    AZURE_CHINA = "https://login.chinacloudapi.cn"
    AZURE_GERMANY = "https://login.microsoftonline.de"
    AZURE_US_GOVERNMENT = "https://login.microsoftonline.us"

    @property
    def host(self) -> str:
        return self.value


@dataclass(frozen=True)
class IdentityConfig:
    """Application configuration for a single registered client.

    Immutable once created; builders derive modified copies rather than
    changing a configuration in place.
    """

    client_id: str = ""
    authority: AuthoritySelector = Authority.COMMON
    cloud_instance: CloudInstance = CloudInstance.AZURE_PUBLIC
    redirect_uri: str | None = None

    # Opaque pass-through values
    extra_query_parameters: Mapping[str, str] = field(default_factory=dict)
    extra_header_parameters: Mapping[str, str] = field(default_factory=dict)

    def client_uuid(self) -> uuid.UUID | None:
        """Parse the client id as a UUID.

        Returns:
            The parsed UUID, or None if the client id is blank, not a UUID,
            or the nil UUID.
        """
        try:
            parsed = uuid.UUID(self.client_id.strip())
        except (ValueError, AttributeError):
            return None
        if parsed.int == 0:
            return None
        return parsed


@dataclass(frozen=True)
class TokenCredentialOptions:
    """Per-request options for token endpoint calls."""

    timeout: float = 30.0
    extra_header_parameters: Mapping[str, str] = field(default_factory=dict)
