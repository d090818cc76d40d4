"""Authority resolution for identity platform endpoints.

Maps a cloud instance and an authority selector to concrete endpoint URLs.
Pure string composition; no metadata discovery is performed.
"""

from __future__ import annotations

from dataclasses import dataclass

from entra_oauth.models.config import (
    AuthoritySelector,
    CloudInstance,
    authority_segment,
)


@dataclass(frozen=True)
class AuthorityEndpoints:
    """Resolved endpoints for one (cloud instance, authority) pair."""

    authorization_url: str
    token_url: str
    logout_url: str

    @property
    def refresh_token_url(self) -> str:
        # Refresh requests are served by the token endpoint
        return self.token_url


def resolve_authority(
    cloud_instance: CloudInstance, authority: AuthoritySelector
) -> AuthorityEndpoints:
    """Resolve the endpoints for a cloud instance and authority.

    Every authority, including the ``adfs`` realm, is a path segment in
    front of the v2.0 endpoints.

    Args:
        cloud_instance: Cloud host to target
        authority: Shared realm or specific tenant

    Returns:
        AuthorityEndpoints for the pair
    """
    host = cloud_instance.host.rstrip("/")

    base = f"{host}/{authority_segment(authority)}/oauth2/v2.0"

    return AuthorityEndpoints(
        authorization_url=f"{base}/authorize",
        token_url=f"{base}/token",
        logout_url=f"{base}/logout",
    )
