"""Token request execution over httpx.

Every credential variant exposes the same capability set: target URI, form
body, optional Basic auth pair and request options. The executor turns that
into exactly one ``application/x-www-form-urlencoded`` POST, blocking or
awaitable, with no retry.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from entra_oauth.models.config import TokenCredentialOptions
from entra_oauth.models.errors import UpstreamHttpError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenHttpRequest:
    """Fully validated token endpoint request, ready for the transport."""

    url: str
    form: dict[str, str]
    headers: Mapping[str, str] = field(default_factory=dict)
    auth: tuple[str, str] | None = None
    timeout: float = 30.0


class TokenCredentialExecutor(ABC):
    """Capability set shared by all credential variants."""

    @abstractmethod
    def uri(self) -> str:
        """Token endpoint URL for this credential."""

    @abstractmethod
    def form_urlencode(self) -> dict[str, str]:
        """Validate and return the token request form body.

        Raises:
            IdentityValidationError: If required values are missing or conflict
        """

    @abstractmethod
    def options(self) -> TokenCredentialOptions:
        """Per-request transport options."""

    def basic_auth(self) -> tuple[str, str] | None:
        """Client id and secret for HTTP Basic auth, if this grant has a secret."""
        return None

    def prepare_request(self) -> TokenHttpRequest:
        """Build the complete request, running all validation first.

        Raises:
            IdentityValidationError: If the credential is invalid
        """
        form = self.form_urlencode()
        options = self.options()

        headers = {
            **options.extra_header_parameters,
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }

        return TokenHttpRequest(
            url=self.uri(),
            form=form,
            headers=headers,
            auth=self.basic_auth(),
            timeout=options.timeout,
        )

    def execute(self, http_client: httpx.Client | None = None) -> httpx.Response:
        """Send the token request and return the raw response.

        Args:
            http_client: Client to use; a short-lived one is created if omitted

        Returns:
            The token endpoint response, whatever its status code

        Raises:
            IdentityValidationError: If the credential is invalid (nothing is sent)
            UpstreamHttpError: If the transport fails
        """
        request = self.prepare_request()
        self._log_request(request)

        owns_client = http_client is None
        client = http_client if http_client is not None else httpx.Client(
            timeout=self.options().timeout
        )
        try:
            return client.post(
                request.url,
                data=request.form,
                headers=request.headers,
                auth=request.auth,
                timeout=request.timeout,
            )
        except httpx.HTTPError as e:
            raise UpstreamHttpError(f"HTTP error during token request: {e}") from e
        finally:
            if owns_client:
                client.close()

    async def execute_async(
        self, http_client: httpx.AsyncClient | None = None
    ) -> httpx.Response:
        """Awaitable counterpart of ``execute``."""
        request = self.prepare_request()
        self._log_request(request)

        owns_client = http_client is None
        client = http_client if http_client is not None else httpx.AsyncClient(
            timeout=self.options().timeout
        )
        try:
            return await client.post(
                request.url,
                data=request.form,
                headers=request.headers,
                auth=request.auth,
                timeout=request.timeout,
            )
        except httpx.HTTPError as e:
            raise UpstreamHttpError(f"HTTP error during token request: {e}") from e
        finally:
            if owns_client:
                await client.aclose()

    def _log_request(self, request: TokenHttpRequest) -> None:
        # Log request details (without sensitive data)
        logger.debug(
            f"Token request to {request.url}: "
            f"grant_type={request.form.get('grant_type')}, "
            f"client_id={request.form.get('client_id')}, "
            f"basic_auth={'yes' if request.auth else 'no'}"
        )
