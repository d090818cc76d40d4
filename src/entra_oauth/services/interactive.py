"""Interactive capture of the authorization redirect.

A web view (or a person) visits the authorization URL and reports the final
redirect URL. The handler runs on a background thread while the caller waits
with a bounded, cancellable receive.
"""

from __future__ import annotations

import asyncio
import logging
import queue
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from entra_oauth.models.errors import (
    AuthorizationError,
    AuthorizationTimeoutError,
    UserAuthCancelledError,
)
from entra_oauth.models.flow import AuthorizationQueryResponse, AuthorizationRequest
from entra_oauth.services.flow import parse_authorization_redirect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebViewOptions:
    """Bounds for an interactive authorization.

    Args:
        timeout: Seconds to wait for the redirect before giving up
        cancel_event: Set from any thread to abandon the wait
        poll_interval: Longest single wait between cancellation checks
    """

    timeout: float = 300.0
    cancel_event: threading.Event = field(default_factory=threading.Event)
    poll_interval: float = 0.1

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")


class WebViewHandler(Protocol):
    """Protocol for the component that performs the user interaction.

    Allows different strategies for browser interaction:
    - Manual (hand the URL to a person and read back the redirect)
    - Embedded web view watching for the redirect URI
    - Custom UI integration
    """

    def navigate(
        self, url: str, redirect_uri: str, options: WebViewOptions
    ) -> str | None:
        """Visit ``url`` and return the final redirect URL.

        Returns:
            The URL the identity platform redirected to, or None if the user
            closed the window
        """
        ...


class ManualWebViewHandler:
    """Handler that delegates to a caller-supplied function.

    Suitable for CLI tools: print the URL, let the user sign in with any
    browser, then paste the redirect URL back.
    """

    def __init__(self, callback: Callable[[str], str | None] | None = None):
        self.callback = callback

    def navigate(
        self, url: str, redirect_uri: str, options: WebViewOptions
    ) -> str | None:
        if self.callback:
            return self.callback(url)
        raise NotImplementedError(
            f"Please visit {url} and provide the URL redirected to {redirect_uri}"
        )


class InteractiveAuthenticator:
    """Runs the authorization request through a WebViewHandler."""

    def __init__(self, handler: WebViewHandler):
        self._handler = handler

    def authenticate(
        self,
        request: AuthorizationRequest,
        options: WebViewOptions | None = None,
    ) -> AuthorizationQueryResponse:
        """Capture and parse the redirect for an authorization request.

        Args:
            request: Validated authorization request
            options: Timeout and cancellation settings

        Returns:
            AuthorizationQueryResponse: Parsed redirect parameters

        Raises:
            IdentityValidationError: If the request cannot produce a URL
            AuthorizationTimeoutError: If no redirect arrives in time
            UserAuthCancelledError: If cancelled or the user closed the window
            AuthorizationError: If the handler fails
            AuthorizationCallbackError: If the redirect cannot be parsed
        """
        options = options or WebViewOptions()
        url = request.build_authorization_url()
        redirect_url = self._capture(url, request.redirect_uri, options)
        logger.debug("Captured authorization redirect")
        return parse_authorization_redirect(redirect_url)

    async def authenticate_async(
        self,
        request: AuthorizationRequest,
        options: WebViewOptions | None = None,
    ) -> AuthorizationQueryResponse:
        """Awaitable counterpart of ``authenticate``."""
        options = options or WebViewOptions()
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.authenticate, request, options),
                timeout=options.timeout,
            )
        except asyncio.TimeoutError:
            options.cancel_event.set()
            raise AuthorizationTimeoutError(
                f"No authorization redirect within {options.timeout} seconds"
            ) from None
        except asyncio.CancelledError:
            options.cancel_event.set()
            raise

    def _capture(self, url: str, redirect_uri: str, options: WebViewOptions) -> str:
        results: queue.Queue[tuple[bool, object]] = queue.Queue(maxsize=1)

        def run() -> None:
            try:
                results.put((True, self._handler.navigate(url, redirect_uri, options)))
            except Exception as e:
                results.put((False, e))

        worker = threading.Thread(target=run, name="entra-oauth-webview", daemon=True)
        worker.start()

        deadline = time.monotonic() + options.timeout
        while True:
            if options.cancel_event.is_set():
                raise UserAuthCancelledError("Authorization was cancelled")

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise AuthorizationTimeoutError(
                    f"No authorization redirect within {options.timeout} seconds"
                )

            try:
                succeeded, value = results.get(
                    timeout=min(options.poll_interval, remaining)
                )
            except queue.Empty:
                continue

            if not succeeded:
                raise AuthorizationError(f"Web view handler failed: {value}") from value
            if value is None:
                raise UserAuthCancelledError("User closed the authorization window")
            return str(value)
