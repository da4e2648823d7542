"""HTTP client for the Postcard Creator service.

:class:`PostcardClient` does from Python what the browser form does: it trims
and validates the three fields, draws a seed, posts the request and hands back
the image together with the seed reported by the server.

Failures are split the same way the form reports them to the user:

- :class:`ServerUnreachableError` — the request never got an HTTP response
  (server down, DNS failure, connection refused, client-side timeout).
- :class:`ServerError` — the server answered with an error status; the
  message is the server's ``error`` text when it sent one.

Only one generation runs at a time per client.  A second call made while one
is in flight raises :class:`ClientBusyError`, mirroring the disabled submit
button.

Usage
-----
::

    with PostcardClient("http://localhost:3000") as client:
        card = client.generate("Ana", "a red bicycle")
        print(card.content_type, card.seed)
"""

from __future__ import annotations

import logging
import threading

import httpx

from postcards.core.content_type import JPEG
from postcards.core.image_client import (
    DEFAULT_HEIGHT,
    DEFAULT_MODEL,
    DEFAULT_WIDTH,
    GeneratedImage,
)
from postcards.ui.validation import make_random_seed, validate_form

logger = logging.getLogger(__name__)


class ClientError(Exception):
    """Base class for errors raised by :class:`PostcardClient`."""


class ServerUnreachableError(ClientError):
    """The service could not be reached at the network level."""


class ServerError(ClientError):
    """The service answered with an error status.

    Attributes:
        status_code: HTTP status of the response.
        message: Error text reported by the server.
    """

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ClientBusyError(ClientError):
    """A generation is already in progress on this client."""


class PostcardClient:
    """Synchronous client for ``POST /api/generate`` and ``GET /health``.

    Args:
        base_url: Root URL of the service, e.g. ``http://localhost:3000``.
        timeout: Seconds to wait for a response.  Kept above the server's
            upstream timeout so the server reports its own timeout.
        http_client: Optional pre-built ``httpx.Client``; when given,
            *base_url* and *timeout* are taken from it and the caller keeps
            ownership.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        *,
        timeout: float = 90.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self._busy = threading.Lock()

    @property
    def busy(self) -> bool:
        """Whether a generation is currently in flight."""
        return self._busy.locked()

    def health(self) -> dict:
        """Return the service's health payload.

        Raises:
            ServerUnreachableError: The service could not be reached.
            ServerError: The service answered with an error status.
        """
        response = self._send("GET", "/health")
        return response.json()

    def generate(
        self,
        name: str,
        wish: str,
        message: str = "",
        *,
        seed: int | None = None,
        model: str = DEFAULT_MODEL,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
    ) -> GeneratedImage:
        """Request a postcard and return the image.

        Args:
            name: Recipient name (required).
            wish: Gift or wish to depict (required).
            message: Signature line; empty means ``"With love."``.
            seed: Seed to use.  A fresh random seed is drawn when omitted.
            model: Upstream model name.
            width: Image width in pixels.
            height: Image height in pixels.

        Returns:
            The image bytes, their content type, and the seed the server
            reported in ``X-Seed``.

        Raises:
            ValidationError: Name or wish is empty; nothing is sent.
            ClientBusyError: Another generation is in flight.
            ServerUnreachableError: The service could not be reached.
            ServerError: The service reported a failure.
        """
        form = validate_form(name, wish, message)

        if not self._busy.acquire(blocking=False):
            raise ClientBusyError("A postcard is already being generated")
        try:
            if seed is None:
                seed = make_random_seed()
            logger.info("Generating postcard for %s (seed %d)", form.name, seed)
            response = self._send(
                "POST",
                "/api/generate",
                json={
                    "name": form.name,
                    "wish": form.wish,
                    "message": form.message,
                    "seed": seed,
                    "model": model,
                    "width": width,
                    "height": height,
                },
            )
        finally:
            self._busy.release()

        reported_seed = response.headers.get("X-Seed")
        if reported_seed is not None and reported_seed.isdigit():
            seed = int(reported_seed)

        content_type = response.headers.get("Content-Type", JPEG).split(";")[0].strip()
        return GeneratedImage(data=response.content, content_type=content_type, seed=seed)

    def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self._http.request(method, url, **kwargs)
        except httpx.TransportError as e:
            logger.error("Could not connect to the postcard service: %s", e)
            raise ServerUnreachableError(
                "Could not connect to server. Please verify the backend is running."
            ) from e

        if not response.is_success:
            raise ServerError(response.status_code, _error_message(response))
        return response

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> PostcardClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _error_message(response: httpx.Response) -> str:
    """Extract the server's ``error`` text, falling back to the status."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"Error {response.status_code}"
