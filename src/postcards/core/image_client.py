"""Upstream text-to-image client for the Postcard Creator.

This module provides :class:`PollinationsClient`, the single point of contact
with the third-party generation API.  It plays the role a model manager
plays for a local pipeline: the service creates one instance at startup,
every request calls :meth:`PollinationsClient.generate`, and the instance is
closed when the service stops.

Request Shape
-------------
::

    GET {base_url}/api/generate/image/{url-encoded prompt}
        ?model=nanobanana-pro&width=1536&height=1024
        [&seed=42][&enhance=true][&nologo=true]
    Authorization: Bearer <api key>

``seed`` is only sent when one is set, ``enhance`` and ``nologo`` only when
true.

Failure Modes
-------------
- The call takes longer than the timeout → :class:`UpstreamTimeoutError`.
- Non-2xx status → :class:`UpstreamError` carrying the status code.
- Connection-level failure → :class:`UpstreamError` without a status code.
- 2xx with an HTML document in the body → :class:`AuthenticationError`.

Usage
-----
::

    client = PollinationsClient(api_key="sk_...")
    data = await client.generate(prompt, GenerationOptions(seed=42))
    await client.aclose()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from postcards.core.errors import AuthenticationError, UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "nanobanana-pro"
DEFAULT_WIDTH = 1536
DEFAULT_HEIGHT = 1024

# Seeds drawn locally fall in [0, MAX_SEED), the range the browser form uses.
MAX_SEED = 2**31 - 1

# How much of the body is checked for an HTML document.
_HTML_SNIFF_BYTES = 500
_HTML_MARKERS = ("<!doctype html", "<html")


@dataclass(frozen=True)
class GenerationOptions:
    """Generation parameters sent upstream as query parameters.

    Attributes:
        model: Upstream model name.
        width: Image width in pixels.
        height: Image height in pixels.
        seed: Seed for reproducible output, or ``None`` to let the upstream
            service choose.
        enhance: Ask the upstream service to rewrite the prompt.
        nologo: Ask the upstream service not to stamp its logo.
    """

    model: str = DEFAULT_MODEL
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    seed: int | None = None
    enhance: bool = False
    nologo: bool = True

    def to_query_params(self) -> dict[str, str]:
        """Return the query parameters in the order the upstream expects."""
        params = {
            "model": self.model,
            "width": str(self.width),
            "height": str(self.height),
        }
        if self.seed is not None:
            params["seed"] = str(self.seed)
        if self.enhance:
            params["enhance"] = "true"
        if self.nologo:
            params["nologo"] = "true"
        return params


@dataclass(frozen=True)
class GeneratedImage:
    """An image held in memory for one request/response cycle."""

    data: bytes
    content_type: str
    seed: int | None = None


def looks_like_html(data: bytes) -> bool:
    """Return ``True`` if the start of *data* is an HTML document."""
    head = data[:_HTML_SNIFF_BYTES].decode("utf-8", errors="ignore").lower()
    return any(marker in head for marker in _HTML_MARKERS)


class PollinationsClient:
    """Async client for the Pollinations image generation endpoint.

    Attributes:
        _api_key (str):
            Bearer token attached to every request.
        _base_url (str):
            Scheme and host of the upstream service, without trailing slash.
        _timeout (float):
            Hard limit in seconds for one :meth:`generate` call.
        _http (httpx.AsyncClient):
            Pooled HTTP client.  Created here unless one is injected.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://enter.pollinations.ai",
        timeout: float = 60.0,
        user_agent: str = "Christmas-Postcard-Creator/1.0",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client.

        Args:
            api_key: Bearer token for the upstream API.
            base_url: Scheme and host of the upstream service.
            timeout: Seconds allowed for one generation call.
            user_agent: ``User-Agent`` header value.
            http_client: Optional pre-built ``httpx.AsyncClient`` (tests pass
                one with a mock transport).  The client takes ownership and
                closes it in :meth:`aclose`.
        """
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    def build_url(self, prompt: str) -> str:
        """Return the generation URL for *prompt* without query parameters.

        The whole prompt is percent-encoded into a single path segment,
        including ``/``, so user text cannot alter the route.
        """
        return f"{self._base_url}/api/generate/image/{quote(prompt, safe='')}"

    async def generate(self, prompt: str, options: GenerationOptions | None = None) -> bytes:
        """Generate an image for *prompt* and return its raw bytes.

        Args:
            prompt: The fully built prompt text.
            options: Generation parameters; defaults are used when omitted.

        Returns:
            The image bytes exactly as returned by the upstream service.

        Raises:
            UpstreamTimeoutError: The call exceeded the timeout.
            UpstreamError: Non-success status or connection failure.
            AuthenticationError: The upstream returned an HTML page.
        """
        options = options or GenerationOptions()

        logger.info("Starting upstream generation...")
        logger.info("Seed: %s", options.seed)
        logger.info("Resolution: %dx%d", options.width, options.height)

        try:
            response = await asyncio.wait_for(
                self._http.get(
                    self.build_url(prompt),
                    params=options.to_query_params(),
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "User-Agent": self._user_agent,
                    },
                ),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise UpstreamTimeoutError(
                f"Timeout: generation took longer than {self._timeout:g} seconds"
            ) from e
        except httpx.HTTPError as e:
            logger.error("Upstream request failed: %s", e)
            raise UpstreamError(f"Could not reach the image API: {e}") from e

        if not response.is_success:
            logger.error("Upstream error: %d %s", response.status_code, response.text[:200])
            raise UpstreamError(
                f"Error {response.status_code} from the image API",
                status_code=response.status_code,
            )

        data = response.content
        if looks_like_html(data):
            raise AuthenticationError("The image API returned HTML. Check your API key.")

        logger.info("Image generated: %d bytes", len(data))
        return data

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()
