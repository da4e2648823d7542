"""Error hierarchy for the Postcard Creator service.

Every failure the generation pipeline can report derives from
:class:`PostcardError`.  The API layer catches the base class at the endpoint
boundary and turns it into a JSON ``{"error": message}`` response, so the
message of each exception is written to be shown to the end user.

Hierarchy
---------
::

    PostcardError
    ├── ValidationError          (also a ValueError)
    ├── ConfigurationError
    └── UpstreamError
        ├── UpstreamTimeoutError (also a TimeoutError)
        └── AuthenticationError
"""

from __future__ import annotations


class PostcardError(Exception):
    """Base class for all postcard generation errors.

    Attributes:
        message: Human-readable description, safe to return to the caller.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PostcardError, ValueError):
    """A required free-text field was empty after cleaning."""


class ConfigurationError(PostcardError):
    """The server is missing required configuration (the upstream API key)."""


class UpstreamError(PostcardError):
    """The upstream image API failed or returned a non-success status.

    Attributes:
        status_code: HTTP status returned by the upstream service, or
            ``None`` when the request never produced a response.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamTimeoutError(UpstreamError, TimeoutError):
    """The upstream call did not finish within the configured timeout."""


class AuthenticationError(UpstreamError):
    """The upstream service answered with an HTML page instead of an image.

    Pollinations serves its login/landing page when the bearer token is
    missing or invalid, so HTML in place of image bytes is treated as a
    credential problem.
    """
