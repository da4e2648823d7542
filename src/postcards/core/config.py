"""Configuration management for the Postcard Creator service.

This module provides centralized configuration using Pydantic Settings.
Values are read from environment variables (and an optional ``.env`` file in
the working directory), falling back to the defaults defined on
:class:`PostcardConfig`.

Environment Variable Loading
----------------------------
No prefix is used, so the variable names match the deployment environment the
service was built for:

    POLLINATIONS_API_KEY=sk_...
    PORT=3000
    HOST=0.0.0.0
    UPSTREAM_TIMEOUT=60
    LOG_LEVEL=INFO

Lookup is case-insensitive.  Priority order is:

1. Keyword arguments passed to ``PostcardConfig(...)``
2. Environment variables
3. ``.env`` file
4. Defaults

Single Instance
---------------
Unlike a module-level singleton, the configuration is constructed once at
process start (see :func:`postcards.api.main.main`) and handed to
:func:`postcards.api.main.create_app`.  Request handlers read it from
``app.state`` so tests can build an application around any configuration.

Usage Example
-------------
::

    from postcards.core.config import PostcardConfig

    config = PostcardConfig()
    if not config.has_credential:
        print("POLLINATIONS_API_KEY is not set")
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Static assets ship inside the package: src/postcards/static.
_PACKAGE_DIR = Path(__file__).resolve().parent.parent


class PostcardConfig(BaseSettings):
    """Main configuration for the Postcard Creator service.

    Attributes
    ----------
    Upstream Settings:
        pollinations_api_key : str | None
            Bearer token for the Pollinations API.  The service starts without
            it, but every generation request fails until it is set.
        upstream_base_url : str
            Scheme and host of the text-to-image service.
        upstream_timeout : float
            Hard limit, in seconds, for one upstream generation call.
        user_agent : str
            ``User-Agent`` header sent upstream.

    Server Settings:
        host : str
            Bind address for uvicorn.
        port : int
            Listen port (1-65535).
        cors_origins : list[str]
            Origins allowed by the CORS middleware.
        log_level : str
            Root logging level applied by ``main()``.

    Paths:
        static_dir : Path
            Directory holding ``index.html`` and the ``js``/``css`` assets.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Upstream settings
    pollinations_api_key: str | None = Field(
        default=None,
        description="Bearer token for the Pollinations image API",
    )
    upstream_base_url: str = Field(
        default="https://enter.pollinations.ai",
        description="Base URL of the text-to-image service",
    )
    upstream_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Seconds allowed for a single generation call",
    )
    user_agent: str = Field(
        default="Christmas-Postcard-Creator/1.0",
        description="User-Agent header sent to the upstream service",
    )

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Server port",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API from a browser",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level for the service",
    )

    # Paths
    static_dir: Path = Field(
        default=_PACKAGE_DIR / "static",
        description="Directory with the form page and its assets",
    )

    @property
    def has_credential(self) -> bool:
        """Whether a non-blank upstream API key is configured."""
        return bool(self.pollinations_api_key and self.pollinations_api_key.strip())
