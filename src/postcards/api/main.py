"""Postcard Creator — FastAPI Application.

This module is the single entry point for the web service.  It defines the
application factory, all routes, the error handlers, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
The service is stateless:

- **Configuration** is a :class:`~postcards.core.config.PostcardConfig`
  built once by ``main()`` (or a test fixture) and passed to
  :func:`create_app`.  Handlers read it from ``app.state`` via dependencies.
- **Image generation** is delegated to
  :class:`~postcards.core.image_client.PollinationsClient`, created in the
  lifespan and closed on shutdown.
- **Static assets** (the form page and its JavaScript) are served from
  ``/static``; ``GET /`` returns ``index.html``.
- Nothing is persisted: each request builds its own prompt, makes one
  upstream call and streams the bytes back.

Endpoints
---------
========  ==================  ==========================================
Method    Path                Purpose
========  ==================  ==========================================
GET       ``/``               Serve the form page
GET       ``/health``         Liveness probe
POST      ``/api/generate``   Generate a postcard image
========  ==================  ==========================================

Every failure is returned as JSON ``{"error": "..."}``.  Unknown routes get
``{"error": "Endpoint no encontrado"}`` with status 404.

Usage
-----
CLI (installed entry point)::

    postcards

Direct invocation::

    python -m postcards.api.main
"""

from __future__ import annotations

import logging
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from postcards import __version__
from postcards.api.models import ErrorResponse, GenerateRequest, HealthResponse
from postcards.api.prompt_builder import build_prompt
from postcards.core.config import PostcardConfig
from postcards.core.content_type import detect_content_type
from postcards.core.errors import ConfigurationError, PostcardError
from postcards.core.image_client import (
    DEFAULT_HEIGHT,
    DEFAULT_MODEL,
    DEFAULT_WIDTH,
    MAX_SEED,
    GenerationOptions,
    PollinationsClient,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "Christmas Postcard API"
NOT_FOUND_MESSAGE = "Endpoint no encontrado"
GENERIC_ERROR_MESSAGE = "Failed to generate the postcard"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# ---------------------------------------------------------------------------
# Dependencies.
# ---------------------------------------------------------------------------


def get_config(request: Request) -> PostcardConfig:
    """Return the configuration the application was built with."""
    return request.app.state.config


def get_image_client(request: Request) -> PollinationsClient:
    """Return the shared upstream client created by the lifespan."""
    return request.app.state.image_client


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    config: PostcardConfig,
    *,
    upstream_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the FastAPI application around *config*.

    Args:
        config: Process configuration, constructed once by the caller.
        upstream_transport: Optional httpx transport for the upstream client.
            Tests pass an ``httpx.MockTransport`` so no real request is made.

    Returns:
        A configured :class:`FastAPI` instance.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create the upstream client on startup and close it on shutdown."""
        # --- Startup -------------------------------------------------------
        http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.upstream_timeout),
            transport=upstream_transport,
        )
        app.state.image_client = PollinationsClient(
            config.pollinations_api_key or "",
            base_url=config.upstream_base_url,
            timeout=config.upstream_timeout,
            user_agent=config.user_agent,
            http_client=http_client,
        )
        if not config.has_credential:
            logger.warning("POLLINATIONS_API_KEY is not set; generation requests will fail.")
        logger.info("Upstream client initialised (%s).", config.upstream_base_url)

        yield  # Application runs here.

        # --- Shutdown ------------------------------------------------------
        await app.state.image_client.aclose()
        logger.info("Upstream client closed on shutdown.")

    app = FastAPI(
        title="Christmas Postcard Creator",
        description="Generates Christmas greeting-card images from a name, a wish and a message.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Seed"],
    )

    if config.static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=str(config.static_dir)), name="static")

    _register_error_handlers(app)
    _register_routes(app)
    return app


def _register_error_handlers(app: FastAPI) -> None:
    """Render framework-level errors in the ``{"error": ...}`` shape."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return _error(404, NOT_FOUND_MESSAGE)
        response = _error(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report unparseable generation requests like any other generation failure."""
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        logger.error("Rejected generation request: %s", message)
        return _error(500, f"{location}: {message}" if location else message)


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


def _register_routes(app: FastAPI) -> None:
    @app.get("/", include_in_schema=False)
    async def index(config: PostcardConfig = Depends(get_config)) -> FileResponse:
        """Serve the form page.

        Raises:
            HTTPException: 404 if ``index.html`` is not present.
        """
        index_path = config.static_dir / "index.html"
        if not index_path.is_file():
            raise StarletteHTTPException(status_code=404)
        return FileResponse(index_path, media_type="text/html")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        """Report that the service is up."""
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        return HealthResponse(
            status="ok",
            service=SERVICE_NAME,
            timestamp=timestamp.replace("+00:00", "Z"),
        )

    @app.post(
        "/api/generate",
        response_class=Response,
        responses={
            200: {"content": {"image/png": {}, "image/jpeg": {}}},
            500: {"model": ErrorResponse},
        },
    )
    async def generate_postcard(
        req: GenerateRequest,
        config: PostcardConfig = Depends(get_config),
        image_client: PollinationsClient = Depends(get_image_client),
    ) -> Response:
        """Generate a postcard image and return its bytes.

        This endpoint:

        1. Checks that the upstream API key is configured.
        2. Builds the prompt from the cleaned name, wish and message.
        3. Resolves the seed, drawing one when the caller sent none.
        4. Calls the upstream image API once.
        5. Detects the content type from the returned bytes.

        Args:
            req: Validated :class:`GenerateRequest` payload.

        Returns:
            The image bytes with ``Content-Type``, ``Cache-Control: no-cache``
            and ``X-Seed`` (the seed actually used) headers, or a 500 JSON
            error.
        """
        logger.info("New generation request")

        try:
            if not config.has_credential:
                logger.error("POLLINATIONS_API_KEY is not configured")
                raise ConfigurationError("Server configuration incomplete")

            prompt = build_prompt(req.name, req.wish, req.message)

            # The server owns the seed so X-Seed always reports what was used.
            seed = req.seed if req.seed is not None else random.randrange(MAX_SEED)

            options = GenerationOptions(
                model=req.model or DEFAULT_MODEL,
                width=req.width or DEFAULT_WIDTH,
                height=req.height or DEFAULT_HEIGHT,
                seed=seed,
                enhance=bool(req.enhance),
                nologo=True,
            )
            data = await image_client.generate(prompt, options)
        except PostcardError as e:
            logger.error("Generation failed: %s", e.message)
            return _error(500, e.message)
        except Exception:
            logger.exception("Unexpected error while generating a postcard")
            return _error(500, GENERIC_ERROR_MESSAGE)

        content_type = detect_content_type(data)
        logger.info("Sending %s image to the client", content_type)

        return Response(
            content=data,
            media_type=content_type,
            headers={
                "Cache-Control": "no-cache",
                "X-Seed": str(seed),
            },
        )


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Builds the :class:`PostcardConfig` from the environment (``PORT``,
    ``HOST``, ``POLLINATIONS_API_KEY``, ...), configures logging and serves
    the application.  Registered as the ``postcards`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    config = PostcardConfig()
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    logger.info("Christmas Postcard API listening on port %d", config.port)
    logger.info("Health check: /health")
    logger.info("Generate: POST /api/generate")

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
