"""Pydantic request and response models for the Postcard API.

FastAPI uses these models for request parsing, response serialisation and the
generated OpenAPI documentation.

Models
------
GenerateRequest
    Payload for ``POST /api/generate``.
HealthResponse
    Body of ``GET /health``.
ErrorResponse
    Body of every error response: ``{"error": "..."}``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from postcards.core.image_client import DEFAULT_HEIGHT, DEFAULT_MODEL, DEFAULT_WIDTH


class GenerateRequest(BaseModel):
    """Request body for the ``POST /api/generate`` endpoint.

    The text fields are deliberately permissive here: emptiness and length
    are enforced by :func:`postcards.api.prompt_builder.build_prompt`, which
    cleans the text first, so ``"   "`` and a missing name fail the same way.

    Attributes:
        name: Recipient name shown in the greeting line.
        wish: The gift or wish depicted on the card.
        message: Signature line.  Empty or missing means ``"With love."``.
        seed: Seed for reproducible output, passed upstream as given.
            ``None`` means the server picks one and reports it in the
            ``X-Seed`` header.
        model: Upstream model name.
        width: Image width in pixels.
        height: Image height in pixels.
        enhance: Let the upstream service rewrite the prompt.
    """

    name: str | None = Field(
        default=None,
        description="Recipient name (required, up to 60 characters are used).",
    )
    wish: str | None = Field(
        default=None,
        description="Gift or wish to depict (required, up to 220 characters are used).",
    )
    message: str | None = Field(
        default=None,
        description="Signature line (optional, up to 140 characters are used).",
    )
    seed: int | None = Field(
        default=None,
        description="Random seed.  None = server picks a random seed.",
    )
    model: str | None = Field(
        default=None,
        description=f"Upstream model name (default '{DEFAULT_MODEL}').",
    )
    width: int | None = Field(
        default=None,
        description=f"Image width in pixels (default {DEFAULT_WIDTH}, also used for 0).",
    )
    height: int | None = Field(
        default=None,
        description=f"Image height in pixels (default {DEFAULT_HEIGHT}, also used for 0).",
    )
    enhance: bool | None = Field(
        default=None,
        description="Ask the upstream service to enhance the prompt (default false).",
    )


class HealthResponse(BaseModel):
    """Response body for ``GET /health``."""

    status: str
    service: str
    timestamp: str


class ErrorResponse(BaseModel):
    """JSON body returned for every failed request."""

    error: str
