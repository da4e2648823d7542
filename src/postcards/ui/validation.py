"""Validation utilities for postcard form input."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from postcards.api.prompt_builder import DEFAULT_MESSAGE
from postcards.core.errors import ValidationError
from postcards.core.image_client import MAX_SEED

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardForm:
    """Trimmed form values ready to be sent to the service."""

    name: str
    wish: str
    message: str = DEFAULT_MESSAGE


def validate_form(name: str | None, wish: str | None, message: str | None = None) -> CardForm:
    """Trim the form fields and check the required ones.

    Only presence is checked here; length limits and escaping are the
    server's job.

    Args:
        name: Recipient name.
        wish: Gift or wish to depict.
        message: Optional signature line.

    Returns:
        A :class:`CardForm` with trimmed values.  An empty message becomes
        ``"With love."``.

    Raises:
        ValidationError: If name or wish is empty after trimming.
    """
    name = (name or "").strip()
    wish = (wish or "").strip()
    message = (message or "").strip()

    if not name or not wish:
        logger.debug("Rejected form: name=%r wish=%r", name, wish)
        raise ValidationError("Please complete the name and wish fields")

    return CardForm(name=name, wish=wish, message=message or DEFAULT_MESSAGE)


def make_random_seed() -> int:
    """Return a seed drawn uniformly from ``[0, 2**31 - 1)``."""
    return random.randrange(MAX_SEED)
