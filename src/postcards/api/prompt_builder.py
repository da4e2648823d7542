"""Postcard prompt template compilation.

The prompt sent upstream is a fixed Christmas postcard description with three
slots filled from user input:

- ``{WISH}`` — what appears on the right side of the card, as the gift or
  wish made real.
- ``{NAME}`` — the recipient, rendered in the centred greeting line
  ``"Merry christmas, {NAME}"``.
- ``{MESSAGE}`` — the short signature line in the bottom-left border.

Sanitisation
------------
User text is cleaned before it is substituted:

1. ``\\r``, ``\\n`` and ``\\t`` become spaces, whitespace runs collapse to
   one space, and the result is trimmed.
2. The text is cut to the field's limit (60 / 220 / 140 characters) and
   trimmed again.
3. Backslashes and double quotes are escaped, so text that lands inside the
   template's quoted literals cannot close them early.

Each slot is replaced exactly once and the substituted text is never scanned
again, so a name that itself contains ``{MESSAGE}`` is inserted verbatim.

Usage
-----
::

    prompt = build_prompt("Ana", "a red bicycle", "Love, Grandma")
"""

from __future__ import annotations

import re

from postcards.core.errors import ValidationError

NAME_MAX_LENGTH = 60
WISH_MAX_LENGTH = 220
MESSAGE_MAX_LENGTH = 140

DEFAULT_MESSAGE = "With love."

_CONTROL_WHITESPACE = re.compile(r"[\r\n\t]")
_WHITESPACE_RUN = re.compile(r"\s+")
_PLACEHOLDER = re.compile(r"\{(NAME|WISH|MESSAGE)\}")

# ---------------------------------------------------------------------------
# Fixed postcard template.
# The wording is the tested aesthetic of the card; only the three slots vary.
# ---------------------------------------------------------------------------

PROMPT_TEMPLATE = (
    "High-quality Christmas greeting postcard, subtle paper grain and printed ink texture, "
    "clean cream border frame around the artwork. Cozy winter illustration in elegant "
    "watercolor + gouache style, cinematic soft lighting, rich but tasteful color palette "
    "(deep greens, warm ambers, muted reds). A beautiful Christmas tree on the left side with "
    "gentle bokeh lights and ornaments.\n"
    "On the right side, include a clear, visually readable depiction of: {WISH}, as if it were "
    "the Christmas gift or wish made real (integrated naturally into the scene, not floating "
    "abstractly). Keep it tasteful, elegant, and coherent with the watercolor + gouache style. "
    "Make sure the right side stays uncluttered enough so the gift/wish is instantly "
    "recognizable.\n"
    "Add exactly this text, perfectly legible, centered in the right area (over a clean, "
    "unobtrusive background), with elegant classic postcard serif typography: "
    '"Merry christmas, {NAME}"\n'
    "Add a second, smaller line of text in the bottom-left corner, inside the cream border "
    "area (not over the artwork). It must be perfectly legible, in a tasteful classic postcard "
    "serif (or neat handwritten-style) typography, dark ink, aligned left, with generous "
    'margin. Use exactly this text: "{MESSAGE}". No other additional text. If the signature '
    "is long, reduce font size slightly and keep it to a single line (no wrapping). No logos. "
    "No signatures. No watermark."
)


def clean_user_text(text: str | None, max_length: int) -> str:
    """Normalise whitespace in *text* and cap it at *max_length* characters.

    Args:
        text: Raw user input.  ``None`` and ``""`` both yield ``""``.
        max_length: Maximum length of the result.

    Returns:
        Single-line text with no leading/trailing whitespace and no runs of
        more than one space.
    """
    if not text:
        return ""
    cleaned = _CONTROL_WHITESPACE.sub(" ", text).strip()
    cleaned = _WHITESPACE_RUN.sub(" ", cleaned)
    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length].strip()
    return cleaned


def escape_quotes(text: str) -> str:
    """Escape backslashes and double quotes for a quoted template literal."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def build_prompt(name: str | None, wish: str | None, message: str | None = None) -> str:
    """Compile the postcard prompt from the three user fields.

    Args:
        name: Recipient name (required, at most 60 characters are kept).
        wish: The gift or wish to depict (required, at most 220 characters).
        message: Signature line (optional, at most 140 characters).  Falls
            back to ``"With love."`` when empty.

    Returns:
        The complete prompt string.

    Raises:
        ValidationError: If *name* or *wish* is empty after cleaning.
    """
    clean_name = escape_quotes(clean_user_text(name, NAME_MAX_LENGTH))
    clean_wish = escape_quotes(clean_user_text(wish, WISH_MAX_LENGTH))
    clean_message = escape_quotes(clean_user_text(message, MESSAGE_MAX_LENGTH))

    if not clean_name:
        raise ValidationError("The name cannot be empty")
    if not clean_wish:
        raise ValidationError("The wish cannot be empty")
    if not clean_message:
        clean_message = DEFAULT_MESSAGE

    values = {"NAME": clean_name, "WISH": clean_wish, "MESSAGE": clean_message}

    # A single pass over the template: replacement text is never re-scanned.
    return _PLACEHOLDER.sub(lambda m: values[m.group(1)], PROMPT_TEMPLATE)
