"""Magic-byte content-type detection for generated images."""

from __future__ import annotations

PNG = "image/png"
GIF = "image/gif"
WEBP = "image/webp"
JPEG = "image/jpeg"

# Suffixes used when a generated image is written to disk.
EXTENSIONS: dict[str, str] = {
    PNG: ".png",
    GIF: ".gif",
    WEBP: ".webp",
    JPEG: ".jpg",
}


def detect_content_type(data: bytes) -> str:
    """Classify image bytes by their leading signature.

    Only the first couple of bytes are inspected, which is enough to tell
    apart the formats the upstream service is known to return.  Anything
    unrecognised (including empty input) is reported as JPEG.

    Args:
        data: Raw image bytes.

    Returns:
        One of ``image/png``, ``image/gif``, ``image/webp`` or ``image/jpeg``.
    """
    if data[:2] == b"\x89\x50":
        return PNG
    if data[:2] == b"\x47\x49":
        return GIF
    if data[:4] == b"RIFF":
        return WEBP
    return JPEG


def extension_for(content_type: str) -> str:
    """Return the file suffix for *content_type*, defaulting to ``.jpg``."""
    return EXTENSIONS.get(content_type, ".jpg")
