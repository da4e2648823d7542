"""Core functionality for postcard generation.

- **PostcardConfig**: configuration management using Pydantic Settings
- **PollinationsClient**: async client for the upstream text-to-image API
- **detect_content_type**: magic-byte image classification
- **errors**: the ``PostcardError`` hierarchy shared by every layer
"""

from postcards.core.config import PostcardConfig
from postcards.core.content_type import detect_content_type
from postcards.core.image_client import GeneratedImage, GenerationOptions, PollinationsClient

__all__ = [
    "GeneratedImage",
    "GenerationOptions",
    "PollinationsClient",
    "PostcardConfig",
    "detect_content_type",
]
