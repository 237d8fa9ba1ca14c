"""Gemini ("Nano Banana") image generation exposed as an MCP tool."""

from __future__ import annotations

__version__ = "1.0.0"

from .config import Settings
from .errors import (
    ConfigurationError,
    GeminiAPIError,
    GeminiTransportError,
    ImageLoadError,
    NanoBananaError,
    NoContentError,
)
from .gemini import GeminiImageClient, GenerationResult, generate_image
from .images import EncodedImage, load_image, mime_type_for_path

__all__ = [
    "ConfigurationError",
    "EncodedImage",
    "GeminiAPIError",
    "GeminiImageClient",
    "GeminiTransportError",
    "GenerationResult",
    "ImageLoadError",
    "NanoBananaError",
    "NoContentError",
    "Settings",
    "__version__",
    "generate_image",
    "load_image",
    "mime_type_for_path",
]
