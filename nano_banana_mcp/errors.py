"""Exceptions raised while serving a tool invocation."""

from __future__ import annotations


class NanoBananaError(RuntimeError):
    pass


class ConfigurationError(NanoBananaError):
    pass


class GeminiTransportError(NanoBananaError):
    pass


class GeminiAPIError(NanoBananaError):
    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class NoContentError(NanoBananaError):
    pass


class ImageLoadError(OSError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to read image '{path}': {reason}")
        self.path = path
