"""Runtime settings read from the process environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_TIMEOUT_S = 90.0


@dataclass(frozen=True)
class Settings:
    api_key: str | None = None
    api_base: str = DEFAULT_API_BASE
    timeout_s: float = DEFAULT_TIMEOUT_S

    @classmethod
    def from_env(cls) -> "Settings":
        api_key = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        api_base = (os.getenv("GEMINI_API_BASE") or DEFAULT_API_BASE).strip().rstrip("/")
        return cls(
            api_key=api_key.strip() if api_key else None,
            api_base=api_base,
            timeout_s=_parse_timeout(os.getenv("NANO_BANANA_TIMEOUT_S")),
        )


def _parse_timeout(raw: str | None) -> float:
    if not raw or not raw.strip():
        return DEFAULT_TIMEOUT_S
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_S
    if value <= 0:
        return DEFAULT_TIMEOUT_S
    return value
