"""Gemini image models known to the server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class ModelSpec:
    name: str
    tier: str

    @property
    def is_pro(self) -> bool:
        return self.tier == "pro"


FLASH_MODEL = "gemini-2.5-flash-image"
PRO_MODEL = "gemini-3-pro-image-preview"
DEFAULT_MODEL = PRO_MODEL

ASPECT_RATIOS = ("1:1", "16:9", "9:16", "4:3", "3:4")
DEFAULT_ASPECT_RATIO = "1:1"
OUTPUT_FORMATS = ("png", "jpeg", "webp")
DEFAULT_OUTPUT_FORMAT = "png"
MAX_REFERENCE_IMAGES = 14

_DEFAULT_MODELS: dict[str, ModelSpec] = {
    FLASH_MODEL: ModelSpec(name=FLASH_MODEL, tier="flash"),
    PRO_MODEL: ModelSpec(name=PRO_MODEL, tier="pro"),
}


class ModelRegistry:
    def __init__(self, models: Mapping[str, ModelSpec] | None = None) -> None:
        self._models = dict(models) if models else dict(_DEFAULT_MODELS)

    def get(self, name: str) -> ModelSpec | None:
        return self._models.get(name)

    def names(self) -> list[str]:
        return sorted(self._models.keys())

    def is_pro(self, name: str) -> bool:
        model = self.get(name)
        return bool(model and model.is_pro)
