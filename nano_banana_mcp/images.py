"""Reference image loading."""

from __future__ import annotations

import asyncio
import base64
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .errors import ImageLoadError

DEFAULT_MIME_TYPE = "image/png"

_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


@dataclass(frozen=True)
class EncodedImage:
    data: str
    mime_type: str | None = DEFAULT_MIME_TYPE

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str | None = DEFAULT_MIME_TYPE) -> "EncodedImage":
        return cls(data=base64.b64encode(raw).decode("ascii"), mime_type=mime_type)


def mime_type_for_path(path: str | Path) -> str:
    suffix = Path(str(path)).suffix.lower()
    return _MIME_TYPES.get(suffix, DEFAULT_MIME_TYPE)


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ImageLoadError(str(path), exc.strerror or str(exc)) from exc


async def load_image(path: str | Path) -> EncodedImage:
    image_path = Path(path).expanduser()
    raw = await asyncio.to_thread(_read_bytes, image_path)
    return EncodedImage.from_bytes(raw, mime_type_for_path(image_path))


async def load_images(paths: Iterable[str | Path]) -> list[EncodedImage]:
    images: list[EncodedImage] = []
    for path in paths:
        images.append(await load_image(path))
    return images
