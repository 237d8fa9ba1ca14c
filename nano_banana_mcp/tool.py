"""The ``generate_image`` tool: schema, argument mapping and content rendering."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from pathlib import Path
from typing import Any, Mapping

from mcp import types

from .gemini import GeminiImageClient, GenerationResult
from .images import load_images
from .models import (
    ASPECT_RATIOS,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_MODEL,
    DEFAULT_OUTPUT_FORMAT,
    MAX_REFERENCE_IMAGES,
    OUTPUT_FORMATS,
    PRO_MODEL,
    ModelRegistry,
)

logger = logging.getLogger(__name__)

TOOL_NAME = "generate_image"

GENERATE_IMAGE_TOOL = types.Tool(
    name=TOOL_NAME,
    description=(
        "Generate an image using Google Nano Banana (Gemini) AI model. Can generate from "
        "text only, or use one or more reference images (up to 14) to guide generation."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "prompt": {
                "type": "string",
                "description": (
                    "Text description of the image to generate or instructions for "
                    "editing/combining reference images"
                ),
            },
            "imagePaths": {
                "type": "array",
                "items": {"type": "string"},
                "maxItems": MAX_REFERENCE_IMAGES,
                "description": (
                    "Optional array of file paths to reference images (up to 14). "
                    "Supports png, jpg, jpeg, webp, gif."
                ),
            },
            "model": {
                "type": "string",
                "enum": ModelRegistry().names(),
                "default": DEFAULT_MODEL,
                "description": (
                    "Model to use: gemini-2.5-flash-image (fast) or "
                    "gemini-3-pro-image-preview (high quality, default)"
                ),
            },
            "aspectRatio": {
                "type": "string",
                "enum": list(ASPECT_RATIOS),
                "default": DEFAULT_ASPECT_RATIO,
                "description": "Aspect ratio of the generated image",
            },
            "outputFormat": {
                "type": "string",
                "enum": list(OUTPUT_FORMATS),
                "default": DEFAULT_OUTPUT_FORMAT,
                "description": "Output image format",
            },
            "outputPath": {
                "type": "string",
                "description": (
                    "File path to save the generated image. If not provided, image data "
                    "is returned inline."
                ),
            },
        },
        "required": ["prompt"],
    },
)


async def handle_generate_image(
    client: GeminiImageClient, arguments: Mapping[str, Any] | None
) -> types.CallToolResult:
    try:
        content = await _generate_image_content(client, dict(arguments or {}))
    except Exception as exc:
        logger.error("%s failed: %s", TOOL_NAME, exc, exc_info=True)
        return error_result(exc)
    return types.CallToolResult(content=content)


def error_result(exc: BaseException | str) -> types.CallToolResult:
    message = str(exc)
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=f"Error: {message}")],
        isError=True,
    )


async def _generate_image_content(
    client: GeminiImageClient, arguments: dict[str, Any]
) -> list[types.TextContent | types.ImageContent]:
    prompt = arguments.get("prompt")
    if not isinstance(prompt, str):
        raise ValueError("prompt is required and must be a string")
    image_paths = arguments.get("imagePaths") or []
    if len(image_paths) > MAX_REFERENCE_IMAGES:
        raise ValueError(
            f"At most {MAX_REFERENCE_IMAGES} reference images are supported, got {len(image_paths)}"
        )
    output_path = arguments.get("outputPath")

    images = await load_images(image_paths)
    result = await client.generate(
        prompt,
        images,
        arguments.get("model") or DEFAULT_MODEL,
        arguments.get("aspectRatio") or DEFAULT_ASPECT_RATIO,
        arguments.get("outputFormat") or DEFAULT_OUTPUT_FORMAT,
    )

    content: list[types.TextContent | types.ImageContent] = [
        types.TextContent(type="text", text=status_text(result))
    ]
    if result.image_data and result.mime_type:
        if output_path:
            saved = await save_image(result.image_data, output_path)
            content.append(types.TextContent(type="text", text=f"Image saved to: {output_path}"))
            logger.info("Wrote %s", saved)
        else:
            content.append(
                types.ImageContent(type="image", data=result.image_data, mimeType=result.mime_type)
            )
    return content


def status_text(result: GenerationResult) -> str:
    text = f"Model used: {result.model_used}"
    if result.fallback:
        text += f" (fallback from {PRO_MODEL} due to quota/rate limit)"
    if result.text:
        text += f"\n\n{result.text}"
    return text


def _write_image(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


async def save_image(image_data: str, output_path: str | Path) -> Path:
    try:
        raw = base64.b64decode(image_data)
    except binascii.Error as exc:
        raise ValueError(f"Generated image data is not valid base64: {exc}") from exc
    path = Path(output_path).expanduser()
    await asyncio.to_thread(_write_image, path, raw)
    return path
