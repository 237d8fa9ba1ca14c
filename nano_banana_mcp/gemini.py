"""Gemini generateContent adapter for image generation."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from .config import Settings
from .errors import ConfigurationError, GeminiAPIError, GeminiTransportError, NoContentError
from .fallback import FallbackPolicy
from .images import DEFAULT_MIME_TYPE, EncodedImage
from .models import DEFAULT_ASPECT_RATIO, DEFAULT_MODEL, DEFAULT_OUTPUT_FORMAT
from .utils import getenv_flag, sanitize_payload

logger = logging.getLogger(__name__)

RESPONSE_MODALITIES = ("TEXT", "IMAGE")
DEBUG_REQUESTS_ENV = "NANO_BANANA_DEBUG_REQUESTS"


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ImagePart:
    data: str
    mime_type: str | None = None


ResponsePart = TextPart | ImagePart


@dataclass
class GenerationResult:
    model_used: str
    fallback: bool = False
    text: str | None = None
    image_data: str | None = None
    mime_type: str | None = None
    usage: Mapping[str, Any] | None = None


class GeminiImageClient:
    """Calls ``{model}:generateContent`` and normalizes the answer.

    The pro model falls back to the flash model once on quota or permission
    failures, see :mod:`nano_banana_mcp.fallback`.
    """

    def __init__(self, settings: Settings, policy: FallbackPolicy | None = None) -> None:
        self._settings = settings
        self._policy = policy or FallbackPolicy()

    def endpoint(self, model: str) -> str:
        return f"{self._settings.api_base.rstrip('/')}/{model}:generateContent"

    async def generate(
        self,
        prompt: str,
        images: Sequence[EncodedImage] = (),
        model: str = DEFAULT_MODEL,
        aspect_ratio: str = DEFAULT_ASPECT_RATIO,
        output_format: str = DEFAULT_OUTPUT_FORMAT,
    ) -> GenerationResult:
        """Generate from a prompt plus optional reference images.

        ``aspect_ratio`` and ``output_format`` are part of the tool contract but
        the request body only carries the response modalities; they are not
        sent to the API.
        """
        api_key = self._settings.api_key
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY environment variable is not set")

        body = build_request_body(prompt, images)
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": api_key,
        }
        if getenv_flag(DEBUG_REQUESTS_ENV):
            logger.debug(
                "Gemini request body (aspect_ratio=%s, output_format=%s): %s",
                aspect_ratio,
                output_format,
                json.dumps(sanitize_payload(body)),
            )

        decision = self._policy.start(model or DEFAULT_MODEL)
        while True:
            logger.info(
                "Requesting %s with %d reference image(s)", decision.model, len(images)
            )
            status, raw = await asyncio.to_thread(
                _post_json,
                self.endpoint(decision.model),
                body,
                headers,
                self._settings.timeout_s,
            )
            if 200 <= status < 300:
                break
            retry = self._policy.on_failure(decision, status)
            if retry is None:
                raise GeminiAPIError(f"Gemini API error: {status} - {raw}", status=status)
            logger.warning(
                "%s returned %d; retrying with %s", decision.model, status, retry.model
            )
            decision = retry

        payload = _parse_payload(raw, status)
        result = normalize_response(payload, model_used=decision.model, fallback=decision.fallback)
        if result.usage:
            logger.info("Gemini usage for %s: %s", result.model_used, dict(result.usage))
        return result


async def generate_image(
    prompt: str,
    images: Sequence[EncodedImage] = (),
    model: str = DEFAULT_MODEL,
    aspect_ratio: str = DEFAULT_ASPECT_RATIO,
    output_format: str = DEFAULT_OUTPUT_FORMAT,
    settings: Settings | None = None,
) -> GenerationResult:
    client = GeminiImageClient(settings or Settings.from_env())
    return await client.generate(prompt, images, model, aspect_ratio, output_format)


def build_request_body(prompt: str, images: Sequence[EncodedImage]) -> dict[str, Any]:
    parts: list[dict[str, Any]] = [{"text": prompt}]
    for image in images:
        parts.append(
            {
                "inlineData": {
                    "mimeType": image.mime_type or DEFAULT_MIME_TYPE,
                    "data": image.data,
                }
            }
        )
    return {
        "contents": [{"parts": parts}],
        "generationConfig": {"responseModalities": list(RESPONSE_MODALITIES)},
    }


def parse_response_parts(raw_parts: Sequence[Any]) -> list[ResponsePart]:
    parts: list[ResponsePart] = []
    for raw in raw_parts:
        if not isinstance(raw, Mapping):
            continue
        text = raw.get("text")
        if isinstance(text, str) and text:
            parts.append(TextPart(text=text))
        inline = raw.get("inlineData")
        if isinstance(inline, Mapping):
            data = inline.get("data")
            if isinstance(data, str) and data:
                parts.append(ImagePart(data=data, mime_type=inline.get("mimeType")))
    return parts


def fold_parts(parts: Sequence[ResponsePart]) -> tuple[str | None, ImagePart | None]:
    """Fold parts left to right; the last text and the last image win."""
    text: str | None = None
    image: ImagePart | None = None
    for part in parts:
        if isinstance(part, TextPart):
            text = part.text
        elif isinstance(part, ImagePart):
            image = part
    return text, image


def normalize_response(
    payload: Mapping[str, Any], *, model_used: str, fallback: bool = False
) -> GenerationResult:
    error = payload.get("error")
    if error:
        message = error.get("message") if isinstance(error, Mapping) else error
        raise GeminiAPIError(f"Gemini API error: {message}")

    raw_parts = _first_candidate_parts(payload)
    if not raw_parts:
        raise NoContentError("No content generated")

    text, image = fold_parts(parse_response_parts(raw_parts))
    usage = payload.get("usageMetadata")
    return GenerationResult(
        model_used=model_used,
        fallback=fallback,
        text=text,
        image_data=image.data if image else None,
        mime_type=image.mime_type if image else None,
        usage=dict(usage) if isinstance(usage, Mapping) else None,
    )


def _first_candidate_parts(payload: Mapping[str, Any]) -> list[Any]:
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return []
    candidate = candidates[0]
    if not isinstance(candidate, Mapping):
        return []
    content = candidate.get("content")
    if not isinstance(content, Mapping):
        return []
    parts = content.get("parts")
    if not isinstance(parts, list):
        return []
    return parts


def _parse_payload(raw: str, status: int) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise GeminiAPIError(
            f"Gemini API error: invalid JSON response - {raw[:200]}", status=status
        ) from exc
    if not isinstance(payload, dict):
        raise GeminiAPIError(
            f"Gemini API error: unexpected response - {raw[:200]}", status=status
        )
    return payload


def _post_json(
    url: str, payload: Mapping[str, Any], headers: Mapping[str, str], timeout_s: float
) -> tuple[int, str]:
    body = json.dumps(payload).encode("utf-8")
    req = Request(url, data=body, headers=dict(headers), method="POST")
    try:
        with urlopen(req, timeout=timeout_s) as response:
            status_code = int(getattr(response, "status", 200))
            raw = response.read().decode("utf-8", errors="replace")
    except HTTPError as exc:
        raw = exc.read().decode("utf-8", errors="replace") if exc.fp else str(exc)
        return int(exc.code), raw
    except (URLError, TimeoutError) as exc:
        raise GeminiTransportError(f"Gemini request failed: {exc}") from exc
    return status_code, raw
