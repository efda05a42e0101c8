"""Client for the stx402 AI image generation endpoint."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import httpx

from .constants import DEFAULT_GENERATOR_URL, DEFAULT_IMAGE_HEIGHT, DEFAULT_IMAGE_WIDTH

logger = logging.getLogger("wallet_idcard.generator")

GENERATE_PATH = "/api/ai/generate-image"
DEFAULT_MEDIA_TYPE = "image/png"

URL_KEYS = ("url", "imageUrl", "image_url")
INLINE_KEYS = ("image", "b64_json")

REJECTED = "rejected"
FETCH_FAILED = "fetch-failed"


@dataclass(frozen=True)
class GeneratedArtifact:
    content: bytes
    media_type: str = DEFAULT_MEDIA_TYPE


@dataclass(frozen=True)
class GeneratorPaymentRequired:
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GenerationFailure:
    kind: str
    details: str
    status: Optional[int] = None


GenerationResult = Union[GeneratedArtifact, GeneratorPaymentRequired, GenerationFailure]


def _media_type(response: httpx.Response) -> str:
    return response.headers.get("content-type", "").split(";")[0].strip().lower()


def _decode_inline(value: str) -> tuple[bytes, str]:
    media_type = DEFAULT_MEDIA_TYPE
    if value.startswith("data:"):
        header, _, value = value.partition(",")
        media_type = header[len("data:"):].split(";")[0] or DEFAULT_MEDIA_TYPE
    return base64.b64decode(value, validate=True), media_type


class ArtifactGenerator:
    """Request one image for a prompt and realize it as bytes.

    The generator may answer with the image itself, a URL pointing at it, or
    inline base64. A 402 from the generator is surfaced as
    ``GeneratorPaymentRequired`` for the caller to pass through.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_GENERATOR_URL,
        http_client: httpx.AsyncClient | None = None,
        width: int = DEFAULT_IMAGE_WIDTH,
        height: int = DEFAULT_IMAGE_HEIGHT,
        timeout: float = 60.0,
    ) -> None:
        self._url = base_url.rstrip("/")
        self._http_client = http_client
        self._owns_client = http_client is None
        self._width = width
        self._height = height
        self._timeout = timeout

    def _get_async_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def generate(self, prompt: str) -> GenerationResult:
        client = self._get_async_client()
        body = {"prompt": prompt, "width": self._width, "height": self._height}
        try:
            response = await client.post(
                f"{self._url}{GENERATE_PATH}", json=body, timeout=self._timeout
            )
        except httpx.HTTPError as exc:
            logger.warning("image generation request failed: %r", exc)
            return GenerationFailure(REJECTED, f"Image generator unreachable: {exc!r}")

        if response.status_code == 402:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            logger.info("image generator requires its own payment")
            return GeneratorPaymentRequired(payload if isinstance(payload, dict) else {"details": payload})

        if not response.is_success:
            logger.warning("image generator rejected request status=%s", response.status_code)
            return GenerationFailure(
                REJECTED,
                f"Image generator returned {response.status_code}",
                status=response.status_code,
            )

        media_type = _media_type(response)
        if media_type.startswith("image/"):
            return GeneratedArtifact(response.content, media_type)

        try:
            payload = response.json()
        except ValueError:
            return GenerationFailure(REJECTED, "Image generator returned neither an image nor JSON")
        if not isinstance(payload, dict):
            return GenerationFailure(REJECTED, "Image generator returned an unexpected payload")

        for key in INLINE_KEYS:
            value = payload.get(key)
            if isinstance(value, str) and value:
                try:
                    content, inline_type = _decode_inline(value)
                except (binascii.Error, ValueError):
                    return GenerationFailure(REJECTED, f"Image generator returned undecodable {key}")
                return GeneratedArtifact(content, inline_type)

        url = next((payload[k] for k in URL_KEYS if isinstance(payload.get(k), str) and payload[k]), None)
        if url is None:
            return GenerationFailure(REJECTED, "Image generator response did not include an image")
        return await self._fetch(url)

    async def _fetch(self, url: str) -> GenerationResult:
        client = self._get_async_client()
        try:
            response = await client.get(url, timeout=self._timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("artifact fetch failed url=%s: %r", url, exc)
            return GenerationFailure(FETCH_FAILED, f"Could not retrieve generated image: {exc!r}")
        if not response.is_success:
            logger.warning("artifact fetch failed url=%s status=%s", url, response.status_code)
            return GenerationFailure(
                FETCH_FAILED,
                f"Generated image fetch returned {response.status_code}",
                status=response.status_code,
            )
        return GeneratedArtifact(response.content, _media_type(response) or DEFAULT_MEDIA_TYPE)
