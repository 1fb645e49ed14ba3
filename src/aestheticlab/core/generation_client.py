"""Image generation client boundary.

The external provider is a black box: one prompt in, one image out.  This
module wraps it with the batch semantics the lab relies on.

- :class:`ImageProvider` is the per-prompt protocol every provider satisfies.
- :class:`GeminiImageProvider` talks to the Gemini image API through the
  async google-genai client.
- :class:`GenerationClient` fans a batch out as concurrent requests, waits
  for every one of them to settle, and returns payloads in prompt order.

Batch Policy
------------
If any single request fails, the whole batch fails with one
:class:`GenerationFailure`.  There is no retry, no partial result and no
per-item error reporting.  A failed batch needs an explicit re-submission.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from google import genai
from google.genai import types

from .config import AestheticLabConfig

logger = logging.getLogger(__name__)


class GenerationFailure(Exception):
    """Raised when a batch cannot be completed.

    The message is safe to log; the user-facing message is chosen by the
    session layer.
    """

    pass


@dataclass(frozen=True)
class ImagePayload:
    """Raw image bytes returned by a provider."""

    data: bytes
    mime_type: str = "image/jpeg"

    def to_data_uri(self) -> str:
        """Encode the payload as a displayable ``data:`` URI."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


def decode_data_uri(uri: str) -> ImagePayload:
    """Decode a ``data:<mime>;base64,<payload>`` URI back into bytes.

    Raises:
        ValueError: If *uri* is not a base64 data URI.
    """
    if not uri.startswith("data:") or "," not in uri:
        raise ValueError("Not a data URI")

    header, encoded = uri[len("data:") :].split(",", 1)
    mime_type, _, encoding = header.partition(";")
    if encoding != "base64":
        raise ValueError(f"Unsupported data URI encoding: {encoding or 'none'}")

    try:
        data = base64.b64decode(encoded, validate=True)
    except (ValueError, binascii.Error) as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e

    return ImagePayload(data=data, mime_type=mime_type or "application/octet-stream")


class ImageProvider(Protocol):
    """A single-prompt image generator."""

    async def generate_image(self, prompt: str) -> ImagePayload:
        """Return one image for *prompt* or raise."""
        ...


def _coerce_bytes(blob) -> bytes | None:
    if isinstance(blob, (bytes, bytearray)):
        return bytes(blob)
    if isinstance(blob, str):
        try:
            return base64.b64decode(blob)
        except (ValueError, binascii.Error):
            return None
    return None


class GeminiImageProvider:
    """Image provider backed by the Gemini image API.

    The google-genai client is created lazily on the first request so the
    application can start without credentials; a missing key then surfaces as
    a failed batch rather than a start-up crash.

    Args:
        config: Lab configuration holding the API key, model and output
            format settings.
        client: Optional pre-built ``genai.Client`` (used by tests).
    """

    def __init__(self, config: AestheticLabConfig, client: genai.Client | None = None):
        self.model = config.imagen_model
        self.output_mime_type = config.output_mime_type
        self.aspect_ratio = config.aspect_ratio
        self.timeout = config.request_timeout
        self._api_key = config.gemini_api_key
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if self._api_key:
                self._client = genai.Client(api_key=self._api_key)
            else:
                self._client = genai.Client()
            logger.info(f"Initialized google-genai client for model {self.model}")
        return self._client

    async def generate_image(self, prompt: str) -> ImagePayload:
        """Request exactly one image for *prompt*.

        Raises:
            GenerationFailure: If the client cannot be created, the call fails
                or times out, or the response carries no image bytes.
        """
        try:
            client = self._get_client()
        except Exception as e:
            raise GenerationFailure(f"Could not create image client: {e}") from e

        generate_config = types.GenerateImagesConfig(
            number_of_images=1,
            output_mime_type=self.output_mime_type,
            aspect_ratio=self.aspect_ratio,
        )

        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_images(
                    model=self.model,
                    prompt=prompt,
                    config=generate_config,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise GenerationFailure(f"Image request timed out after {self.timeout}s") from e
        except Exception as e:
            raise GenerationFailure(f"Image request failed: {e}") from e

        generated = getattr(response, "generated_images", None) or []
        if not generated:
            raise GenerationFailure("Provider returned no images")

        image = getattr(generated[0], "image", None)
        blob = _coerce_bytes(getattr(image, "image_bytes", None)) if image is not None else None
        if not blob:
            raise GenerationFailure("Provider returned an image without data")

        mime_type = getattr(image, "mime_type", None) or self.output_mime_type
        return ImagePayload(data=blob, mime_type=mime_type)


class GenerationClient:
    """Dispatch a batch of prompts to an :class:`ImageProvider`.

    Args:
        provider: The per-prompt provider to fan out to.
    """

    def __init__(self, provider: ImageProvider):
        self.provider = provider

    async def generate(
        self,
        prompts: Sequence[str],
        temperature: float,
        seed: int | None = None,
    ) -> list[ImagePayload]:
        """Generate one image per prompt, all-or-nothing.

        Every prompt is sent concurrently.  The call returns only after all
        requests have settled, with payload ``i`` belonging to prompt ``i``.

        Args:
            prompts: Expanded prompts, in variation order.
            temperature: Recorded by the caller; not sent to the provider.
            seed: Recorded by the caller; not sent to the provider.

        Returns:
            Payloads in prompt order.

        Raises:
            GenerationFailure: If any single request failed.
        """
        logger.debug(
            f"Dispatching {len(prompts)} prompts "
            f"(temperature={temperature}, seed={seed} recorded only)"
        )

        results = await asyncio.gather(
            *(self.provider.generate_image(prompt) for prompt in prompts),
            return_exceptions=True,
        )

        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            first = failures[0]
            raise GenerationFailure(
                f"{len(failures)} of {len(prompts)} requests failed: {first}"
            ) from first

        return list(results)
