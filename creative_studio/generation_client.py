from __future__ import annotations

"""
The generation backend as seen by the orchestrator, plus the Gemini adapter.

The orchestrator only depends on the CreativeGenerationClient protocol; tests
pass a fake and the CLI passes a GeminiGenerationClient.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol

import httpx
from google import genai
from google.genai import types

from .errors import ErrorKind, GenerationError, classify_exception
from .models import ImageAsset, MediaPayload
from .prompting import ImageBrief, VideoBrief
from .utils import resize_image

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_VIDEO_MODEL = "veo-2.0-generate-001"

# Aspect ratios the image model accepts in image_config. Anything else is
# described in the prompt only.
SUPPORTED_IMAGE_ASPECT_RATIOS = {
    "1:1", "2:3", "3:2", "3:4", "4:3", "4:5", "5:4", "9:16", "16:9", "21:9",
}


@dataclass(frozen=True)
class OperationHandle:
    """Reference to a long-running video generation operation."""

    name: str
    done: bool = False

    # Download reference of the finished video, when done and successful.
    result_reference: Optional[str] = None

    error: Optional[str] = None

    # SDK object needed to poll the operation again.
    raw: Any = field(default=None, repr=False, compare=False)


class CreativeGenerationClient(Protocol):
    async def generate_image(self, brief: ImageBrief) -> MediaPayload:
        ...

    async def start_video(self, brief: VideoBrief) -> OperationHandle:
        ...

    async def poll_video(self, handle: OperationHandle) -> OperationHandle:
        ...

    async def fetch_video_bytes(self, result_reference: str) -> MediaPayload:
        ...


# ---------------------------------------------------------------------------
# Gemini adapter
# ---------------------------------------------------------------------------


def resolve_api_key(api_key: Optional[str] = None) -> str:
    """Return the explicit key or read GEMINI_API_KEY / GOOGLE_API_KEY."""
    key = api_key or os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
    if not key:
        raise RuntimeError(
            "GEMINI_API_KEY or GOOGLE_API_KEY must be set in the environment "
            "for creative generation."
        )
    return key


def asset_to_part(asset: ImageAsset) -> types.Part:
    """Downscale an uploaded asset and wrap it as an inline request part."""
    prepared = resize_image(asset)
    return types.Part.from_bytes(data=prepared.data, mime_type=prepared.mime_type)


def extract_inline_image(response: Any) -> MediaPayload:
    """Return the first inline image of a generate_content response."""
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        if not content:
            continue
        for part in getattr(content, "parts", None) or []:
            inline_data = getattr(part, "inline_data", None)
            mime_type = getattr(inline_data, "mime_type", "") or ""
            if inline_data and mime_type.startswith("image/"):
                data = getattr(inline_data, "data", None)
                if data:
                    return MediaPayload(data=data, mime_type=mime_type)

    feedback = getattr(response, "prompt_feedback", None)
    block_reason = getattr(feedback, "block_reason", None)
    if block_reason:
        raise GenerationError(
            f"The request was blocked by the content policy ({block_reason}).",
            ErrorKind.CONTENT_POLICY,
        )
    raise GenerationError("The AI did not return an image.", ErrorKind.MISSING_RESULT)


def handle_from_operation(operation: Any) -> OperationHandle:
    """Translate a google-genai video operation into an OperationHandle."""
    done = bool(getattr(operation, "done", False))
    error = getattr(operation, "error", None)
    result_reference = None

    if done and not error:
        response = getattr(operation, "response", None) or getattr(operation, "result", None)
        videos = getattr(response, "generated_videos", None) or []
        if videos:
            video = getattr(videos[0], "video", None)
            result_reference = getattr(video, "uri", None)

    return OperationHandle(
        name=getattr(operation, "name", None) or "",
        done=done,
        result_reference=result_reference,
        error=str(error) if error else None,
        raw=operation,
    )


def _raise_if_failed(handle: OperationHandle) -> OperationHandle:
    if handle.error:
        raise GenerationError(
            f"Video generation failed: {handle.error}",
            classify_exception(RuntimeError(handle.error)).kind,
        )
    return handle


class GeminiGenerationClient:
    """
    CreativeGenerationClient backed by the Google Gen AI SDK.

    Images use generate_content with an image response modality, videos use
    generate_videos and the operations API, and finished videos are
    downloaded over HTTPS with httpx.
    """

    def __init__(
            self,
            api_key: Optional[str] = None,
            *,
            image_model: Optional[str] = None,
            video_model: Optional[str] = None,
            client: Optional[genai.Client] = None,
            http_timeout: float = 120.0,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = resolve_api_key(api_key)
        self._client = client or genai.Client(api_key=self._api_key)
        self.image_model = image_model or os.environ.get("GEMINI_IMAGE_MODEL", DEFAULT_IMAGE_MODEL)
        self.video_model = video_model or os.environ.get("GEMINI_VIDEO_MODEL", DEFAULT_VIDEO_MODEL)
        self._http_timeout = http_timeout
        self._transport = transport

        # Do not log the key or prompt, only that the client has been constructed.
        logging.info(
            "Initialized Gemini generation client (image=%s, video=%s).",
            self.image_model,
            self.video_model,
        )

    async def generate_image(self, brief: ImageBrief) -> MediaPayload:
        contents: List[Any] = [asset_to_part(brief.product_photo), asset_to_part(brief.logo)]
        if brief.mascot is not None:
            contents.append(asset_to_part(brief.mascot))
        contents.append(brief.prompt)

        config_kwargs: dict = {"response_modalities": ["IMAGE", "TEXT"]}
        if brief.platform.aspect_ratio in SUPPORTED_IMAGE_ASPECT_RATIOS:
            config_kwargs["image_config"] = types.ImageConfig(aspect_ratio=brief.platform.aspect_ratio)

        logging.info(
            "Calling image model %s for %s (%s)",
            self.image_model,
            brief.platform.name,
            brief.variation.value if brief.variation else "single",
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self.image_model,
                contents=contents,
                config=types.GenerateContentConfig(**config_kwargs),
            )
        except Exception as exc:
            raise classify_exception(exc) from exc

        return extract_inline_image(response)

    async def start_video(self, brief: VideoBrief) -> OperationHandle:
        photo = resize_image(brief.product_photo)
        logging.info("Starting video model %s for %s", self.video_model, brief.platform.name)
        try:
            operation = await self._client.aio.models.generate_videos(
                model=self.video_model,
                prompt=brief.prompt,
                image=types.Image(image_bytes=photo.data, mime_type=photo.mime_type),
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    aspect_ratio=brief.aspect_ratio,
                ),
            )
        except Exception as exc:
            raise classify_exception(exc) from exc
        return _raise_if_failed(handle_from_operation(operation))

    async def poll_video(self, handle: OperationHandle) -> OperationHandle:
        if handle.raw is None:
            raise GenerationError(
                f"Operation {handle.name or '<unnamed>'} cannot be polled.",
                ErrorKind.INVALID_INPUT,
            )
        try:
            operation = await self._client.aio.operations.get(handle.raw)
        except Exception as exc:
            raise classify_exception(exc) from exc

        return _raise_if_failed(handle_from_operation(operation))

    async def fetch_video_bytes(self, result_reference: str) -> MediaPayload:
        headers = {"x-goog-api-key": self._api_key}
        try:
            async with httpx.AsyncClient(
                timeout=self._http_timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as http:
                response = await http.get(result_reference, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GenerationError(
                f"Failed to fetch video: {exc.response.reason_phrase}",
                classify_exception(exc).kind,
            ) from exc
        except httpx.HTTPError as exc:
            raise classify_exception(exc) from exc

        mime_type = response.headers.get("content-type", "video/mp4").split(";")[0]
        if not mime_type.startswith("video/"):
            mime_type = "video/mp4"
        return MediaPayload(data=response.content, mime_type=mime_type)
