# brand_assistant.py
from __future__ import annotations

import json
import logging
import os
from typing import Any, List, Optional

from google import genai
from google.genai import types

from .errors import GenerationError, ValidationError, classify_exception
from .generation_client import asset_to_part, extract_inline_image, resolve_api_key
from .models import ImageAsset

DEFAULT_TEXT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_EDIT_MODEL = "gemini-2.5-flash-image"
DEFAULT_IMAGEN_MODEL = "imagen-4.0-generate-001"

# Suggestions are always cut down to this many entries.
MAX_SUGGESTIONS = 3


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

REMOVE_BACKGROUND_PROMPT = (
    "Expertly remove the background from this image, leaving only the main subject. "
    "The new background should be transparent. Output only the final image."
)


def _stylize_prompt(color_palette: str) -> str:
    return (
        "Take the primary product from the first image and place it on a new, clean, "
        f"abstract background inspired by the color palette: \"{color_palette}\". "
        "Tastefully integrate the logo from the second image into the scene. The product "
        "should be the main focus and remain crisp and clear. The final image should look "
        "like a professional product advertisement shot. Output only the final image."
    )


def _suggestions_schema(item_type: str, item_description: str) -> types.Schema:
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "suggestions": types.Schema(
                type=types.Type.ARRAY,
                items=types.Schema(type=types.Type.STRING, description=item_description),
                description=f"An array of three {item_type} suggestions.",
            )
        },
        required=["suggestions"],
    )


def parse_suggestions(raw: str) -> List[str]:
    """
    Pull the "suggestions" list out of a JSON model response.

    Returns an empty list (and logs a warning) when the payload is not the
    expected shape instead of failing the whole request.
    """
    raw = (raw or "").strip()
    if not raw:
        logging.warning("Suggestion request returned an empty response.")
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logging.warning("Could not parse suggestions from Gemini response: %s", exc)
        logging.debug("Raw suggestion response text (truncated): %s", raw[:500])
        return []

    suggestions = data.get("suggestions") if isinstance(data, dict) else None
    if not isinstance(suggestions, list):
        logging.warning("Gemini response did not include a suggestions list.")
        return []
    return [str(s).strip() for s in suggestions if str(s).strip()][:MAX_SUGGESTIONS]


# ---------------------------------------------------------------------------
# Assistant
# ---------------------------------------------------------------------------


class BrandAssistant:
    """
    Helpers that support filling in a campaign rather than generating it.

    Each helper wraps a single Gemini call. Failures are raised as
    GenerationError with a message that can be shown to the user as-is.
    """

    def __init__(
            self,
            api_key: Optional[str] = None,
            *,
            client: Optional[genai.Client] = None,
            text_model: Optional[str] = None,
            image_model: Optional[str] = None,
            imagen_model: Optional[str] = None,
    ) -> None:
        if client is None:
            client = genai.Client(api_key=resolve_api_key(api_key))
        self._client = client
        self.text_model = text_model or os.environ.get("GEMINI_TEXT_MODEL", DEFAULT_TEXT_MODEL)
        self.image_model = image_model or os.environ.get("GEMINI_IMAGE_MODEL", DEFAULT_IMAGE_EDIT_MODEL)
        self.imagen_model = imagen_model or os.environ.get("IMAGEN_MODEL", DEFAULT_IMAGEN_MODEL)

    # -- image edits --------------------------------------------------------

    async def _edit_image(self, contents: List[Any], failure_message: str) -> ImageAsset:
        try:
            response = await self._client.aio.models.generate_content(
                model=self.image_model,
                contents=contents,
                config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
            )
            payload = extract_inline_image(response)
        except Exception as exc:
            error = classify_exception(exc)
            logging.error("%s (%s): %s", failure_message, error.kind.value, error)
            raise GenerationError(failure_message, error.kind) from exc
        return ImageAsset(data=payload.data, mime_type=payload.mime_type, name="edited.png")

    async def remove_background(self, image: ImageAsset) -> ImageAsset:
        logging.info("Removing background from %s", image.name)
        asset = await self._edit_image(
            [asset_to_part(image), REMOVE_BACKGROUND_PROMPT],
            "Failed to remove background. The AI may not have been able to process this image.",
        )
        return ImageAsset(data=asset.data, mime_type=asset.mime_type, name="product_photo_no_bg.png")

    async def stylize_product_photo(
            self,
            product_photo: ImageAsset,
            logo: ImageAsset,
            color_palette: str,
    ) -> ImageAsset:
        logging.info("Stylizing product photo %s with logo %s", product_photo.name, logo.name)
        asset = await self._edit_image(
            [asset_to_part(product_photo), asset_to_part(logo), _stylize_prompt(color_palette)],
            "Failed to stylize product image. The AI may not have been able to process this request.",
        )
        return ImageAsset(data=asset.data, mime_type=asset.mime_type, name="product_photo_stylized.png")

    # -- image suggestions --------------------------------------------------

    async def _generate_images(self, prompt: str, failure_message: str) -> List[ImageAsset]:
        try:
            response = await self._client.aio.models.generate_images(
                model=self.imagen_model,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=4,
                    output_mime_type="image/png",
                    aspect_ratio="1:1",
                ),
            )
        except Exception as exc:
            error = classify_exception(exc)
            logging.error("%s (%s): %s", failure_message, error.kind.value, error)
            raise GenerationError(failure_message, error.kind) from exc

        assets: List[ImageAsset] = []
        for idx, generated in enumerate(getattr(response, "generated_images", None) or []):
            image = getattr(generated, "image", None)
            data = getattr(image, "image_bytes", None)
            if data:
                assets.append(ImageAsset(data=data, mime_type="image/png", name=f"option_{idx + 1}.png"))
        return assets

    async def generate_logo_variations(self, brand_name: str) -> List[ImageAsset]:
        if not brand_name.strip():
            return []
        prompt = (
            f"A modern, clean, minimalist logo for a brand named \"{brand_name}\", "
            "on a transparent background."
        )
        return await self._generate_images(
            prompt,
            "Failed to generate logo variations. Please check your API key and network connection.",
        )

    async def generate_mascot_suggestions(
            self,
            brand_name: str,
            product_description: str,
            tone: str,
    ) -> List[ImageAsset]:
        required = {
            "brand_name": brand_name,
            "product_description": product_description,
            "tone": tone,
        }
        for key, value in required.items():
            if not value or not value.strip():
                raise ValidationError(f"Cannot generate mascot suggestions without: {key}")

        prompt = (
            f"A friendly, modern mascot for a brand named \"{brand_name}\". The brand's tone "
            f"is \"{tone}\" and they sell \"{product_description}\". The mascot should be a "
            "unique character, not a logo. Generate 4 distinct options on a transparent background."
        )
        return await self._generate_images(
            prompt, "Failed to generate mascot suggestions. Please try again."
        )

    # -- text suggestions ---------------------------------------------------

    async def _suggest(self, prompt: str, schema: types.Schema, failure_message: str) -> List[str]:
        try:
            response = await self._client.aio.models.generate_content(
                model=self.text_model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=schema,
                ),
            )
        except Exception as exc:
            error = classify_exception(exc)
            logging.error("%s (%s): %s", failure_message, error.kind.value, error)
            raise GenerationError(failure_message, error.kind) from exc
        return parse_suggestions(getattr(response, "text", "") or "")

    async def suggest_campaign_prompts(self, brand_name: str, tone: str) -> List[str]:
        if not brand_name.strip() or not tone.strip():
            raise ValidationError("Brand Name and Tone are required to suggest campaign prompts.")
        prompt = (
            f"Based on a brand named \"{brand_name}\" with a \"{tone}\" tone, generate 3 creative "
            "and distinct campaign concepts. Each concept should be a short, engaging description "
            "(1-2 sentences) suitable for a marketing campaign prompt. Focus on the core message "
            "or angle."
        )
        return await self._suggest(
            prompt,
            _suggestions_schema("campaign prompt", "A creative campaign prompt suggestion."),
            "Failed to generate campaign prompt suggestions.",
        )

    async def suggest_taglines(self, product_description: str) -> List[str]:
        if not product_description.strip():
            return []
        prompt = (
            f"Based on the product description \"{product_description}\", generate 3 creative "
            "and distinct taglines for an ad campaign. The taglines should be short, catchy, "
            "and memorable."
        )
        return await self._suggest(
            prompt,
            _suggestions_schema("tagline", "A catchy tagline suggestion."),
            "Failed to generate tagline suggestions.",
        )
