from __future__ import annotations

"""
Natural-language creative briefs sent to the image and video models.

The brief is assembled from the campaign configuration only. Binary assets
travel alongside the text so the generation client can attach them as
inline parts.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .models import CampaignConfig, ImageAsset, Platform, Variation


@dataclass(frozen=True)
class ImageBrief:
    platform: Platform
    prompt: str
    product_photo: ImageAsset = field(repr=False)
    logo: ImageAsset = field(repr=False)
    mascot: Optional[ImageAsset] = field(default=None, repr=False)
    variation: Optional[Variation] = None


@dataclass(frozen=True)
class VideoBrief:
    platform: Platform
    prompt: str
    product_photo: ImageAsset = field(repr=False)
    aspect_ratio: str = "16:9"


VARIATION_B_INSTRUCTION = (
    "- **A/B Test Instruction:** This is 'Variation B'. Create a distinctly "
    "different version from the primary creative. Experiment with a different "
    "layout, background style, color emphasis, or call-to-action placement. Be "
    "bold and creative to provide a clear alternative for testing.\n"
)


def build_image_prompt(
        config: CampaignConfig,
        platform: Platform,
        variation: Optional[Variation] = None,
) -> str:
    """Compose the text half of an image creative request."""
    brand = config.brand_assets
    details = config.campaign_details
    has_mascot = brand.mascot is not None

    mascot_text = " Also, creatively include the brand mascot." if has_mascot else ""

    lines: List[str] = [
        f"Create a visually stunning ad creative for {platform.name} ({platform.dimensions}).",
        f"- **Brand:** {brand.brand_name}",
        f"- **Product:** {details.product_description}",
        "- **Key Visuals:** Use the provided product photo as the main focus. "
        f"Integrate the provided logo tastefully.{mascot_text}",
        f"- **Tagline:** \"{details.tagline}\"",
        "- **Color Palette:** The primary colors should be inspired by this "
        f"palette description: {brand.color_palette}.",
        f"- **Font Style:** Use a {brand.font_style} font for the text.",
        f"- **Tone & Style:** The overall feel should be {brand.tone}. "
        f"The aesthetic should align with the '{details.visual_style}' preset.",
        f"- **Seasonal Element (if any):** {details.seasonal_overlay or 'None'}",
    ]

    if details.cta_button:
        lines.append(
            "- **Call-to-Action:** Creatively incorporate a call-to-action button "
            f"or text with the message: \"{details.cta_button}\"."
        )
    if details.logo_placement:
        lines.append(f"- **Logo Placement:** {details.logo_placement}.")
    if details.tagline_placement:
        lines.append(f"- **Tagline Placement:** {details.tagline_placement}.")
    if has_mascot and details.mascot_placement:
        lines.append(f"- **Mascot Placement:** {details.mascot_placement}.")

    prompt = "\n".join(lines) + "\n"
    if variation is Variation.B:
        prompt += VARIATION_B_INSTRUCTION

    prompt += (
        "- **Composition:** Ensure all elements are well-balanced for the "
        f"{platform.aspect_ratio} aspect ratio. The final image should be clean, "
        "professional, and eye-catching. Do not include any placeholder text like "
        "\"Your text here\". The output must be just the final image."
    )
    return prompt


def build_video_prompt(config: CampaignConfig) -> str:
    """Return the user's own video prompt, or a composed default one."""
    brand = config.brand_assets
    details = config.campaign_details

    custom = details.video_prompt.strip()
    if custom:
        return custom

    prompt = (
        f"Create a short, 10-15 second promotional video for a {brand.brand_name} product.\n"
        f"- **Product:** {details.product_description}. The provided image is the star.\n"
        f"- **Aspect Ratio:** {details.video_aspect_ratio or '16:9'}.\n"
        f"- **Tone:** {brand.tone}.\n"
        f"- **Style:** The aesthetic should be '{details.visual_style}'. Use motion "
        f"graphics inspired by the brand colors: \"{brand.color_palette}\".\n"
        f"- **Tagline:** Feature the tagline \"{details.tagline}\" as animated text "
        f"using a {brand.font_style} style font.\n"
        "- **Pacing:** The video should be dynamic and engaging, suitable for social media.\n"
    )
    if details.cta_button:
        prompt += (
            "- **Call-to-Action:** The video must conclude with a clear call-to-action "
            f"featuring the text: \"{details.cta_button}\".\n"
        )
    return prompt


def build_image_brief(
        config: CampaignConfig,
        platform: Platform,
        variation: Optional[Variation] = None,
) -> ImageBrief:
    brand = config.brand_assets
    details = config.campaign_details
    if brand.logo is None or details.product_photo is None:
        raise ValueError("Logo and product photo are required to generate creatives.")

    return ImageBrief(
        platform=platform,
        prompt=build_image_prompt(config, platform, variation),
        product_photo=details.product_photo,
        logo=brand.logo,
        mascot=brand.mascot,
        variation=variation,
    )


def build_video_brief(config: CampaignConfig, platform: Platform) -> VideoBrief:
    details = config.campaign_details
    if details.product_photo is None:
        raise ValueError("A product photo is required to generate a video.")

    return VideoBrief(
        platform=platform,
        prompt=build_video_prompt(config),
        product_photo=details.product_photo,
        aspect_ratio=details.video_aspect_ratio or "16:9",
    )
