from __future__ import annotations

"""
Helpers for loading a campaign brief from YAML or JSON into a CampaignConfig.

Expected shape:

    brand:
      name: Acme
      logo_path: assets/logo.png
      mascot_path: assets/mascot.png      # optional
      color_palette: Vibrant orange, sleek black, and clean white
      font_style: Modern Sans-Serif
      tone: Playful
    campaign:
      product_description: Cold brew in a can
      product_photo_path: assets/can.png
      preset: Minimal Luxe                 # or Custom + custom_preset
      platforms: [X (formerly Twitter), Promotional Video]
      tagline: Stay cool
      ab_test: true
      ...

Relative asset paths are resolved against the directory of the brief file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .models import BrandAssets, CampaignConfig, CampaignDetails, ImageAsset, Platform
from .platforms import DEFAULT_PLATFORMS, get_platform


def _load_asset(base_dir: Path, value: Optional[str]) -> Optional[ImageAsset]:
    if not value:
        return None
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    asset = ImageAsset.from_path(path)
    logging.info("Loaded image asset %s (%d bytes)", path, len(asset.data))
    return asset


def _text(data: Dict[str, Any], key: str, default: str = "") -> str:
    value = data.get(key)
    return default if value is None else str(value)


_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


def _flag(data: Dict[str, Any], key: str, default: bool = False) -> bool:
    """
    Read a yes/no field. Real booleans pass through; quoted words such as
    "false" or "yes" are parsed instead of being truthy strings.
    """
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f"'{key}' must be true or false, got {value!r}.")


def _parse_platforms(raw: Any) -> List[Platform]:
    if raw is None:
        return list(DEFAULT_PLATFORMS)
    if not isinstance(raw, list):
        raise ValueError("campaign.platforms must be a list of platform names.")

    platforms: List[Platform] = []
    for entry in raw:
        if isinstance(entry, dict):
            # Inline platform definition, for targets missing from the catalogue.
            name = entry.get("name")
            if not name:
                raise ValueError("Each inline platform must have a 'name' field.")
            platforms.append(
                Platform(
                    name=str(name),
                    dimensions=_text(entry, "dimensions"),
                    aspect_ratio=_text(entry, "aspect_ratio", "1:1"),
                    is_video=_flag(entry, "is_video"),
                )
            )
        else:
            try:
                platforms.append(get_platform(str(entry)))
            except KeyError as exc:
                raise ValueError(str(exc.args[0])) from exc
    return platforms


def parse_campaign(raw: Dict[str, Any], base_dir: Union[str, Path] = ".") -> CampaignConfig:
    """Build a CampaignConfig from an already-parsed brief document."""
    base_dir = Path(base_dir)
    if not isinstance(raw, dict):
        raise ValueError("Brief must be a mapping with 'brand' and 'campaign' sections.")

    brand_data = raw.get("brand") or {}
    campaign_data = raw.get("campaign") or {}

    brand = BrandAssets(
        brand_name=_text(brand_data, "name"),
        logo=_load_asset(base_dir, brand_data.get("logo_path")),
        mascot=_load_asset(base_dir, brand_data.get("mascot_path")),
        color_palette=_text(
            brand_data, "color_palette", "Vibrant orange, sleek black, and clean white"
        ),
        font_style=_text(brand_data, "font_style", "Modern Sans-Serif"),
        tone=_text(brand_data, "tone"),
    )

    details = CampaignDetails(
        product_description=_text(campaign_data, "product_description"),
        product_photo=_load_asset(base_dir, campaign_data.get("product_photo_path")),
        preset=_text(campaign_data, "preset", "Minimal Luxe"),
        custom_preset=_text(campaign_data, "custom_preset"),
        platforms=tuple(_parse_platforms(campaign_data.get("platforms"))),
        tagline=_text(campaign_data, "tagline"),
        cta_button=_text(campaign_data, "cta_button"),
        seasonal_overlay=_text(campaign_data, "seasonal_overlay"),
        generate_ab_test=_flag(campaign_data, "ab_test"),
        logo_placement=_text(campaign_data, "logo_placement"),
        tagline_placement=_text(campaign_data, "tagline_placement"),
        mascot_placement=_text(campaign_data, "mascot_placement"),
        video_prompt=_text(campaign_data, "video_prompt"),
        video_aspect_ratio=_text(campaign_data, "video_aspect_ratio", "16:9"),
    )
    return CampaignConfig(brand_assets=brand, campaign_details=details)


def load_campaign(path: Union[str, Path]) -> CampaignConfig:
    """
    Load a campaign brief from a YAML or JSON file.

    Parameters
    ----------
    path:
        Filesystem path to the brief document (.yml, .yaml or .json).

    Returns
    -------
    CampaignConfig
        Snapshot ready to seed an editing session or a generation run.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Brief file not found: {path}")

    # Support both YAML and JSON so the caller can choose their preferred format.
    with path.open("r", encoding="utf-8") as f:
        if path.suffix.lower() in {".yml", ".yaml"}:
            raw = yaml.safe_load(f)
        else:
            raw = json.load(f)

    return parse_campaign(raw or {}, base_dir=path.parent)
