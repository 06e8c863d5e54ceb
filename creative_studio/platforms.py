"""Static catalogue of target platforms and form choices."""

from __future__ import annotations

from typing import Dict, List, Optional

from .models import Platform

PLATFORMS: List[Platform] = [
    Platform(name="X (formerly Twitter)", dimensions="1200x675", aspect_ratio="16:9"),
    Platform(name="Instagram Story", dimensions="1080x1920", aspect_ratio="9:16"),
    Platform(name="TikTok Poster", dimensions="1080x1920", aspect_ratio="9:16"),
    Platform(
        name="Promotional Video",
        dimensions="10-15 seconds",
        aspect_ratio="16:9",
        is_video=True,
    ),
    Platform(name="LinkedIn Banner", dimensions="1584x396", aspect_ratio="4:1"),
    Platform(name="Billboard/OOH", dimensions="6000x3000", aspect_ratio="2:1"),
]

# First two platforms are preselected for a new campaign.
DEFAULT_PLATFORMS: List[Platform] = PLATFORMS[:2]

PRESETS: List[str] = [
    "Urban Gen Z",
    "Minimal Luxe",
    "Afro-Futurist",
    "Retro Pop",
    "Custom",
]

FONT_STYLES: Dict[str, str] = {
    "Modern Sans-Serif": "Clean, geometric, and minimalist.",
    "Elegant Serif": "Classic, sophisticated, and high-contrast.",
    "Bold Display": "Heavy, impactful, and attention-grabbing.",
    "Playful Script": "Casual, handwritten, and friendly.",
    "Tech Grotesk": "Futuristic, digital, and slightly quirky.",
    "Retro Slab": "Vintage, blocky, and confident.",
}

VIDEO_ASPECT_RATIOS: Dict[str, str] = {
    "Landscape": "16:9",
    "Portrait": "9:16",
    "Square": "1:1",
}


def find_platform(name: str) -> Optional[Platform]:
    """Case-insensitive lookup of a catalogue platform by name."""
    wanted = name.strip().lower()
    for platform in PLATFORMS:
        if platform.name.lower() == wanted:
            return platform
    return None


def get_platform(name: str) -> Platform:
    platform = find_platform(name)
    if platform is None:
        known = ", ".join(p.name for p in PLATFORMS)
        raise KeyError(f"Unknown platform '{name}'. Known platforms: {known}.")
    return platform
