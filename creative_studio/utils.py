from __future__ import annotations

import logging
import time
from io import BytesIO
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from PIL import Image

from .models import Creative, ImageAsset, ImageCreative, Variation, VideoCreative

# Images sent to the API are capped at this size to keep payloads small.
MAX_IMAGE_DIMENSION = 1024


# ---------------------------------------------------------------------------
# General helpers
# ---------------------------------------------------------------------------


def slugify(text: str) -> str:
    """
    Convert an arbitrary string into a simple filesystem and id friendly slug.

    - Lowercases the input.
    - Keeps only alphanumeric characters and simple separators.
    - Collapses whitespace and punctuation into hyphens.
    - Returns "item" if everything is stripped away.
    """
    text = text.strip().lower()
    out_chars = []
    for ch in text:
        if ch.isalnum():
            out_chars.append(ch)
        elif ch in (" ", "-", "_", "/"):
            out_chars.append("-")
    result = "".join(out_chars).strip("-")
    while "--" in result:
        result = result.replace("--", "-")
    return result or "item"


def unique_slugs(names: Iterable[str]) -> Dict[str, str]:
    """
    Map each distinct name to a slug that no other name in the batch shares.

    Names that slugify alike ("Billboard/OOH", "Billboard OOH") keep the plain
    slug for the first one and get a numeric suffix after that.
    """
    slugs: Dict[str, str] = {}
    taken = set()
    for name in names:
        if name in slugs:
            continue
        base = slugify(name)
        slug = base
        counter = 2
        while slug in taken:
            slug = f"{base}-{counter}"
            counter += 1
        taken.add(slug)
        slugs[name] = slug
    return slugs


def make_creative_id(
        platform_name: str,
        variation: Optional[Variation] = None,
        now_ms: Optional[int] = None,
        slug: Optional[str] = None,
) -> str:
    """Build a creative id from platform slug, variation and creation time."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    tag = variation.value if variation is not None else "A"
    return f"{slug or slugify(platform_name)}-{tag}-{now_ms}"


# ---------------------------------------------------------------------------
# Image preparation
# ---------------------------------------------------------------------------


def _fit_within(size: Tuple[int, int], max_width: int, max_height: int) -> Tuple[int, int]:
    width, height = size
    if width > height:
        if width > max_width:
            height = round(height * max_width / width)
            width = max_width
    elif height > max_height:
        width = round(width * max_height / height)
        height = max_height
    return max(1, width), max(1, height)


def resize_image(
        asset: ImageAsset,
        max_width: int = MAX_IMAGE_DIMENSION,
        max_height: int = MAX_IMAGE_DIMENSION,
) -> ImageAsset:
    """
    Downscale an image asset to fit within max_width x max_height, keeping
    its aspect ratio, and re-encode it as PNG to preserve transparency.

    Assets that already fit are re-encoded but not resized.
    """
    with Image.open(BytesIO(asset.data)) as img:
        target = _fit_within(img.size, max_width, max_height)
        if target != img.size:
            logging.debug(
                "Resizing %s from %sx%s to %sx%s",
                asset.name,
                img.width,
                img.height,
                target[0],
                target[1],
            )
            img = img.resize(target, Image.LANCZOS)
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA")

        buffer = BytesIO()
        img.save(buffer, format="PNG")

    stem = Path(asset.name).stem or "image"
    return ImageAsset(data=buffer.getvalue(), mime_type="image/png", name=f"resized_{stem}.png")


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def creative_output_path(output_root: Path, creative: Creative) -> Path:
    """Where a creative is written: <output_root>/<platform-slug>/<file>."""
    platform_dir = output_root / (creative.slug or slugify(creative.platform_name))
    if isinstance(creative, VideoCreative):
        return platform_dir / "video.mp4"
    suffix = f"-{creative.variation.value}" if creative.variation is not None else ""
    return platform_dir / f"creative{suffix}.png"


def save_creative(output_root: Path, creative: Creative) -> Path:
    out_path = creative_output_path(output_root, creative)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(creative, ImageCreative):
        out_path.write_bytes(creative.image.data)
    elif isinstance(creative, VideoCreative):
        out_path.write_bytes(creative.video.data)
    else:  # pragma: no cover
        raise TypeError(f"Unsupported creative type: {type(creative).__name__}")

    logging.info("Saved %s creative for %s to %s", creative.kind.value, creative.platform_name, out_path)
    return out_path
