from io import BytesIO

from PIL import Image

from conftest import png_bytes
from creative_studio.models import (
    ImageAsset,
    ImageCreative,
    MediaPayload,
    Variation,
    VideoCreative,
)
from creative_studio.utils import (
    creative_output_path,
    make_creative_id,
    resize_image,
    save_creative,
    slugify,
    unique_slugs,
)


def test_slugify():
    assert slugify("X (formerly Twitter)") == "x-formerly-twitter"
    assert slugify("Billboard/OOH") == "billboard-ooh"
    assert slugify("  !!! ") == "item"


def test_creative_id_includes_platform_variation_and_time():
    assert make_creative_id("Instagram Story", Variation.B, now_ms=42) == "instagram-story-B-42"
    assert make_creative_id("Instagram Story", None, now_ms=42) == "instagram-story-A-42"


def test_resize_image_keeps_aspect_ratio():
    asset = ImageAsset(data=png_bytes((2048, 1024)), name="wide.jpg")

    resized = resize_image(asset)

    with Image.open(BytesIO(resized.data)) as img:
        assert img.size == (1024, 512)
        assert img.format == "PNG"
    assert resized.mime_type == "image/png"
    assert resized.name == "resized_wide.png"


def test_resize_image_leaves_small_images_alone():
    asset = ImageAsset(data=png_bytes((300, 600)))

    with Image.open(BytesIO(resize_image(asset, 400, 400).data)) as img:
        assert img.size == (200, 400)

    with Image.open(BytesIO(resize_image(asset).data)) as img:
        assert img.size == (300, 600)


def test_save_creative_layout(tmp_path):
    image = ImageCreative(
        id="a",
        platform_name="Instagram Story",
        dimensions="1080x1920",
        image=MediaPayload(data=b"png", mime_type="image/png"),
        variation=Variation.A,
    )
    video = VideoCreative(
        id="v",
        platform_name="Promotional Video",
        video=MediaPayload(data=b"mp4", mime_type="video/mp4"),
    )

    assert creative_output_path(tmp_path, image) == tmp_path / "instagram-story" / "creative-A.png"
    assert save_creative(tmp_path, video).read_bytes() == b"mp4"
    assert (tmp_path / "promotional-video" / "video.mp4").exists()


def test_unique_slugs_suffix_colliding_names():
    slugs = unique_slugs(["Billboard/OOH", "Billboard OOH", "Clip", "clip", "Billboard/OOH"])

    assert slugs == {
        "Billboard/OOH": "billboard-ooh",
        "Billboard OOH": "billboard-ooh-2",
        "Clip": "clip",
        "clip": "clip-2",
    }
    assert make_creative_id("Billboard OOH", None, now_ms=7, slug="billboard-ooh-2") == "billboard-ooh-2-A-7"


def test_output_path_uses_run_slug(tmp_path):
    first = ImageCreative(
        id="a",
        platform_name="Billboard/OOH",
        dimensions="6000x3000",
        image=MediaPayload(data=b"1", mime_type="image/png"),
        slug="billboard-ooh",
    )
    second = ImageCreative(
        id="b",
        platform_name="Billboard OOH",
        dimensions="6000x3000",
        image=MediaPayload(data=b"2", mime_type="image/png"),
        slug="billboard-ooh-2",
    )

    assert save_creative(tmp_path, first).read_bytes() == b"1"
    assert save_creative(tmp_path, second).read_bytes() == b"2"
    assert (tmp_path / "billboard-ooh" / "creative.png").read_bytes() == b"1"
