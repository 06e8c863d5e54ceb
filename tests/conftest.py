from __future__ import annotations

import asyncio
from io import BytesIO
from typing import Dict, List, Optional, Tuple

import pytest
from PIL import Image

from creative_studio.generation_client import OperationHandle
from creative_studio.models import (
    BrandAssets,
    CampaignConfig,
    CampaignDetails,
    ImageAsset,
    MediaPayload,
    Platform,
)
from creative_studio.prompting import ImageBrief, VideoBrief


def png_bytes(size: Tuple[int, int] = (8, 8), color=(255, 120, 0, 255)) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


ALPHA = Platform(name="Alpha", dimensions="1080x1080", aspect_ratio="1:1")
BETA = Platform(name="Beta", dimensions="1200x675", aspect_ratio="16:9")
CLIP = Platform(name="Clip", dimensions="10-15 seconds", aspect_ratio="16:9", is_video=True)


def build_config(
        platforms=(ALPHA, BETA),
        *,
        ab_test: bool = False,
        with_logo: bool = True,
        with_photo: bool = True,
        **campaign_changes,
) -> CampaignConfig:
    logo = ImageAsset(data=png_bytes(), name="logo.png") if with_logo else None
    photo = ImageAsset(data=png_bytes((16, 12)), name="photo.png") if with_photo else None
    return CampaignConfig(
        brand_assets=BrandAssets(
            brand_name="Acme",
            logo=logo,
            color_palette="orange and black",
            font_style="Bold Display",
            tone="Playful",
        ),
        campaign_details=CampaignDetails(
            product_description="Cold brew in a can",
            product_photo=photo,
            platforms=tuple(platforms),
            tagline="Stay cool",
            generate_ab_test=ab_test,
            **campaign_changes,
        ),
    )


class FakeGenerationClient:
    """
    In-memory CreativeGenerationClient.

    image_errors maps (platform name, variation value or None) to an
    exception raised for that image job. video_polls is the number of
    not-done poll results returned before the operation reports done.
    """

    def __init__(
            self,
            *,
            image_errors: Optional[Dict[Tuple[str, Optional[str]], Exception]] = None,
            video_polls: int = 0,
            video_start_error: Optional[Exception] = None,
            video_result_reference: Optional[str] = "https://videos.example/clip.mp4",
            image_delays: Optional[Dict[str, float]] = None,
    ) -> None:
        self.image_errors = image_errors or {}
        self.video_polls = video_polls
        self.video_start_error = video_start_error
        self.video_result_reference = video_result_reference
        self.image_delays = image_delays or {}

        self.image_briefs: List[ImageBrief] = []
        self.video_briefs: List[VideoBrief] = []
        self.poll_calls = 0
        self.fetched: List[str] = []

    async def generate_image(self, brief: ImageBrief) -> MediaPayload:
        self.image_briefs.append(brief)
        delay = self.image_delays.get(brief.platform.name)
        if delay:
            await asyncio.sleep(delay)
        key = (brief.platform.name, brief.variation.value if brief.variation else None)
        if key in self.image_errors:
            raise self.image_errors[key]
        return MediaPayload(data=b"image:" + brief.platform.name.encode(), mime_type="image/png")

    async def start_video(self, brief: VideoBrief) -> OperationHandle:
        self.video_briefs.append(brief)
        if self.video_start_error is not None:
            raise self.video_start_error
        return OperationHandle(name="operations/video-1", done=False)

    async def poll_video(self, handle: OperationHandle) -> OperationHandle:
        self.poll_calls += 1
        if self.poll_calls < self.video_polls:
            return OperationHandle(name=handle.name, done=False)
        return OperationHandle(
            name=handle.name,
            done=True,
            result_reference=self.video_result_reference,
        )

    async def fetch_video_bytes(self, result_reference: str) -> MediaPayload:
        self.fetched.append(result_reference)
        return MediaPayload(data=b"video-bytes", mime_type="video/mp4")


async def no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture
def fake_client() -> FakeGenerationClient:
    return FakeGenerationClient()


@pytest.fixture
def progress_log() -> List[str]:
    return []
