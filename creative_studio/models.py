from __future__ import annotations

"""
Datamodels used throughout the creative studio.

Everything a campaign configuration holds is frozen so that each snapshot
kept in the editing history is an independent value. Generated results are
modelled as an explicit two-variant union (ImageCreative | VideoCreative).
"""

import base64
import enum
import mimetypes
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import ClassVar, Optional, Tuple, Union

from .errors import ErrorKind, QUOTA_EXCEEDED_MESSAGE


@dataclass(frozen=True)
class ImageAsset:
    """An uploaded image (logo, mascot or product photo) held in memory."""

    data: bytes = field(repr=False)
    mime_type: str = "image/png"

    # Original file name, only used for logging and output naming.
    name: str = "image.png"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageAsset":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Image asset not found: {path}")
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            data=path.read_bytes(),
            mime_type=mime_type or "application/octet-stream",
            name=path.name,
        )


@dataclass(frozen=True)
class Platform:
    """A target format with its own size and job protocol."""

    # Unique key, also surfaced in prompts and progress messages.
    name: str

    # Pixel size for image platforms ("1200x675"), duration text for video.
    dimensions: str

    aspect_ratio: str
    is_video: bool = False


@dataclass(frozen=True)
class BrandAssets:
    brand_name: str = ""
    logo: Optional[ImageAsset] = None
    mascot: Optional[ImageAsset] = None
    color_palette: str = ""
    font_style: str = ""
    tone: str = ""


@dataclass(frozen=True)
class CampaignDetails:
    product_description: str = ""
    product_photo: Optional[ImageAsset] = None
    preset: str = "Minimal Luxe"

    # Free text used instead of the preset when preset == "Custom".
    custom_preset: str = ""

    # Ordered set of target platforms, unique by name.
    platforms: Tuple[Platform, ...] = ()

    tagline: str = ""
    cta_button: str = ""
    seasonal_overlay: str = ""
    generate_ab_test: bool = False
    logo_placement: str = ""
    tagline_placement: str = ""
    mascot_placement: str = ""

    # When non-blank this replaces the composed video prompt entirely.
    video_prompt: str = ""
    video_aspect_ratio: str = "16:9"

    @property
    def visual_style(self) -> str:
        if self.preset == "Custom":
            return self.custom_preset
        return self.preset


@dataclass(frozen=True)
class CampaignConfig:
    """One snapshot of everything the user has entered."""

    brand_assets: BrandAssets = field(default_factory=BrandAssets)
    campaign_details: CampaignDetails = field(default_factory=CampaignDetails)

    def with_brand(self, **changes) -> "CampaignConfig":
        return replace(self, brand_assets=replace(self.brand_assets, **changes))

    def with_campaign(self, **changes) -> "CampaignConfig":
        if "platforms" in changes:
            changes["platforms"] = tuple(changes["platforms"])
        return replace(
            self, campaign_details=replace(self.campaign_details, **changes)
        )


class JobKind(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"


class Variation(str, enum.Enum):
    A = "A"
    B = "B"


@dataclass(frozen=True)
class GenerationJob:
    """A single planned unit of generation work."""

    platform: Platform
    kind: JobKind

    # Only set for image jobs when A/B testing was requested.
    variation: Optional[Variation] = None

    @property
    def label(self) -> str:
        if self.variation is None:
            return self.platform.name
        return f"{self.platform.name} (Variation {self.variation.value})"


@dataclass(frozen=True)
class MediaPayload:
    """Raw bytes of a generated image or video."""

    data: bytes = field(repr=False)
    mime_type: str

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass(frozen=True)
class ImageCreative:
    kind: ClassVar[JobKind] = JobKind.IMAGE

    id: str
    platform_name: str
    dimensions: str
    image: MediaPayload
    variation: Optional[Variation] = None

    # Output directory name, unique among the platforms of one run.
    slug: str = ""


@dataclass(frozen=True)
class VideoCreative:
    kind: ClassVar[JobKind] = JobKind.VIDEO

    id: str
    platform_name: str
    video: MediaPayload
    variation: Optional[Variation] = None

    # Output directory name, unique among the platforms of one run.
    slug: str = ""


Creative = Union[ImageCreative, VideoCreative]


@dataclass(frozen=True)
class JobFailure:
    """Why one planned job did not produce a creative."""

    platform_name: str
    kind: JobKind
    reason: str
    variation: Optional[Variation] = None
    error_kind: ErrorKind = ErrorKind.UNKNOWN

    @property
    def is_quota_error(self) -> bool:
        return self.error_kind is ErrorKind.QUOTA

    def describe(self) -> str:
        reason = QUOTA_EXCEEDED_MESSAGE if self.is_quota_error else self.reason
        if self.kind is JobKind.VIDEO:
            subject = f"Video for {self.platform_name}"
        elif self.variation is not None:
            subject = f"Image for {self.platform_name} (Variation {self.variation.value})"
        else:
            subject = f"Image for {self.platform_name}"
        return f"{subject} failed: {reason}"


@dataclass(frozen=True)
class GenerationOutcome:
    """
    Result of one generation run.

    creatives are sorted by platform name then variation; failures keep the
    order in which their jobs were dispatched.
    """

    creatives: Tuple[Creative, ...] = ()
    failures: Tuple[JobFailure, ...] = ()
    planned_jobs: int = 0

    @property
    def is_total_failure(self) -> bool:
        return not self.creatives

    @property
    def error_message(self) -> Optional[str]:
        if self.failures:
            details = "; ".join(f.describe() for f in self.failures)
            return f"Generation finished with {len(self.failures)} error(s): {details}"
        if not self.creatives:
            return (
                "Generation completed, but the AI did not return any valid creatives. "
                "Please try adjusting your prompt or inputs."
            )
        return None
