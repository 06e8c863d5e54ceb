from __future__ import annotations

import logging
from typing import List, Set

from .errors import ValidationError
from .models import CampaignConfig, GenerationJob, JobKind, Variation


def plan_jobs(config: CampaignConfig) -> List[GenerationJob]:
    """
    Expand a campaign configuration into the ordered list of jobs to run.

    - Platforms keep the order in which they were selected; a repeated name
      is planned only once.
    - An image platform yields one job, or an A job followed by a B job when
      A/B testing is enabled.
    - A video platform always yields exactly one job without a variation.

    Raises ValidationError when nothing is selected or when a required asset
    for a planned job kind is missing.
    """
    brand = config.brand_assets
    details = config.campaign_details

    if not details.platforms:
        raise ValidationError("Select at least one platform to generate creatives.")

    jobs: List[GenerationJob] = []
    seen: Set[str] = set()

    for platform in details.platforms:
        if platform.name in seen:
            logging.warning("Platform %s selected twice; planning it once.", platform.name)
            continue
        seen.add(platform.name)

        if platform.is_video:
            jobs.append(GenerationJob(platform=platform, kind=JobKind.VIDEO))
        elif details.generate_ab_test:
            jobs.append(GenerationJob(platform=platform, kind=JobKind.IMAGE, variation=Variation.A))
            jobs.append(GenerationJob(platform=platform, kind=JobKind.IMAGE, variation=Variation.B))
        else:
            jobs.append(GenerationJob(platform=platform, kind=JobKind.IMAGE))

    has_image = any(job.kind is JobKind.IMAGE for job in jobs)
    has_video = any(job.kind is JobKind.VIDEO for job in jobs)

    if has_image and (brand.logo is None or details.product_photo is None):
        raise ValidationError("Logo and product photo are required to generate creatives.")
    if has_video and details.product_photo is None:
        raise ValidationError("A product photo is required to generate a video.")

    logging.info(
        "Planned %d job(s) for %d platform(s) (A/B test=%s)",
        len(jobs),
        len(seen),
        details.generate_ab_test,
    )
    return jobs
