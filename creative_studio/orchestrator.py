from __future__ import annotations

"""
Fan a campaign configuration out into concurrent generation jobs and
reconcile their results.

Every planned job runs as its own asyncio task. Image jobs are one request;
video jobs start an operation, poll it on a fixed interval and download the
finished video. A job that raises is turned into a JobFailure at its own
boundary so sibling jobs keep running. Once every job has settled the
creatives are sorted by platform name and variation, and failures are
reported in dispatch order.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Union

from .errors import GenerationError, ErrorKind, classify_exception
from .generation_client import CreativeGenerationClient
from .models import (
    CampaignConfig,
    Creative,
    GenerationJob,
    GenerationOutcome,
    ImageCreative,
    JobFailure,
    JobKind,
    VideoCreative,
)
from .planner import plan_jobs
from .prompting import build_image_brief, build_video_brief
from .utils import make_creative_id, unique_slugs

VIDEO_POLL_INTERVAL_SECONDS = 15.0

ProgressCallback = Callable[[str], None]
JobResult = Union[ImageCreative, VideoCreative, JobFailure]


def creative_sort_key(creative: Creative):
    """Platform name first; a missing variation sorts as "A"."""
    variation = creative.variation.value if creative.variation is not None else "A"
    return creative.platform_name, variation


def _noop_progress(_message: str) -> None:
    return None


def _guarded_progress(callback: ProgressCallback) -> ProgressCallback:
    """Progress reporting never fails a run or a job; callback errors are logged."""

    def report(message: str) -> None:
        try:
            callback(message)
        except Exception:
            logging.exception("Progress callback failed for message %r", message)

    return report


class GenerationOrchestrator:
    """
    Drive a full generation run against a CreativeGenerationClient.

    Parameters
    ----------
    client:
        Backend used for every job of every run.
    poll_interval:
        Seconds to wait before each video status check.
    max_concurrency:
        Optional cap on jobs in flight at once. None starts every job
        immediately.
    sleep:
        Coroutine used for the poll wait, replaceable in tests.
    """

    def __init__(
            self,
            client: CreativeGenerationClient,
            *,
            poll_interval: float = VIDEO_POLL_INTERVAL_SECONDS,
            max_concurrency: Optional[int] = None,
            sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1.")
        self.client = client
        self.poll_interval = poll_interval
        self.max_concurrency = max_concurrency
        self._sleep = sleep

    async def run(
            self,
            config: CampaignConfig,
            on_progress: Optional[ProgressCallback] = None,
    ) -> GenerationOutcome:
        """
        Plan, dispatch and aggregate one generation run.

        ValidationError from planning is the only exception that escapes;
        it is raised before any job is dispatched.
        """
        progress = _guarded_progress(on_progress) if on_progress else _noop_progress
        jobs = plan_jobs(config)
        slugs = unique_slugs(job.platform.name for job in jobs)

        if any(job.kind is JobKind.IMAGE for job in jobs):
            progress("Generating image creatives...")

        # A fresh semaphore per run keeps concurrent runs independent.
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        results: List[JobResult] = await asyncio.gather(
            *(
                self._run_job(job, slugs[job.platform.name], config, progress, semaphore)
                for job in jobs
            )
        )

        creatives: List[Creative] = []
        failures: List[JobFailure] = []
        for result in results:
            if isinstance(result, JobFailure):
                failures.append(result)
            else:
                creatives.append(result)

        creatives.sort(key=creative_sort_key)

        if creatives:
            progress(f"Generated {len(creatives)} creatives! Finalizing...")

        outcome = GenerationOutcome(
            creatives=tuple(creatives),
            failures=tuple(failures),
            planned_jobs=len(jobs),
        )
        logging.info(
            "Generation run finished: %d planned, %d succeeded, %d failed.",
            len(jobs),
            len(creatives),
            len(failures),
        )
        return outcome

    async def _run_job(
            self,
            job: GenerationJob,
            slug: str,
            config: CampaignConfig,
            progress: ProgressCallback,
            semaphore: Optional[asyncio.Semaphore],
    ) -> JobResult:
        try:
            if semaphore is None:
                return await self._execute(job, slug, config, progress)
            async with semaphore:
                return await self._execute(job, slug, config, progress)
        except Exception as exc:
            error = classify_exception(exc)
            logging.error("Job %s failed (%s): %s", job.label, error.kind.value, error)
            return JobFailure(
                platform_name=job.platform.name,
                kind=job.kind,
                reason=error.user_message,
                variation=job.variation,
                error_kind=error.kind,
            )

    async def _execute(
            self,
            job: GenerationJob,
            slug: str,
            config: CampaignConfig,
            progress: ProgressCallback,
    ) -> Creative:
        if job.kind is JobKind.VIDEO:
            return await self._generate_video(job, slug, config, progress)
        return await self._generate_image(job, slug, config)

    async def _generate_image(
            self,
            job: GenerationJob,
            slug: str,
            config: CampaignConfig,
    ) -> ImageCreative:
        brief = build_image_brief(config, job.platform, job.variation)
        payload = await self.client.generate_image(brief)
        return ImageCreative(
            id=make_creative_id(job.platform.name, job.variation, slug=slug),
            platform_name=job.platform.name,
            dimensions=job.platform.dimensions,
            image=payload,
            variation=job.variation,
            slug=slug,
        )

    async def _generate_video(
            self,
            job: GenerationJob,
            slug: str,
            config: CampaignConfig,
            progress: ProgressCallback,
    ) -> VideoCreative:
        name = job.platform.name

        progress(f"Building video prompt for {name}...")
        brief = build_video_brief(config, job.platform)

        progress(f"Starting video generation for {name}... (this may take a few minutes)")
        handle = await self.client.start_video(brief)

        attempt = 0
        while not handle.done:
            attempt += 1
            progress(f"Checking video status for {name}... (Attempt {attempt})")
            await self._sleep(self.poll_interval)
            handle = await self.client.poll_video(handle)

        progress(f"Video for {name} is ready! Finalizing...")
        if not handle.result_reference:
            raise GenerationError(
                "Video generation completed, but no download link was provided.",
                ErrorKind.MISSING_RESULT,
            )

        payload = await self.client.fetch_video_bytes(handle.result_reference)
        logging.info("Video for %s ready after %d status check(s).", name, attempt)
        return VideoCreative(
            id=make_creative_id(name, job.variation, slug=slug),
            platform_name=name,
            video=payload,
            variation=job.variation,
            slug=slug,
        )


async def run_generation(
        config: CampaignConfig,
        client: CreativeGenerationClient,
        on_progress: Optional[ProgressCallback] = None,
        **options,
) -> GenerationOutcome:
    """Convenience wrapper: one orchestrator, one run."""
    return await GenerationOrchestrator(client, **options).run(config, on_progress)
