import pytest

from conftest import ALPHA, BETA, CLIP, build_config
from creative_studio.errors import ValidationError
from creative_studio.models import JobKind, Platform, Variation
from creative_studio.planner import plan_jobs


@pytest.mark.parametrize("image_count", [1, 2, 3])
def test_ab_testing_doubles_image_jobs_but_not_video_jobs(image_count):
    images = [Platform(name=f"P{i}", dimensions="1x1", aspect_ratio="1:1") for i in range(image_count)]
    config = build_config(images + [CLIP], ab_test=True)

    jobs = plan_jobs(config)

    image_jobs = [j for j in jobs if j.kind is JobKind.IMAGE]
    video_jobs = [j for j in jobs if j.kind is JobKind.VIDEO]
    assert len(image_jobs) == 2 * image_count
    assert len(video_jobs) == 1
    assert video_jobs[0].variation is None


def test_without_ab_testing_one_job_per_platform():
    jobs = plan_jobs(build_config([ALPHA, CLIP, BETA]))

    assert [(j.platform.name, j.kind, j.variation) for j in jobs] == [
        ("Alpha", JobKind.IMAGE, None),
        ("Clip", JobKind.VIDEO, None),
        ("Beta", JobKind.IMAGE, None),
    ]


def test_order_follows_selection_with_a_before_b():
    jobs = plan_jobs(build_config([BETA, CLIP, ALPHA], ab_test=True))

    assert [(j.platform.name, j.variation) for j in jobs] == [
        ("Beta", Variation.A),
        ("Beta", Variation.B),
        ("Clip", None),
        ("Alpha", Variation.A),
        ("Alpha", Variation.B),
    ]


def test_repeated_platform_is_planned_once():
    jobs = plan_jobs(build_config([ALPHA, BETA, ALPHA]))

    assert [j.platform.name for j in jobs] == ["Alpha", "Beta"]


def test_no_platforms_is_rejected():
    with pytest.raises(ValidationError, match="at least one platform"):
        plan_jobs(build_config([]))


def test_image_job_requires_logo():
    with pytest.raises(ValidationError, match="Logo and product photo"):
        plan_jobs(build_config([ALPHA], with_logo=False))


def test_image_job_requires_product_photo():
    with pytest.raises(ValidationError, match="Logo and product photo"):
        plan_jobs(build_config([ALPHA, CLIP], with_photo=False))


def test_video_only_plan_needs_photo_but_not_logo():
    jobs = plan_jobs(build_config([CLIP], with_logo=False))
    assert len(jobs) == 1

    with pytest.raises(ValidationError, match="product photo is required to generate a video"):
        plan_jobs(build_config([CLIP], with_photo=False))
