import asyncio
from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors

from conftest import ALPHA, png_bytes
from creative_studio.errors import ErrorKind, GenerationError
from creative_studio.generation_client import (
    GeminiGenerationClient,
    OperationHandle,
    extract_inline_image,
    handle_from_operation,
    resolve_api_key,
)
from creative_studio.models import ImageAsset, Platform, Variation
from creative_studio.prompting import ImageBrief, VideoBrief


def _image_response(data=b"img", mime_type="image/png"):
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type))
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def _operation(done=True, uri="https://videos.example/1", error=None):
    videos = [SimpleNamespace(video=SimpleNamespace(uri=uri))] if uri else []
    return SimpleNamespace(
        name="operations/1",
        done=done,
        error=error,
        response=SimpleNamespace(generated_videos=videos),
    )


class FakeModels:
    def __init__(self, response=None, error=None, operation=None):
        self.response = response or _image_response()
        self.error = error
        self.operation = operation or _operation(done=False)
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response

    async def generate_videos(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.operation


class FakeOperations:
    def __init__(self, result):
        self.result = result
        self.polled = []

    async def get(self, operation):
        self.polled.append(operation)
        return self.result


def _sdk(models, operations=None):
    return SimpleNamespace(aio=SimpleNamespace(models=models, operations=operations))


def _client(models, operations=None, transport=None):
    return GeminiGenerationClient(
        "test-key",
        client=_sdk(models, operations),
        transport=transport,
        image_model="image-model",
        video_model="video-model",
    )


def _image_brief(platform=ALPHA, mascot=None):
    return ImageBrief(
        platform=platform,
        prompt="make an ad",
        product_photo=ImageAsset(data=png_bytes((32, 16))),
        logo=ImageAsset(data=png_bytes()),
        mascot=mascot,
        variation=Variation.A,
    )


def test_resolve_api_key_reads_environment(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
        resolve_api_key()

    monkeypatch.setenv("GOOGLE_API_KEY", "from-env")
    assert resolve_api_key() == "from-env"
    assert resolve_api_key("explicit") == "explicit"


def test_extract_inline_image_skips_text_parts():
    text_part = SimpleNamespace(inline_data=None, text="here you go")
    image_part = SimpleNamespace(inline_data=SimpleNamespace(data=b"png", mime_type="image/png"))
    response = SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=[text_part, image_part]))]
    )

    payload = extract_inline_image(response)

    assert payload.data == b"png"
    assert payload.mime_type == "image/png"


def test_extract_inline_image_reports_block_and_missing_image():
    blocked = SimpleNamespace(candidates=[], prompt_feedback=SimpleNamespace(block_reason="SAFETY"))
    with pytest.raises(GenerationError) as excinfo:
        extract_inline_image(blocked)
    assert excinfo.value.kind is ErrorKind.CONTENT_POLICY

    with pytest.raises(GenerationError, match="did not return an image") as excinfo:
        extract_inline_image(SimpleNamespace(candidates=[]))
    assert excinfo.value.kind is ErrorKind.MISSING_RESULT


def test_handle_from_operation():
    pending = handle_from_operation(_operation(done=False))
    assert not pending.done
    assert pending.result_reference is None

    finished = handle_from_operation(_operation())
    assert finished.done
    assert finished.result_reference == "https://videos.example/1"
    assert finished.name == "operations/1"

    failed = handle_from_operation(_operation(error={"message": "boom"}))
    assert failed.error is not None
    assert failed.result_reference is None


def test_generate_image_sends_assets_and_aspect_ratio():
    models = FakeModels()
    mascot = ImageAsset(data=png_bytes(), name="mascot.png")

    payload = asyncio.run(_client(models).generate_image(_image_brief(mascot=mascot)))

    assert payload.data == b"img"
    call = models.calls[0]
    assert call["model"] == "image-model"
    assert len(call["contents"]) == 4
    assert call["contents"][-1] == "make an ad"
    assert call["config"].image_config.aspect_ratio == "1:1"


def test_generate_image_leaves_unsupported_ratio_to_prompt():
    models = FakeModels()
    banner = Platform(name="Banner", dimensions="1584x396", aspect_ratio="4:1")

    asyncio.run(_client(models).generate_image(_image_brief(platform=banner)))

    assert models.calls[0]["config"].image_config is None
    assert len(models.calls[0]["contents"]) == 3


def test_generate_image_classifies_sdk_errors():
    error = genai_errors.ClientError(
        429, {"error": {"code": 429, "status": "RESOURCE_EXHAUSTED", "message": "quota"}}
    )

    with pytest.raises(GenerationError) as excinfo:
        asyncio.run(_client(FakeModels(error=error)).generate_image(_image_brief()))

    assert excinfo.value.kind is ErrorKind.QUOTA


def test_start_and_poll_video():
    models = FakeModels()
    operations = FakeOperations(_operation())
    client = _client(models, operations)
    brief = VideoBrief(
        platform=Platform(name="Clip", dimensions="10s", aspect_ratio="16:9", is_video=True),
        prompt="a short clip",
        product_photo=ImageAsset(data=png_bytes()),
        aspect_ratio="9:16",
    )

    handle = asyncio.run(client.start_video(brief))
    assert not handle.done
    assert models.calls[0]["config"].aspect_ratio == "9:16"
    assert models.calls[0]["prompt"] == "a short clip"

    polled = asyncio.run(client.poll_video(handle))
    assert polled.done
    assert polled.result_reference == "https://videos.example/1"
    assert operations.polled == [models.operation]


def test_poll_video_raises_for_failed_operation():
    operations = FakeOperations(_operation(error={"code": 8, "message": "RESOURCE_EXHAUSTED"}))
    client = _client(FakeModels(), operations)
    handle = OperationHandle(name="operations/1", raw=object())

    with pytest.raises(GenerationError) as excinfo:
        asyncio.run(client.poll_video(handle))

    assert excinfo.value.kind is ErrorKind.QUOTA


def test_poll_video_needs_sdk_operation():
    with pytest.raises(GenerationError, match="cannot be polled"):
        asyncio.run(_client(FakeModels()).poll_video(OperationHandle(name="lost")))


def test_fetch_video_bytes_sends_api_key():
    seen = {}

    def handler(request):
        seen["key"] = request.headers.get("x-goog-api-key")
        return httpx.Response(200, content=b"mp4", headers={"content-type": "video/mp4"})

    client = _client(FakeModels(), transport=httpx.MockTransport(handler))

    payload = asyncio.run(client.fetch_video_bytes("https://videos.example/1"))

    assert payload.data == b"mp4"
    assert payload.mime_type == "video/mp4"
    assert seen["key"] == "test-key"


def test_fetch_video_bytes_reports_http_failure():
    client = _client(
        FakeModels(),
        transport=httpx.MockTransport(lambda request: httpx.Response(404)),
    )

    with pytest.raises(GenerationError, match="Failed to fetch video: Not Found"):
        asyncio.run(client.fetch_video_bytes("https://videos.example/1"))
