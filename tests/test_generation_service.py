"""생성 게이트웨이 테스트 — httpx MockTransport와 가짜 스토리지 사용.

Generation gateway tests using httpx.MockTransport in place of the
OpenAI API and an in-memory storage double.
"""

import json
import threading
from pathlib import Path

import httpx
import pytest

from storygen.services.generation_service import (
    GenerationService,
    IllustrationPrompt,
    StoryPrompt,
    build_illustration_prompt,
    build_story_system_prompt,
    build_story_user_prompt,
    parse_generated_story,
)
from storygen.services.story_service import normalize_characters
from storygen.utils.exceptions import GenerationError

TEMP_IMAGE_URL = "https://images.example.com/tmp/abc.png"


class FakeStorage:
    """업로드를 메모리에 기록하는 스토리지 대체."""

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.file_paths: list[Path] = []
        self.threads: list[int] = []

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> str:
        self.threads.append(threading.get_ident())
        self.objects[key] = (data, content_type)
        return f"https://bucket.s3.us-east-1.amazonaws.com/{key}"

    def upload_file(self, key: str, path: Path, content_type: str) -> str:
        self.file_paths.append(path)
        return self.upload_bytes(key, path.read_bytes(), content_type)


def _service(handler, storage: FakeStorage | None = None, api_key: str = "sk-test") -> GenerationService:
    return GenerationService(
        storage=storage or FakeStorage(),
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


# ===== 프롬프트 구성 (Prompt building) =====

class TestPrompts:

    def test_system_prompt_mentions_age_range_and_format(self):
        prompt = build_story_system_prompt("5-7")
        assert "children aged 5-7" in prompt
        assert 'Title: [Story Title]' in prompt

    def test_user_prompt_all_fields(self):
        prompt = build_story_user_prompt(StoryPrompt(
            age_range="5-7",
            title="Moon Fox",
            theme="courage",
            characters=("Fox", "Owl"),
            setting="a snowy forest",
        ))
        assert prompt == 'Create a children\'s story titled "Moon Fox" about courage featuring Fox, Owl set in a snowy forest'

    def test_user_prompt_minimal(self):
        assert build_story_user_prompt(StoryPrompt(age_range="3-5")) == "Create a children's story"

    def test_parse_generated_story(self):
        story = parse_generated_story("Title: The Moon Fox\n\nOnce upon a time.\nThe end.\n")
        assert story.title == "The Moon Fox"
        assert story.content == "Once upon a time.\nThe end."

    def test_parse_without_title_prefix(self):
        story = parse_generated_story("Moon Fox\nBody")
        assert story.title == "Moon Fox"
        assert story.content == "Body"

    def test_cover_prompt_uses_title(self):
        prompt = build_illustration_prompt(IllustrationPrompt("Moon Fox", "Long body", "cover"))
        assert '"Moon Fox"' in prompt
        assert "Long body" not in prompt

    def test_scene_prompt_truncates_excerpt(self):
        prompt = build_illustration_prompt(IllustrationPrompt("T", "a" * 500, "illustration"))
        assert prompt.endswith("a" * 300 + "...")
        assert "a" * 301 not in prompt

    def test_scene_prompt_picks_paragraph_by_sequence(self):
        content = "First paragraph.\n\nSecond paragraph.\n\nThird paragraph."
        prompt = build_illustration_prompt(IllustrationPrompt("T", content, "illustration", sequence=2))
        assert prompt.endswith("Second paragraph....")

    def test_scene_prompt_sequence_out_of_range_uses_whole_text(self):
        content = "Only one paragraph."
        prompt = build_illustration_prompt(IllustrationPrompt("T", content, "illustration", sequence=4))
        assert prompt.endswith("Only one paragraph....")

    def test_normalize_characters(self):
        assert normalize_characters("Fox, Owl ,, ") == ("Fox", "Owl")
        assert normalize_characters(["Fox", "", " Owl"]) == ("Fox", "Owl")
        assert normalize_characters(None) == ()


# ===== 스토리 생성 (Story generation) =====

class TestGenerateStory:

    async def test_generate_story_success(self):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "choices": [{"message": {"content": "Title: Moon Fox\nOnce upon a time."}}],
            })

        story = await _service(handler).generate_story(StoryPrompt(age_range="5-7", theme="courage"))

        assert story.title == "Moon Fox"
        assert story.content == "Once upon a time."
        assert seen["path"] == "/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["model"] == "gpt-3.5-turbo"
        assert seen["body"]["temperature"] == 0.7
        assert [m["role"] for m in seen["body"]["messages"]] == ["system", "user"]

    async def test_generate_story_empty_content(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"choices": [{"message": {"content": ""}}]})

        with pytest.raises(GenerationError) as exc_info:
            await _service(handler).generate_story(StoryPrompt(age_range="5-7"))
        assert exc_info.value.status_code == 500

    async def test_generate_story_backend_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"error": {"message": "Rate limit reached"}})

        with pytest.raises(GenerationError) as exc_info:
            await _service(handler).generate_story(StoryPrompt(age_range="5-7"))
        assert exc_info.value.detail == "OpenAI API Error"
        assert exc_info.value.details == "Rate limit reached"

    async def test_generate_story_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GenerationError):
            await _service(handler).generate_story(StoryPrompt(age_range="5-7"))

    async def test_generate_story_without_api_key(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("should not be called")

        with pytest.raises(GenerationError):
            await _service(handler, api_key="").generate_story(StoryPrompt(age_range="5-7"))


# ===== 일러스트/오디오 (Illustration and audio) =====

class TestGenerateAssets:

    async def test_generate_illustration_reuploads_image(self):
        storage = FakeStorage()
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/v1/images/generations":
                seen["body"] = json.loads(request.content)
                return httpx.Response(200, json={"data": [{"url": TEMP_IMAGE_URL}]})
            if str(request.url) == TEMP_IMAGE_URL:
                return httpx.Response(200, content=b"PNGDATA")
            return httpx.Response(404)

        asset = await _service(handler, storage).generate_illustration(
            IllustrationPrompt("Moon Fox", "Once upon a time.", "cover")
        )

        assert asset.key.startswith("illustrations/cover_")
        assert asset.key.endswith(".png")
        assert asset.url == f"https://bucket.s3.us-east-1.amazonaws.com/{asset.key}"
        assert storage.objects[asset.key] == (b"PNGDATA", "image/png")
        assert seen["body"]["size"] == "1024x1024"
        assert seen["body"]["n"] == 1
        assert seen["body"]["style"] == "vivid"

    async def test_generate_illustration_download_has_no_api_key(self):
        """임시 이미지 URL 다운로드에는 API 키 헤더가 붙지 않음."""
        headers: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            headers[request.url.host] = request.headers.get("authorization")
            if request.url.path == "/v1/images/generations":
                return httpx.Response(200, json={"data": [{"url": TEMP_IMAGE_URL}]})
            return httpx.Response(200, content=b"PNGDATA")

        await _service(handler, api_key="sk-secret").generate_illustration(
            IllustrationPrompt("Moon Fox", "Once upon a time.", "illustration")
        )

        assert headers["api.openai.com"] == "Bearer sk-secret"
        assert headers["images.example.com"] is None

    async def test_generate_illustration_download_fails(self):
        storage = FakeStorage()

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/v1/images/generations":
                return httpx.Response(200, json={"data": [{"url": TEMP_IMAGE_URL}]})
            return httpx.Response(403)

        with pytest.raises(GenerationError):
            await _service(handler, storage).generate_illustration(
                IllustrationPrompt("Moon Fox", "Body", "illustration")
            )
        assert storage.objects == {}

    async def test_generate_story_audio(self):
        storage = FakeStorage()
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=b"ID3MP3DATA")

        asset = await _service(handler, storage).generate_story_audio("Once upon a time.")

        assert seen["path"] == "/v1/audio/speech"
        assert seen["body"]["input"] == "Once upon a time."
        assert "cheerful" in seen["body"]["instructions"]
        assert asset.key.startswith("stories/") and asset.key.endswith(".mp3")
        assert storage.objects[asset.key] == (b"ID3MP3DATA", "audio/mpeg")
        # 임시 파일은 업로드 후 삭제 — Temporary file is removed after upload
        assert not storage.file_paths[0].exists()

    async def test_uploads_run_off_the_event_loop(self):
        """업로드는 스레드풀에서 실행되어 이벤트 루프를 막지 않음."""
        storage = FakeStorage()

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/v1/images/generations":
                return httpx.Response(200, json={"data": [{"url": TEMP_IMAGE_URL}]})
            if request.url.path == "/v1/audio/speech":
                return httpx.Response(200, content=b"ID3MP3DATA")
            return httpx.Response(200, content=b"PNGDATA")

        service = _service(handler, storage)
        await service.generate_illustration(IllustrationPrompt("Moon Fox", "Body", "cover"))
        await service.generate_story_audio("Once upon a time.")

        assert len(storage.threads) == 2
        assert threading.get_ident() not in storage.threads
