"""생성 게이트웨이 — OpenAI 텍스트/이미지/음성 생성 연동.

Generation Gateway — Wraps the OpenAI REST API for story text, illustrations
and narrated audio. Binary outputs are re-uploaded to durable storage before
their URLs are returned. Every call is single-shot: no retry, and any backend
or network failure surfaces as ``GenerationError``.
"""

import logging
import os
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
from starlette.concurrency import run_in_threadpool

from storygen.config import settings
from storygen.models.story import ILLUSTRATION_TYPE_COVER
from storygen.services.storage_service import StorageService, storage_service
from storygen.utils.exceptions import GenerationError

logger = logging.getLogger(__name__)

# 장면 발췌 최대 길이 — Max characters of story text depicted in a scene
SCENE_EXCERPT_MAX_CHARS: int = 300

TITLE_PREFIX: str = "Title: "

AUDIO_INSTRUCTIONS: str = "Speak in a cheerful and positive tone, like reading a bedtime story to a child."


@dataclass(frozen=True)
class StoryPrompt:
    age_range: str
    title: str | None = None
    theme: str | None = None
    characters: tuple[str, ...] = ()
    setting: str | None = None


@dataclass(frozen=True)
class IllustrationPrompt:
    story_title: str
    story_content: str
    type: str
    sequence: int | None = None


@dataclass(frozen=True)
class GeneratedStory:
    title: str
    content: str


@dataclass(frozen=True)
class GeneratedAsset:
    url: str
    key: str


def build_story_system_prompt(age_range: str) -> str:
    """연령대에 맞춘 시스템 프롬프트를 생성합니다."""
    return (
        f"You are a children's story writer creating content for children aged {age_range}.\n"
        "Write stories that are:\n"
        "1. Age-appropriate and engaging\n"
        "2. Educational and positive\n"
        "3. Have a clear beginning, middle, and end\n"
        "4. Include a subtle moral lesson\n"
        "5. Use simple language for young readers\n"
        "\n"
        'Format the response with "Title: [Story Title]" on the first line, '
        "followed by the story content."
    )


def build_story_user_prompt(prompt: StoryPrompt) -> str:
    """사용자 입력으로 스토리 요청 문장을 구성합니다."""
    text = "Create a children's story"
    if prompt.title:
        text += f' titled "{prompt.title}"'
    if prompt.theme:
        text += f" about {prompt.theme}"
    if prompt.characters:
        text += f" featuring {', '.join(prompt.characters)}"
    if prompt.setting:
        text += f" set in {prompt.setting}"
    return text


def parse_generated_story(text: str) -> GeneratedStory:
    """첫 줄을 제목, 나머지를 본문으로 분리합니다.

    Split generated text into a title (first line, literal ``"Title: "``
    removed) and a body (the remaining lines).
    """
    first_line, _, rest = text.partition("\n")
    return GeneratedStory(
        title=first_line.replace(TITLE_PREFIX, "", 1).strip(),
        content=rest.strip(),
    )


def build_illustration_prompt(prompt: IllustrationPrompt) -> str:
    """표지 또는 장면 일러스트 프롬프트를 생성합니다.

    Cover prompts frame the whole story by its title. Scene prompts depict
    an excerpt: paragraph ``sequence`` (1-based) when present, otherwise the
    whole text, truncated to 300 characters.
    """
    if prompt.type == ILLUSTRATION_TYPE_COVER:
        return (
            "Create a colorful, child-friendly book cover illustration for a children's "
            f'story titled "{prompt.story_title}".\n'
            "The image should be engaging, bright, and suitable for children.\n"
            "IMPORTANT INSTRUCTIONS:\n"
            "1. Create ONLY the cover illustration itself - do NOT show a book or book cover object\n"
            "2. Make ONE single cohesive scene - do NOT split the image into multiple panels or sections\n"
            "3. Do NOT create duplicated or mirrored content within the same image\n"
            "4. Fill the entire square canvas with a single unified illustration, leaving no borders or empty spaces\n"
            "5. Use cartoon style with vibrant colors and simple shapes suitable for children\n"
            "6. Do NOT include any text or words in the image\n"
            "7. Reflect the theme and mood of the story, such as whimsical, adventurous, or magical\n"
            "8. Include key elements or characters from the story\n"
            "9. Use a color palette that matches the story's tone\n"
            "\n"
            f'The illustration should visually represent the story about "{prompt.story_title}".'
        )

    parts = prompt.story_content.split("\n\n")
    excerpt = prompt.story_content
    if prompt.sequence and prompt.sequence <= len(parts) and parts[prompt.sequence - 1]:
        excerpt = parts[prompt.sequence - 1]

    return (
        "Create a colorful, child-friendly illustration for a children's story.\n"
        "IMPORTANT INSTRUCTIONS:\n"
        "1. Create ONE single cohesive scene - do NOT split the image into multiple panels or sections\n"
        "2. Do NOT create duplicated or mirrored content within the same image\n"
        "3. Fill the entire square canvas with a single unified illustration, leaving no borders or empty spaces\n"
        "4. Use cartoon style with vibrant colors and simple shapes suitable for children\n"
        "5. Do NOT include any text or words in the image\n"
        "6. Include key elements or characters from the story\n"
        "7. Use a color palette that matches the story's tone\n"
        "\n"
        f"The image should depict this story excerpt: {excerpt[:SCENE_EXCERPT_MAX_CHARS]}..."
    )


class GenerationService:
    """OpenAI 생성 백엔드 게이트웨이.

    Gateway to the text, image and speech generation backend.
    Collaborators (storage, credentials, transport) are injected through the
    constructor so tests can substitute fakes.
    """

    def __init__(
        self,
        storage: StorageService,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        story_model: str = "gpt-3.5-turbo",
        image_model: str = "dall-e-3",
        tts_model: str = "gpt-4o-mini-tts",
        tts_voice: str = "coral",
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._storage = storage
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._story_model = story_model
        self._image_model = image_model
        self._tts_model = tts_model
        self._tts_voice = tts_voice
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        if not self._api_key:
            raise GenerationError("OpenAI API Error", details="OPENAI_API_KEY is not configured")
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _post(self, client: httpx.AsyncClient, path: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            response = await client.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GenerationError("OpenAI API Error", details=_error_message(exc.response)) from exc
        except httpx.HTTPError as exc:
            raise GenerationError("OpenAI API Error", details=f"Request to {path} failed: {exc}") from exc
        return response

    async def generate_story(self, prompt: StoryPrompt) -> GeneratedStory:
        """스토리를 생성합니다.

        Generate a story and split it into title and body.

        Raises:
            GenerationError: 백엔드 오류 또는 빈 응답 (Backend error or empty result)
        """
        payload = {
            "model": self._story_model,
            "messages": [
                {"role": "system", "content": build_story_system_prompt(prompt.age_range)},
                {"role": "user", "content": build_story_user_prompt(prompt)},
            ],
            "temperature": 0.7,
        }
        async with self._client() as client:
            response = await self._post(client, "/chat/completions", payload)

        try:
            text: str | None = response.json()["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise GenerationError("Story Generation Failed", details="Malformed completion response") from exc
        if not text or not text.strip():
            raise GenerationError("Story Generation Failed", details="OpenAI returned empty response")

        story = parse_generated_story(text)
        logger.info("Generated story %r (%d chars)", story.title, len(story.content))
        return story

    async def generate_illustration(self, prompt: IllustrationPrompt) -> GeneratedAsset:
        """일러스트를 생성하고 영구 스토리지에 업로드합니다.

        Generate one square image, download it from the backend's temporary
        URL and re-upload it under ``illustrations/{type}_{uuid}.png``.
        """
        payload = {
            "model": self._image_model,
            "prompt": build_illustration_prompt(prompt),
            "n": 1,
            "size": "1024x1024",
            "quality": "standard",
            "style": "vivid",
        }
        async with self._client() as client:
            response = await self._post(client, "/images/generations", payload)
            try:
                temporary_url: str = response.json()["data"][0]["url"]
            except (KeyError, IndexError, TypeError, ValueError) as exc:
                raise GenerationError("Illustration Generation Failed", details="Malformed image response") from exc
            if not temporary_url:
                raise GenerationError("Illustration Generation Failed", details="OpenAI returned no image URL")

        # 임시 URL은 외부 호스트 — download without the API key header
        logger.info("Downloading image from %s", temporary_url)
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as downloader:
            try:
                image = await downloader.get(temporary_url)
                image.raise_for_status()
            except httpx.HTTPError as exc:
                raise GenerationError("Illustration Generation Failed", details=f"Image download failed: {exc}") from exc

        key = f"illustrations/{prompt.type}_{uuid.uuid4()}.png"
        url = await run_in_threadpool(self._storage.upload_bytes, key, image.content, "image/png")
        return GeneratedAsset(url=url, key=key)

    async def generate_story_audio(self, content: str) -> GeneratedAsset:
        """스토리 낭독 오디오를 생성하고 업로드합니다.

        Synthesize the story text with a cheerful voice, write the MP3 to a
        temporary local file and upload it under ``stories/{uuid}.mp3``.
        """
        payload = {
            "model": self._tts_model,
            "voice": self._tts_voice,
            "input": content,
            "instructions": AUDIO_INSTRUCTIONS,
            "response_format": "mp3",
        }
        async with self._client() as client:
            response = await self._post(client, "/audio/speech", payload)

        if not response.content:
            raise GenerationError("Audio Generation Failed", details="OpenAI returned empty audio")

        key = f"stories/{uuid.uuid4()}.mp3"
        fd, tmp_name = tempfile.mkstemp(suffix=".mp3")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(response.content)
            url = await run_in_threadpool(self._storage.upload_file, key, tmp_path, "audio/mpeg")
        finally:
            tmp_path.unlink(missing_ok=True)
        return GeneratedAsset(url=url, key=key)


def _error_message(response: httpx.Response) -> str:
    """OpenAI 오류 응답에서 메시지를 추출합니다."""
    try:
        return response.json()["error"]["message"]
    except (KeyError, TypeError, ValueError):
        return f"HTTP {response.status_code}"


generation_service: GenerationService = GenerationService(
    storage=storage_service,
    api_key=settings.OPENAI_API_KEY,
    base_url=settings.OPENAI_BASE_URL,
    story_model=settings.OPENAI_STORY_MODEL,
    image_model=settings.OPENAI_IMAGE_MODEL,
    tts_model=settings.OPENAI_TTS_MODEL,
    tts_voice=settings.OPENAI_TTS_VOICE,
    timeout=settings.OPENAI_TIMEOUT_SECONDS,
)
