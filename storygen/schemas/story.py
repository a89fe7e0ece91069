"""스토리/일러스트/오디오 Pydantic 스키마.

Story, illustration and audio request/response schemas.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from storygen.models.story import ILLUSTRATION_TYPE_SCENE
from storygen.schemas.common import CamelModel


# === 요청 (Requests) ===

class StoryGenerateRequest(CamelModel):
    age_range: str = Field(min_length=1, max_length=50)
    title: str | None = None
    theme: str | None = None
    # 문자열 또는 문자열 목록 — A description or a list of character names
    characters: str | list[str] | None = None
    setting: str | None = None


class StoryCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    age_range: str = Field(min_length=1, max_length=50)
    user_id: UUID
    author: str | None = None
    characters: str | None = None
    setting: str | None = None


class StoryUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1)
    age_range: str | None = Field(default=None, min_length=1, max_length=50)
    author: str | None = None
    characters: str | None = None
    setting: str | None = None


class IllustrationGenerateRequest(CamelModel):
    story_id: UUID
    prompt: str = Field(min_length=1)
    type: str = ILLUSTRATION_TYPE_SCENE  # cover, illustration
    sequence: int | None = Field(default=None, ge=1)


# === 응답 (Responses) ===

class StoryOwner(CamelModel):
    name: str
    email: str


class IllustrationSummary(CamelModel):
    id: UUID
    url: str
    type: str


class AudioSummary(CamelModel):
    url: str


class StoryResponse(CamelModel):
    """스토리 응답 — 소유자 이름/이메일 포함.

    Story response including a shallow projection of the owner.
    """

    id: UUID
    title: str
    content: str
    age_range: str
    author: str | None = None
    characters: str | None = None
    setting: str | None = None
    user_id: UUID
    created_at: datetime
    updated_at: datetime
    user: StoryOwner


class StoryDetailResponse(StoryResponse):
    """스토리 상세 응답 — 일러스트와 오디오 포함.

    Story response with illustrations and audio attached.
    """

    illustrations: list[IllustrationSummary] = []
    audio: AudioSummary | None = None


class IllustrationResponse(CamelModel):
    id: UUID
    url: str
    s3_key: str
    type: str
    story_id: UUID
    created_at: datetime


class AudioResponse(CamelModel):
    id: UUID
    url: str
    s3_key: str
    story_id: UUID
    created_at: datetime


class AudioAsset(CamelModel):
    url: str
    s3_key: str


class AudioGenerateResponse(CamelModel):
    message: str
    audio: AudioAsset
