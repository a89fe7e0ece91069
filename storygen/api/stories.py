"""스토리 라우터 — 스토리 CRUD, AI 생성, 낭독 오디오 엔드포인트.

Story Router — Story CRUD, AI generation and narrated audio endpoints.

Access:
    - 조회: 공개 (Reads are public)
    - 생성/수정/삭제/오디오 생성: 인증된 소유자만 (Mutations: authenticated owner only)
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storygen.api.deps import AuthContext, get_auth_context, get_generation_service
from storygen.database import get_db
from storygen.schemas.common import MessageResponse
from storygen.schemas.story import (
    AudioGenerateResponse,
    AudioResponse,
    StoryCreate,
    StoryDetailResponse,
    StoryGenerateRequest,
    StoryUpdate,
)
from storygen.services.generation_service import GenerationService
from storygen.services.story_service import story_service

router: APIRouter = APIRouter()


@router.post("/generate-story", response_model=StoryDetailResponse, status_code=201)
async def generate_story(
    data: StoryGenerateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
    generator: Annotated[GenerationService, Depends(get_generation_service)],
) -> StoryDetailResponse:
    """AI 스토리 생성 — 호출자 소유로 저장.

    Generate a story with AI and save it for the caller.
    """
    result: StoryDetailResponse = await story_service.generate_story(db, ctx.user_id, data, generator)
    await db.commit()
    return result


@router.get("", response_model=list[StoryDetailResponse])
async def list_stories(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[StoryDetailResponse]:
    """모든 스토리 목록."""
    return await story_service.list_stories(db)


@router.get("/user/{user_id}", response_model=list[StoryDetailResponse])
async def list_user_stories(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[StoryDetailResponse]:
    """특정 사용자의 스토리 목록 (최신순).

    List one user's stories, newest first. 404 when the user has none.
    """
    return await story_service.list_user_stories(db, user_id)


@router.get("/{story_id}", response_model=StoryDetailResponse)
async def get_story(
    story_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> StoryDetailResponse:
    return await story_service.get_story(db, story_id)


@router.post("", response_model=StoryDetailResponse, status_code=201)
async def create_story(
    data: StoryCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
) -> StoryDetailResponse:
    """직접 작성한 스토리 저장.

    Save a manually written story. ``userId`` must be the caller.
    """
    result: StoryDetailResponse = await story_service.create_story(db, ctx.user_id, data)
    await db.commit()
    return result


@router.patch("/{story_id}", response_model=StoryDetailResponse)
async def update_story(
    story_id: UUID,
    data: StoryUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
) -> StoryDetailResponse:
    """스토리 부분 수정. 소유자만 가능."""
    result: StoryDetailResponse = await story_service.update_story(db, ctx.user_id, story_id, data)
    await db.commit()
    return result


@router.delete("/{story_id}", response_model=MessageResponse)
async def delete_story(
    story_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
) -> MessageResponse:
    """스토리 삭제 — 일러스트와 오디오도 함께 삭제.

    Delete a story along with its illustrations and audio. Owner only.
    """
    await story_service.delete_story(db, ctx.user_id, story_id)
    await db.commit()
    return MessageResponse(message="Story deleted successfully")


@router.post("/generate-audio/{story_id}", response_model=AudioGenerateResponse)
async def generate_audio(
    story_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
    generator: Annotated[GenerationService, Depends(get_generation_service)],
) -> AudioGenerateResponse:
    """스토리 낭독 오디오 생성. 기존 오디오는 교체됩니다.

    Generate narrated audio for a story, replacing any previous audio.
    """
    result: AudioGenerateResponse = await story_service.generate_audio(db, ctx.user_id, story_id, generator)
    await db.commit()
    return result


@router.get("/{story_id}/audio", response_model=AudioResponse)
async def get_story_audio(
    story_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AudioResponse:
    return await story_service.get_audio(db, story_id)
