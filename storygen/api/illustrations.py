"""일러스트 라우터 — 일러스트 생성/조회/삭제 엔드포인트.

Illustration Router — Illustration generation, lookup and deletion endpoints.
Generation and deletion require the caller to own the story.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storygen.api.deps import AuthContext, get_auth_context, get_generation_service
from storygen.database import get_db
from storygen.schemas.common import MessageResponse
from storygen.schemas.story import IllustrationGenerateRequest, IllustrationResponse
from storygen.services.generation_service import GenerationService
from storygen.services.illustration_service import illustration_service

router: APIRouter = APIRouter()


@router.post("/generate", response_model=IllustrationResponse, status_code=201)
async def generate_illustration(
    data: IllustrationGenerateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
    generator: Annotated[GenerationService, Depends(get_generation_service)],
) -> IllustrationResponse:
    """프롬프트로 스토리 일러스트 생성.

    Generate an illustration for a story from a prompt.
    """
    result: IllustrationResponse = await illustration_service.generate_illustration(
        db, ctx.user_id, data, generator
    )
    await db.commit()
    return result


@router.post("/cover/{story_id}", response_model=IllustrationResponse, status_code=201)
async def generate_cover(
    story_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
    generator: Annotated[GenerationService, Depends(get_generation_service)],
) -> IllustrationResponse:
    """스토리 표지 일러스트 생성."""
    result: IllustrationResponse = await illustration_service.generate_cover(
        db, ctx.user_id, story_id, generator
    )
    await db.commit()
    return result


@router.get("/story/{story_id}", response_model=list[IllustrationResponse])
async def list_story_illustrations(
    story_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[IllustrationResponse]:
    """스토리의 일러스트 목록 (생성순).

    List a story's illustrations in creation order. 404 when the story is missing.
    """
    return await illustration_service.list_story_illustrations(db, story_id)


@router.get("/{illustration_id}", response_model=IllustrationResponse)
async def get_illustration(
    illustration_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> IllustrationResponse:
    return await illustration_service.get_illustration(db, illustration_id)


@router.delete("/{illustration_id}", response_model=MessageResponse)
async def delete_illustration(
    illustration_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
) -> MessageResponse:
    """일러스트 삭제. 스토리 소유자만 가능."""
    await illustration_service.delete_illustration(db, ctx.user_id, illustration_id)
    await db.commit()
    return MessageResponse(message="Illustration deleted successfully")
