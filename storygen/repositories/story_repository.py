"""스토리 레포지토리 — 스토리 조회 쿼리 및 연관 데이터 로딩.

Story Repository — Story queries with eager loading of the owner,
illustrations and audio for response building.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storygen.models.story import Story
from storygen.repositories.base import BaseRepository


class StoryRepository(BaseRepository[Story]):
    """스토리 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the stories table.
    """

    def __init__(self) -> None:
        super().__init__(Story)

    def _with_relations(self, query: Select) -> Select:
        # 응답 구성에 필요한 관계를 미리 로드 — Eager-load relations used by responses
        return query.options(
            selectinload(Story.user),
            selectinload(Story.illustrations),
            selectinload(Story.audio),
        ).execution_options(populate_existing=True)

    async def get_detail(
        self,
        db: AsyncSession,
        story_id: UUID,
    ) -> Story | None:
        """소유자, 일러스트, 오디오를 포함해 스토리를 조회합니다.

        Retrieve a story with its owner, illustrations and audio loaded.
        """
        query: Select = self._with_relations(select(Story).where(Story.id == story_id))
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def list_all(
        self,
        db: AsyncSession,
    ) -> Sequence[Story]:
        """모든 스토리를 최신순으로 조회합니다.

        Retrieve every story, newest first.
        """
        query: Select = self._with_relations(select(Story).order_by(Story.created_at.desc()))
        result = await db.execute(query)
        return result.scalars().all()

    async def list_by_user(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> Sequence[Story]:
        """특정 사용자의 스토리를 최신순으로 조회합니다.

        Retrieve the stories of one user, newest first.
        """
        query: Select = self._with_relations(
            select(Story)
            .where(Story.user_id == user_id)
            .order_by(Story.created_at.desc())
        )
        result = await db.execute(query)
        return result.scalars().all()


story_repository: StoryRepository = StoryRepository()
