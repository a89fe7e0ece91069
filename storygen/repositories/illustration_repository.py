"""일러스트 레포지토리.

Illustration repository — Handles illustrations DB queries.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from storygen.models.story import Illustration
from storygen.repositories.base import BaseRepository


class IllustrationRepository(BaseRepository[Illustration]):

    def __init__(self) -> None:
        super().__init__(Illustration)

    async def list_by_story(
        self,
        db: AsyncSession,
        story_id: UUID,
    ) -> Sequence[Illustration]:
        return await self.get_all(
            db,
            filters={"story_id": story_id},
            order_by=Illustration.created_at,
        )


illustration_repository: IllustrationRepository = IllustrationRepository()
