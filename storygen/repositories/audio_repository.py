"""오디오 레포지토리.

Audio repository — One narration row per story.
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from storygen.models.story import Audio
from storygen.repositories.base import BaseRepository


class AudioRepository(BaseRepository[Audio]):

    def __init__(self) -> None:
        super().__init__(Audio)

    async def get_by_story(
        self,
        db: AsyncSession,
        story_id: UUID,
    ) -> Audio | None:
        query: Select = select(Audio).where(Audio.story_id == story_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def upsert_for_story(
        self,
        db: AsyncSession,
        story_id: UUID,
        url: str,
        s3_key: str,
    ) -> Audio:
        """스토리의 오디오를 생성하거나 교체합니다.

        Create the story's audio row, or replace the URL/key of the existing one.
        """
        existing: Audio | None = await self.get_by_story(db, story_id)
        if existing is None:
            return await self.create(db, {"story_id": story_id, "url": url, "s3_key": s3_key})

        existing.url = url
        existing.s3_key = s3_key
        await db.flush()
        await db.refresh(existing)
        return existing


audio_repository: AudioRepository = AudioRepository()
