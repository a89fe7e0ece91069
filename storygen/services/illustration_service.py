"""일러스트 서비스 — 스토리 일러스트 생성/조회/삭제 비즈니스 로직.

Illustration Service — Business logic for generating, listing and
deleting story illustrations. Generation requires the caller to own
the story.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from storygen.models.story import ILLUSTRATION_TYPE_COVER, ILLUSTRATION_TYPES, Illustration, Story
from storygen.repositories.illustration_repository import illustration_repository
from storygen.repositories.story_repository import story_repository
from storygen.schemas.story import IllustrationGenerateRequest, IllustrationResponse
from storygen.services.generation_service import (
    GeneratedAsset,
    GenerationService,
    IllustrationPrompt,
)
from storygen.services.story_service import ensure_owner
from storygen.utils.exceptions import BadRequestError, NotFoundError


class IllustrationService:
    """일러스트 관련 비즈니스 로직을 처리하는 서비스.

    Service handling illustration business logic.
    """

    async def _get_story_or_404(self, db: AsyncSession, story_id: UUID) -> Story:
        story: Story | None = await story_repository.get_by_id(db, story_id)
        if story is None:
            raise NotFoundError("Story not found")
        return story

    async def _generate(
        self,
        db: AsyncSession,
        story: Story,
        illustration_type: str,
        generator: GenerationService,
        excerpt: str,
        sequence: int | None = None,
    ) -> IllustrationResponse:
        asset: GeneratedAsset = await generator.generate_illustration(
            IllustrationPrompt(
                story_title=story.title,
                story_content=excerpt,
                type=illustration_type,
                sequence=sequence,
            )
        )
        illustration: Illustration = await illustration_repository.create(
            db,
            {
                "url": asset.url,
                "s3_key": asset.key,
                "type": illustration_type,
                "story_id": story.id,
            },
        )
        return IllustrationResponse.model_validate(illustration)

    async def generate_illustration(
        self,
        db: AsyncSession,
        caller_id: UUID,
        data: IllustrationGenerateRequest,
        generator: GenerationService,
    ) -> IllustrationResponse:
        """스토리 장면 또는 표지 일러스트를 생성합니다.

        Generate an illustration of the given type for a story.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            caller_id: 인증된 호출자 ID (Authenticated caller UUID)
            data: 일러스트 생성 요청 (Illustration generation request)
            generator: 생성 게이트웨이 (Generation gateway)

        Raises:
            BadRequestError: 지원하지 않는 일러스트 유형 (Unknown illustration type)
            NotFoundError: 스토리를 찾을 수 없을 때 (Story not found)
            ForbiddenError: 소유자가 아닐 때 (Caller is not the owner)
            GenerationError: 생성 실패 시 (Generation backend failure)
        """
        if data.type not in ILLUSTRATION_TYPES:
            raise BadRequestError("Invalid illustration type", details=list(ILLUSTRATION_TYPES))

        story: Story = await self._get_story_or_404(db, data.story_id)
        ensure_owner(caller_id, story.user_id, "Not authorized to illustrate this story")
        # 장면 번호가 없으면 요청 프롬프트를 발췌문으로 사용 — Without a sequence the prompt is the excerpt
        excerpt: str = story.content if data.sequence is not None else data.prompt
        return await self._generate(db, story, data.type, generator, excerpt, sequence=data.sequence)

    async def generate_cover(
        self,
        db: AsyncSession,
        caller_id: UUID,
        story_id: UUID,
        generator: GenerationService,
    ) -> IllustrationResponse:
        """스토리 표지 일러스트를 생성합니다.

        Generate a cover illustration for a story.
        """
        story: Story = await self._get_story_or_404(db, story_id)
        ensure_owner(caller_id, story.user_id, "Not authorized to illustrate this story")
        return await self._generate(db, story, ILLUSTRATION_TYPE_COVER, generator, story.content)

    async def get_illustration(self, db: AsyncSession, illustration_id: UUID) -> IllustrationResponse:
        illustration: Illustration | None = await illustration_repository.get_by_id(db, illustration_id)
        if illustration is None:
            raise NotFoundError("Illustration not found")
        return IllustrationResponse.model_validate(illustration)

    async def list_story_illustrations(
        self,
        db: AsyncSession,
        story_id: UUID,
    ) -> list[IllustrationResponse]:
        """스토리의 일러스트 목록을 생성순으로 조회합니다.

        List a story's illustrations in creation order.

        Raises:
            NotFoundError: 스토리를 찾을 수 없을 때 (Story not found)
        """
        await self._get_story_or_404(db, story_id)
        illustrations = await illustration_repository.list_by_story(db, story_id)
        return [IllustrationResponse.model_validate(i) for i in illustrations]

    async def delete_illustration(
        self,
        db: AsyncSession,
        caller_id: UUID,
        illustration_id: UUID,
    ) -> None:
        """일러스트를 삭제합니다. 스토리 소유자만 가능.

        Delete an illustration record. Owner of the parent story only.
        The stored object is left in place.
        """
        illustration: Illustration | None = await illustration_repository.get_by_id(db, illustration_id)
        if illustration is None:
            raise NotFoundError("Illustration not found")

        story: Story = await self._get_story_or_404(db, illustration.story_id)
        ensure_owner(caller_id, story.user_id, "Not authorized to delete this illustration")
        await illustration_repository.delete(db, illustration_id)


# 싱글턴 인스턴스 — Singleton instance
illustration_service: IllustrationService = IllustrationService()
