"""스토리 서비스 — 스토리 CRUD, AI 생성, 낭독 오디오 비즈니스 로직.

Story Service — Business logic for story CRUD, AI story generation
and narrated audio. Mutations require the caller to own the story.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from storygen.models.story import Audio, Story
from storygen.models.user import User
from storygen.repositories.audio_repository import audio_repository
from storygen.repositories.story_repository import story_repository
from storygen.repositories.user_repository import user_repository
from storygen.schemas.story import (
    AudioAsset,
    AudioGenerateResponse,
    AudioResponse,
    StoryCreate,
    StoryDetailResponse,
    StoryGenerateRequest,
    StoryUpdate,
)
from storygen.services.generation_service import (
    GeneratedAsset,
    GeneratedStory,
    GenerationService,
    StoryPrompt,
)
from storygen.utils.exceptions import ForbiddenError, NotFoundError

# AI 생성 스토리의 작성자 — Author recorded for generated stories
AI_AUTHOR: str = "AI"


def ensure_owner(
    caller_id: UUID,
    owner_id: UUID,
    detail: str = "Not authorized to modify this story",
) -> None:
    """호출자가 리소스 소유자인지 확인합니다.

    Raise 403 unless the authenticated caller owns the resource.

    Raises:
        ForbiddenError: 소유자가 아닐 때 (Caller is not the owner)
    """
    if caller_id != owner_id:
        raise ForbiddenError(detail)


def normalize_characters(characters: str | list[str] | None) -> tuple[str, ...]:
    """등장인물 입력을 이름 목록으로 정규화합니다.

    Accept a comma-separated string or a list of names and return the
    non-blank, stripped names in order.
    """
    if characters is None:
        return ()
    if isinstance(characters, str):
        characters = characters.split(",")
    return tuple(name.strip() for name in characters if name and name.strip())


class StoryService:
    """스토리 관련 비즈니스 로직을 처리하는 서비스.

    Service handling story business logic.
    """

    def _to_response(self, story: Story) -> StoryDetailResponse:
        return StoryDetailResponse.model_validate(story)

    async def _get_or_404(self, db: AsyncSession, story_id: UUID) -> Story:
        story: Story | None = await story_repository.get_detail(db, story_id)
        if story is None:
            raise NotFoundError("Story not found")
        return story

    async def list_stories(self, db: AsyncSession) -> list[StoryDetailResponse]:
        """모든 스토리를 조회합니다.

        List every story with its owner, illustrations and audio.
        """
        stories = await story_repository.list_all(db)
        return [self._to_response(s) for s in stories]

    async def get_story(self, db: AsyncSession, story_id: UUID) -> StoryDetailResponse:
        """스토리 상세를 조회합니다.

        Raises:
            NotFoundError: 스토리를 찾을 수 없을 때 (Story not found)
        """
        story: Story = await self._get_or_404(db, story_id)
        return self._to_response(story)

    async def list_user_stories(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> list[StoryDetailResponse]:
        """특정 사용자의 스토리를 최신순으로 조회합니다.

        List one user's stories, newest first.

        Raises:
            NotFoundError: 스토리가 하나도 없을 때 (User has no stories)
        """
        stories = await story_repository.list_by_user(db, user_id)
        if not stories:
            raise NotFoundError("No stories found for this user")
        return [self._to_response(s) for s in stories]

    async def create_story(
        self,
        db: AsyncSession,
        caller_id: UUID,
        data: StoryCreate,
    ) -> StoryDetailResponse:
        """직접 작성한 스토리를 저장합니다.

        Persist a manually written story for ``data.user_id``.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            caller_id: 인증된 호출자 ID (Authenticated caller UUID)
            data: 스토리 생성 데이터 (Story creation data)

        Raises:
            NotFoundError: 대상 사용자가 없을 때 (Target user does not exist)
            ForbiddenError: 다른 사용자 명의로 생성할 때 (Creating on behalf of another user)
        """
        user: User | None = await user_repository.get_by_id(db, data.user_id)
        if user is None:
            raise NotFoundError("User not found")
        ensure_owner(caller_id, user.id, "Not authorized to create stories for this user")

        story: Story = await story_repository.create(db, data.model_dump())
        return self._to_response(await self._get_or_404(db, story.id))

    async def generate_story(
        self,
        db: AsyncSession,
        caller_id: UUID,
        data: StoryGenerateRequest,
        generator: GenerationService,
    ) -> StoryDetailResponse:
        """AI로 스토리를 생성하고 호출자 소유로 저장합니다.

        Generate a story and persist it owned by the caller with author "AI".

        Raises:
            NotFoundError: 호출자 사용자 레코드가 없을 때 (Caller's user row is gone)
            GenerationError: 생성 실패 시 (Generation backend failure)
        """
        user: User | None = await user_repository.get_by_id(db, caller_id)
        if user is None:
            raise NotFoundError("User not found")

        characters: tuple[str, ...] = normalize_characters(data.characters)
        generated: GeneratedStory = await generator.generate_story(
            StoryPrompt(
                age_range=data.age_range,
                title=data.title,
                theme=data.theme,
                characters=characters,
                setting=data.setting,
            )
        )

        story: Story = await story_repository.create(
            db,
            {
                "title": generated.title,
                "content": generated.content,
                "age_range": data.age_range,
                "author": AI_AUTHOR,
                "characters": ", ".join(characters) or None,
                "setting": data.setting,
                "user_id": user.id,
            },
        )
        return self._to_response(await self._get_or_404(db, story.id))

    async def update_story(
        self,
        db: AsyncSession,
        caller_id: UUID,
        story_id: UUID,
        data: StoryUpdate,
    ) -> StoryDetailResponse:
        """스토리를 부분 수정합니다. 소유자만 가능.

        Partially update a story. Owner only.
        """
        story: Story = await self._get_or_404(db, story_id)
        ensure_owner(caller_id, story.user_id, "Not authorized to update this story")

        await story_repository.update(db, story_id, data.model_dump(exclude_unset=True, exclude_none=True))
        return self._to_response(await self._get_or_404(db, story_id))

    async def delete_story(
        self,
        db: AsyncSession,
        caller_id: UUID,
        story_id: UUID,
    ) -> None:
        """스토리를 삭제합니다. 일러스트와 오디오도 함께 삭제됩니다.

        Delete a story. Its illustrations and audio are removed with it.

        Raises:
            NotFoundError: 스토리를 찾을 수 없을 때 (Story not found)
            ForbiddenError: 소유자가 아닐 때 (Caller is not the owner)
        """
        story: Story = await self._get_or_404(db, story_id)
        ensure_owner(caller_id, story.user_id, "Not authorized to delete this story")
        await story_repository.delete(db, story_id)

    async def generate_audio(
        self,
        db: AsyncSession,
        caller_id: UUID,
        story_id: UUID,
        generator: GenerationService,
    ) -> AudioGenerateResponse:
        """스토리 낭독 오디오를 생성합니다. 기존 오디오는 교체됩니다.

        Narrate a story and store the audio, replacing any previous one.
        """
        story: Story = await self._get_or_404(db, story_id)
        ensure_owner(caller_id, story.user_id, "Not authorized to generate audio for this story")

        asset: GeneratedAsset = await generator.generate_story_audio(story.content)
        await audio_repository.upsert_for_story(db, story.id, url=asset.url, s3_key=asset.key)

        return AudioGenerateResponse(
            message="Audio generated successfully",
            audio=AudioAsset(url=asset.url, s3_key=asset.key),
        )

    async def get_audio(self, db: AsyncSession, story_id: UUID) -> AudioResponse:
        """스토리의 오디오를 조회합니다.

        Raises:
            NotFoundError: 스토리 또는 오디오가 없을 때 (Story or audio missing)
        """
        await self._get_or_404(db, story_id)
        audio: Audio | None = await audio_repository.get_by_story(db, story_id)
        if audio is None:
            raise NotFoundError("Audio not found")
        return AudioResponse.model_validate(audio)


# 싱글턴 인스턴스 — Singleton instance
story_service: StoryService = StoryService()
