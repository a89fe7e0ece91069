"""스토리, 일러스트, 오디오 SQLAlchemy ORM 모델 정의.

Story, Illustration and Audio SQLAlchemy ORM model definitions.
A story exclusively owns its illustrations and its audio narration:
deleting a story removes both (ORM cascade + ON DELETE CASCADE).

Tables:
    - stories: 생성/작성된 동화 (Generated or manually written stories)
    - illustrations: 표지 및 장면 이미지 (Cover and scene images)
    - audios: 스토리 낭독 오디오 (Narrated audio, one per story)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storygen.database import Base

# 일러스트 유형 — Illustration type tags
ILLUSTRATION_TYPE_COVER: str = "cover"
ILLUSTRATION_TYPE_SCENE: str = "illustration"
ILLUSTRATION_TYPES: tuple[str, ...] = (ILLUSTRATION_TYPE_COVER, ILLUSTRATION_TYPE_SCENE)


class Story(Base):
    """스토리 모델 — 어린이 동화 본문과 메타데이터.

    Story model — Children's story text and metadata.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        title: 제목 (Story title)
        content: 본문 (Story body text)
        age_range: 대상 연령대 라벨 (Target age range label, e.g. "5-7")
        author: 작성자 라벨 (Author label, "AI" for generated stories)
        characters: 등장인물 설명 (Optional character description)
        setting: 배경 설명 (Optional setting description)
        user_id: 소유 사용자 FK (Owner user foreign key)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Relationships:
        user: 소유 사용자 (Owning user)
        illustrations: 일러스트 목록 (Illustrations, cascade delete)
        audio: 낭독 오디오 (Audio narration, cascade delete)
    """

    __tablename__ = "stories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    age_range: Mapped[str] = mapped_column(String(50), nullable=False)
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)
    characters: Mapped[str | None] = mapped_column(Text, nullable=True)
    setting: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 소유 사용자 FK — Owner (사용자 삭제는 지원하지 않음, user deletion is not supported)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    user = relationship("User", back_populates="stories")
    illustrations = relationship(
        "Illustration",
        back_populates="story",
        cascade="all, delete-orphan",
        order_by="Illustration.created_at",
    )
    audio = relationship("Audio", back_populates="story", uselist=False, cascade="all, delete-orphan")


class Illustration(Base):
    """일러스트 모델 — 스토리에 속한 이미지.

    Illustration model — An image stored in the object store for a story.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        url: 영구 이미지 URL (Durable image URL)
        s3_key: 오브젝트 스토어 키 (Object-store key)
        type: 유형 태그 (Type tag, "cover" or "illustration")
        story_id: 소유 스토리 FK (Owning story foreign key)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "illustrations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    s3_key: Mapped[str] = mapped_column(String(512), nullable=False)
    type: Mapped[str] = mapped_column(String(20), default=ILLUSTRATION_TYPE_SCENE, nullable=False)
    story_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    story = relationship("Story", back_populates="illustrations")


class Audio(Base):
    """오디오 모델 — 스토리 낭독 파일.

    Audio model — Narrated audio file for a story (one per story).

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        url: 영구 오디오 URL (Durable audio URL)
        s3_key: 오브젝트 스토어 키 (Object-store key)
        story_id: 소유 스토리 FK, 고유 (Owning story foreign key, unique)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "audios"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    s3_key: Mapped[str] = mapped_column(String(512), nullable=False)
    story_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("stories.id", ondelete="CASCADE"), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    story = relationship("Story", back_populates="audio")
