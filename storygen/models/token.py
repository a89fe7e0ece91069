"""리프레시 토큰 모델 — 리프레시 토큰 화이트리스트.

Refresh Token model — Whitelist of issued refresh tokens.
Only the SHA-512 hash of the opaque token is stored. Rows are never
deleted; rotation and revocation flip ``is_valid`` to False.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storygen.database import Base


class RefreshToken(Base):
    """리프레시 토큰 테이블.

    Refresh token table for managing long-lived authentication sessions.

    Attributes:
        id: 고유 식별자 (Primary key UUID)
        hashed_token: 토큰 해시 — 조회 키 (SHA-512 hex digest, lookup key)
        user_id: 소유 사용자 ID (Owner user UUID)
        is_valid: 유효 여부 (False after rotation or revocation)
        expires_at: 만료 일시 (Expiration timestamp, creation + 30 days)
        created_at: 생성 일시 (Creation timestamp)
        updated_at: 수정 일시 (Last update timestamp)
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    hashed_token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_valid: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    user = relationship("User", back_populates="refresh_tokens")
