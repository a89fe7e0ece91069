"""사용자 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.
A user owns zero or more stories and refresh tokens.

Tables:
    - users: 사용자 계정 (User accounts, email is globally unique)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storygen.database import Base


class User(Base):
    """사용자 모델 — 시스템 사용자 계정 정보.

    User model — System user account information.
    Users are created at registration and never deleted.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        email: 로그인 이메일 (Login email, globally unique)
        name: 표시 이름 (Display name)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Relationships:
        stories: 작성한 스토리 목록 (Stories owned by the user)
        refresh_tokens: 리프레시 토큰 목록 (Whitelisted refresh tokens)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 로그인 이메일 — Login email (전역 고유, globally unique)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    # 표시 이름 — Display name
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    stories = relationship("Story", back_populates="user")
    refresh_tokens = relationship("RefreshToken", back_populates="user")
