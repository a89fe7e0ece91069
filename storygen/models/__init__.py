"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: 사용자 (Users)
    token: 리프레시 토큰 화이트리스트 (Refresh token whitelist)
    story: 스토리, 일러스트, 오디오 (Stories, illustrations, audio)
"""

from storygen.models.user import User
from storygen.models.token import RefreshToken
from storygen.models.story import Story, Illustration, Audio

__all__ = [
    "User",
    "RefreshToken",
    "Story", "Illustration", "Audio",
]
