"""인증 레포지토리 — 리프레시 토큰 화이트리스트 CRUD.

Auth Repository — Refresh token whitelist operations.
Tokens are stored and looked up by hash only. Rows are never deleted:
rotation and revocation set ``is_valid`` to False (soft delete).
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storygen.models.token import RefreshToken
from storygen.utils.jwt import hash_token


class AuthRepository:
    """인증 관련 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling the refresh token whitelist.
    """

    async def add_refresh_token(
        self,
        db: AsyncSession,
        user_id: UUID,
        refresh_token: str,
        expires_at: datetime,
    ) -> RefreshToken:
        """리프레시 토큰을 화이트리스트에 추가합니다.

        Whitelist a refresh token by persisting its hash.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 토큰 소유자 사용자 ID (Token owner user UUID)
            refresh_token: 평문 리프레시 토큰 — 해시만 저장됨 (Raw token, only its hash is stored)
            expires_at: 토큰 만료 일시 (Token expiration timestamp)

        Returns:
            RefreshToken: 생성된 리프레시 토큰 레코드 (Created refresh token record)
        """
        db_token: RefreshToken = RefreshToken(
            user_id=user_id,
            hashed_token=hash_token(refresh_token),
            expires_at=expires_at,
        )
        db.add(db_token)
        await db.flush()
        await db.refresh(db_token)
        return db_token

    async def find_refresh_token(
        self,
        db: AsyncSession,
        refresh_token: str,
    ) -> RefreshToken | None:
        """평문 리프레시 토큰의 해시로 레코드를 조회합니다.

        Retrieve a refresh token record by the hash of the presented raw token.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            refresh_token: 클라이언트가 제출한 평문 토큰 (Raw token presented by the client)

        Returns:
            RefreshToken | None: 조회된 토큰 레코드 또는 None (Found token record or None)
        """
        query: Select = select(RefreshToken).where(
            RefreshToken.hashed_token == hash_token(refresh_token)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def invalidate_refresh_token(
        self,
        db: AsyncSession,
        db_token: RefreshToken,
    ) -> None:
        """사용된 리프레시 토큰을 무효화합니다 (소프트 삭제).

        Soft-delete a refresh token after use.
        """
        db_token.is_valid = False
        await db.flush()

    async def revoke_user_tokens(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> None:
        """특정 사용자의 모든 리프레시 토큰을 무효화합니다.

        Invalidate every refresh token of a user (logout from all devices).
        Succeeds even when the user has no tokens.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 대상 사용자 ID (Target user UUID)
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .values(is_valid=False)
        )
        await db.execute(stmt)
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
auth_repository: AuthRepository = AuthRepository()
