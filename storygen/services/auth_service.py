"""인증 서비스 — 회원가입, 로그인, 토큰 갱신/폐기 비즈니스 로직.

Auth Service — Business logic for registration, login, and the refresh
token lifecycle. Every successful flow issues a fresh token pair and
whitelists the refresh token; prior refresh tokens stay valid so several
sessions can coexist.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from storygen.config import settings
from storygen.models.token import RefreshToken
from storygen.models.user import User
from storygen.repositories.auth_repository import auth_repository
from storygen.repositories.user_repository import user_repository
from storygen.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserMeResponse,
)
from storygen.utils.exceptions import (
    BadRequestError,
    DuplicateError,
    NotFoundError,
    UnauthorizedError,
)
from storygen.utils.jwt import TokenPair, generate_tokens
from storygen.utils.password import hash_password, verify_password


def _as_utc(value: datetime) -> datetime:
    # 타임존 없는 값은 UTC로 간주 — Naive timestamps are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    Manages registration, login, token refresh, and token revocation.
    """

    async def _issue_tokens(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> TokenResponse:
        """토큰 쌍을 발급하고 리프레시 토큰을 화이트리스트에 등록합니다.

        Issue a new token pair and whitelist its refresh token.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 토큰 소유 사용자 ID (Owning user UUID)

        Returns:
            TokenResponse: 토큰 응답 (Token response with access and refresh tokens)
        """
        tokens: TokenPair = generate_tokens(user_id)

        # 리프레시 토큰을 DB에 저장 — Persist refresh token hash to database
        expires_at: datetime = datetime.now(timezone.utc) + timedelta(
            days=settings.REFRESH_TOKEN_EXPIRE_DAYS
        )
        await auth_repository.add_refresh_token(
            db, user_id=user_id, refresh_token=tokens.refresh_token, expires_at=expires_at
        )

        return TokenResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    async def register(
        self,
        db: AsyncSession,
        data: RegisterRequest,
    ) -> TokenResponse:
        """회원가입을 처리합니다.

        Process user registration.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 회원가입 요청 데이터 (Registration request data)

        Returns:
            TokenResponse: 토큰 응답 (Token response)

        Raises:
            BadRequestError: 필수 항목이 비어있을 때 (Blank email, password or name)
            DuplicateError: 같은 이메일이 이미 존재할 때 (When the email already exists)
        """
        if not data.email.strip() or not data.password.strip() or not data.name.strip():
            raise BadRequestError("You must provide an email, password, and name.")

        # 이메일 중복 확인 — Check email uniqueness
        existing: User | None = await user_repository.get_by_email(db, data.email)
        if existing is not None:
            raise DuplicateError("User already exists.")

        user: User = await user_repository.create(
            db,
            {
                "email": data.email,
                "name": data.name,
                "password_hash": hash_password(data.password),
            },
        )
        return await self._issue_tokens(db, user.id)

    async def login(
        self,
        db: AsyncSession,
        data: LoginRequest,
    ) -> TokenResponse:
        """로그인을 처리합니다.

        Process login with email and password.

        Raises:
            NotFoundError: 등록되지 않은 이메일 (Unknown email)
            UnauthorizedError: 비밀번호 불일치 (Wrong password)
        """
        user: User | None = await user_repository.get_by_email(db, data.email)
        if user is None:
            raise NotFoundError("User not found")

        if not verify_password(data.password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")

        return await self._issue_tokens(db, user.id)

    async def refresh_tokens(
        self,
        db: AsyncSession,
        data: RefreshRequest,
    ) -> TokenResponse:
        """리프레시 토큰으로 새 토큰 쌍을 발급합니다.

        Exchange a whitelisted refresh token for a new pair. The presented
        token is invalidated, so each refresh token can be used once.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 리프레시 요청 데이터 (Refresh request data)

        Returns:
            TokenResponse: 새 토큰 응답 (New token response)

        Raises:
            UnauthorizedError: 미등록, 무효화 또는 만료된 토큰
                               (Unknown, invalidated or expired refresh token)
        """
        db_token: RefreshToken | None = await auth_repository.find_refresh_token(db, data.refresh_token)
        if db_token is None:
            raise UnauthorizedError("Invalid refresh token")

        # 무효 플래그와 만료는 각각 독립적으로 검사 — Flag and expiry are checked separately
        if not db_token.is_valid:
            raise UnauthorizedError("Refresh token has been revoked")
        if datetime.now(timezone.utc) >= _as_utc(db_token.expires_at):
            raise UnauthorizedError("Refresh token has expired")

        user: User | None = await user_repository.get_by_id(db, db_token.user_id)
        if user is None:
            raise UnauthorizedError("User not found")

        # 기존 토큰 무효화 후 새 토큰 발급 — Invalidate used token and issue new pair
        await auth_repository.invalidate_refresh_token(db, db_token)
        return await self._issue_tokens(db, user.id)

    async def revoke_refresh_tokens(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> None:
        """사용자의 모든 리프레시 토큰을 폐기합니다.

        Revoke every refresh token of a user. Idempotent.
        """
        await auth_repository.revoke_user_tokens(db, user_id)

    async def get_me(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> UserMeResponse:
        """현재 로그인한 사용자 정보를 반환합니다.

        Return the profile of the currently authenticated user.

        Raises:
            NotFoundError: 사용자 레코드가 없을 때 (User row no longer exists)
        """
        user: User | None = await user_repository.get_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return UserMeResponse.model_validate(user)


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
