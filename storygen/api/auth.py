"""인증 라우터 — 회원가입, 로그인, 토큰 갱신/폐기, 프로필 조회.

Auth Router — Registration, login, token refresh/revocation and profile endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storygen.api.deps import AuthContext, get_auth_context
from storygen.database import get_db
from storygen.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    RevokeRequest,
    TokenResponse,
    UserMeResponse,
)
from storygen.schemas.common import MessageResponse
from storygen.services.auth_service import auth_service
from storygen.services.story_service import ensure_owner

router: APIRouter = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """회원가입 — 사용자 생성 후 토큰 쌍 발급.

    Register a new user and issue a token pair.
    """
    result: TokenResponse = await auth_service.register(db, data)
    await db.commit()
    return result


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """로그인 — 이메일/비밀번호 확인 후 토큰 쌍 발급.

    Verify email and password and issue a token pair.
    """
    result: TokenResponse = await auth_service.login(db, data)
    await db.commit()
    return result


@router.post("/refresh-token", response_model=TokenResponse)
async def refresh_token(
    data: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """토큰 갱신 — 리프레시 토큰으로 새 토큰 쌍 발급.

    Exchange a refresh token for a new pair. The old refresh token is invalidated.
    """
    result: TokenResponse = await auth_service.refresh_tokens(db, data)
    await db.commit()
    return result


@router.post("/revoke-refresh-tokens", response_model=MessageResponse)
async def revoke_refresh_tokens(
    data: RevokeRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
) -> MessageResponse:
    """사용자의 모든 리프레시 토큰 폐기. 본인만 가능.

    Revoke every refresh token of the caller.
    """
    ensure_owner(ctx.user_id, data.user_id, "Not authorized to revoke tokens for this user")
    await auth_service.revoke_refresh_tokens(db, data.user_id)
    await db.commit()
    return MessageResponse(message=f"Tokens revoked for user with id #{data.user_id}")


@router.get("/me", response_model=UserMeResponse)
async def get_me(
    db: Annotated[AsyncSession, Depends(get_db)],
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
) -> UserMeResponse:
    """현재 사용자 프로필 조회.

    Get the profile of the currently authenticated user.
    """
    return await auth_service.get_me(db, ctx.user_id)
