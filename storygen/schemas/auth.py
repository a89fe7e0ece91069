"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers registration, login, token refresh/revocation, and current user info.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from storygen.schemas.common import CamelModel

# bcrypt 입력 한도 — bcrypt rejects passwords longer than 72 bytes
BCRYPT_MAX_PASSWORD_BYTES: int = 72


class RegisterRequest(CamelModel):
    """회원가입 요청 스키마.

    Registration request schema. All three fields are required and non-empty.

    Attributes:
        email: 로그인 이메일 (Login email, globally unique)
        password: 비밀번호 (Plain text, bcrypt-hashed on the server)
        name: 표시 이름 (Display name)
    """

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=72)
    name: str = Field(min_length=1, max_length=255)

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        """bcrypt 입력 한도(72바이트)를 UTF-8 기준으로 검사합니다."""
        if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
        return v


class LoginRequest(CamelModel):
    """로그인 요청 스키마.

    Login request schema.

    Attributes:
        email: 로그인 이메일 (Login email)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RefreshRequest(CamelModel):
    """토큰 갱신 요청 스키마.

    Token refresh request schema.
    Exchanges a whitelisted refresh token for a new token pair.
    """

    refresh_token: str = Field(min_length=1)  # 기존 리프레시 토큰 (Current refresh token)


class RevokeRequest(CamelModel):
    """리프레시 토큰 일괄 폐기 요청 스키마.

    Request to invalidate every refresh token of a user.
    """

    user_id: UUID


class TokenResponse(CamelModel):
    """토큰 발급 응답 스키마.

    Token issuance response schema, serialized as
    ``{"accessToken": ..., "refreshToken": ...}``.

    Attributes:
        access_token: JWT 액세스 토큰 (Short-lived access token, 5 min)
        refresh_token: 불투명 리프레시 토큰 (Opaque refresh token, 30 days)
    """

    access_token: str
    refresh_token: str


class UserMeResponse(CamelModel):
    """현재 사용자 정보 응답 스키마 (GET /auth/me).

    Current user info response schema.
    """

    id: UUID
    email: str
    name: str
    created_at: datetime
