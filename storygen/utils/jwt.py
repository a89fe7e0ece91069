"""토큰 발급 및 검증 유틸리티 모듈.

Token issuing and verification utility module.
Access tokens are short-lived signed JWTs; refresh tokens are opaque
random strings that are only meaningful through the refresh token whitelist.

Access Token Payload Structure:
    {
        "userId": "user_uuid",   # 사용자 ID — 유일한 애플리케이션 클레임 (only application claim)
        "exp": 1234567890        # 만료 시간 UNIX timestamp (Expiration, issuance + 5 min)
    }
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import jwt

from storygen.config import settings

# 액세스 토큰 사용자 클레임 이름 — Name of the user identifier claim
USER_ID_CLAIM: str = "userId"

# 리프레시 토큰 엔트로피 바이트 수 — 16 bytes = 128 bits
REFRESH_TOKEN_BYTES: int = 16


@dataclass(frozen=True)
class TokenPair:
    """액세스/리프레시 토큰 쌍.

    Access/refresh token pair returned by every successful auth flow.
    """

    access_token: str
    refresh_token: str


def create_access_token(user_id: UUID | str) -> str:
    """JWT 액세스 토큰을 생성합니다.

    Generate a signed access token carrying only the user identifier.
    Token expires after JWT_ACCESS_TOKEN_EXPIRE_MINUTES (default: 5 min).

    Args:
        user_id: 토큰 소유 사용자 ID (Owning user identifier)

    Returns:
        str: 인코딩된 JWT 문자열 (Encoded JWT token string)
    """
    # 만료 시간 설정 — 현재 UTC 시간 + 설정된 분 수 (Set expiration from current UTC + configured minutes)
    expire: datetime = datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode: dict[str, Any] = {USER_ID_CLAIM: str(user_id), "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token() -> str:
    """불투명 리프레시 토큰을 생성합니다.

    Generate a cryptographically random, URL-safe opaque refresh token
    (128 bits of entropy, no embedded claims).

    Returns:
        str: 리프레시 토큰 문자열 (Opaque refresh token string)
    """
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


def generate_tokens(user_id: UUID | str) -> TokenPair:
    """액세스 토큰과 리프레시 토큰 쌍을 생성합니다.

    Issue a new access/refresh token pair for a user.
    """
    return TokenPair(
        access_token=create_access_token(user_id),
        refresh_token=create_refresh_token(),
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """액세스 토큰을 디코딩하고 검증합니다.

    Decode and verify an access token (signature and expiry only).
    Does not consult the database.

    Args:
        token: JWT 토큰 문자열 (Encoded JWT token string)

    Returns:
        dict[str, Any]: 디코딩된 페이로드 딕셔너리 (Decoded payload dictionary)

    Raises:
        jwt.ExpiredSignatureError: 토큰 만료 시 (When token has expired)
        jwt.InvalidTokenError: 유효하지 않은 토큰 (When token is invalid or lacks userId)
    """
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["exp"]},
    )
    if not payload.get(USER_ID_CLAIM):
        raise jwt.InvalidTokenError("Token has no userId claim")
    return payload


def hash_token(token: str) -> str:
    """리프레시 토큰의 SHA-512 해시를 반환합니다.

    Return the SHA-512 hex digest used as the refresh token whitelist key.
    """
    return hashlib.sha512(token.encode("utf-8")).hexdigest()
