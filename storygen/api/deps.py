"""FastAPI 의존성 주입 모듈 — 인증 및 외부 클라이언트.

FastAPI dependency injection module — Authentication and shared clients.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. HTTPBearer가 토큰을 추출 — 헤더가 없거나 스킴이 다르면 401
       (HTTPBearer extracts the token; missing header or wrong scheme is 401)
    3. decode_access_token()이 서명과 만료를 검증
       (decode_access_token verifies signature and expiry)
    4. 페이로드의 "userId"로 AuthContext를 생성 — DB 조회 없음
       (AuthContext is built from the "userId" claim without a DB lookup)
"""

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storygen.services.generation_service import GenerationService, generation_service
from storygen.services.storage_service import StorageService, storage_service
from storygen.utils.exceptions import UnauthorizedError
from storygen.utils.jwt import USER_ID_CLAIM, decode_access_token

# HTTP Bearer 토큰 추출기 — 오류는 직접 401로 변환
# (Extracts the bearer token; failures are turned into 401 below)
security: HTTPBearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """검증된 호출자 정보.

    Verified caller identity, passed explicitly to handlers.
    """

    user_id: UUID


async def get_auth_context(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AuthContext:
    """액세스 토큰에서 호출자 정보를 추출합니다.

    Verify the bearer access token and return the caller's AuthContext.

    Raises:
        UnauthorizedError: 토큰이 없거나 유효하지 않거나 만료됨
                           (Missing, invalid or expired token)
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Access token required")

    try:
        payload: dict = decode_access_token(credentials.credentials)
        return AuthContext(user_id=UUID(str(payload[USER_ID_CLAIM])))
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Access token has expired")
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise UnauthorizedError("Invalid access token")


def get_generation_service() -> GenerationService:
    """생성 게이트웨이 의존성 — 테스트에서 오버라이드됩니다."""
    return generation_service


def get_storage_service() -> StorageService:
    return storage_service
