"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for common error patterns.
Every error is rendered at the boundary as ``{"error": ..., "details": ...}``
by the handlers below (``register_exception_handlers``).

Usage:
    from storygen.utils.exceptions import NotFoundError, DuplicateError
    raise NotFoundError("Story not found")
    raise DuplicateError("User already exists.")
"""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """API 예외 베이스 — 상태 코드, 메시지, 부가 정보.

    Base API exception carrying an optional ``details`` payload
    that is echoed in the error response body.
    """

    def __init__(self, status_code: int, detail: str, details: Any = None) -> None:
        super().__init__(status_code=status_code, detail=detail)
        self.details: Any = details


class NotFoundError(APIError):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    Raised when a referenced entity (user, story, illustration, audio) does not exist.
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status.HTTP_404_NOT_FOUND, detail)


class DuplicateError(APIError):
    """중복 리소스 생성 시도 시 사용.

    Raised when creating a resource that violates a uniqueness constraint
    (duplicate email). Reported as 400 to match the public API contract.
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status.HTTP_400_BAD_REQUEST, detail)


class ForbiddenError(APIError):
    """403 Forbidden 예외 — 소유자가 아닐 때 사용.

    Raised when the authenticated caller is not the owner of the resource.
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status.HTTP_403_FORBIDDEN, detail)


class UnauthorizedError(APIError):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    Raised when credentials are wrong or a token is missing, invalid,
    expired or revoked.
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail)


class BadRequestError(APIError):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    Raised when the request data is invalid beyond what Pydantic validation catches.
    """

    def __init__(self, detail: str = "Bad request", details: Any = None) -> None:
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, details)


class GenerationError(APIError):
    """500 생성 백엔드 오류 — 텍스트/이미지/음성 생성 실패.

    Raised when the generation backend fails, returns an error status,
    or returns an unusable payload.
    """

    def __init__(self, detail: str = "Generation failed", details: Any = None) -> None:
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail, details)


class StorageError(APIError):
    """500 스토리지 오류 — 오브젝트 스토어 업로드 실패.

    Raised when the object store rejects or fails an upload.
    """

    def __init__(self, detail: str = "Storage operation failed", details: Any = None) -> None:
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail, details)


# ---------------------------------------------------------------------------
# 예외 핸들러 — {"error": ..., "details": ...} 응답으로 변환
# Exception handlers rendering every error as {"error": ..., "details": ...}
# ---------------------------------------------------------------------------

def _error_body(message: str, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    return body


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """HTTPException(APIError 포함)을 오류 응답으로 변환합니다."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), getattr(exc, "details", None)),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 검증 오류 — 누락/잘못된 필드 목록과 함께 400 반환.

    Request validation failure, reported as 400 with the offending field names.
    """
    fields: list[str] = []
    for error in exc.errors():
        # ("body", "ageRange") -> "ageRange"
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        if field not in fields:
            fields.append(field)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Missing required fields", fields),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """앱에 예외 핸들러를 등록합니다."""
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
