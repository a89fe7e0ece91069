"""상태 확인 라우터.

Health Router — Root banner and health check for load balancers and monitoring.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from storygen.api.deps import get_storage_service
from storygen.config import settings
from storygen.services.storage_service import StorageService

router: APIRouter = APIRouter()


@router.get("/")
async def root() -> dict[str, str]:
    return {"message": f"Welcome to the {settings.APP_NAME}"}


@router.get("/health")
async def health_check(
    storage: Annotated[StorageService, Depends(get_storage_service)],
) -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint. Also reports which storage backend is active.
    """
    return {"status": "ok", "storage": "local" if storage.is_local else "s3"}
