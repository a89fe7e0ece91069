"""스토리지 서비스 — S3 또는 로컬 파일 저장.

Storage Service — Durable storage for generated images and audio.
AWS 키가 비어있으면 자동으로 로컬 모드로 전환됩니다.
(Falls back to a local uploads directory when AWS credentials are missing.)
"""

import logging
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError

from storygen.config import settings
from storygen.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

# 로컬 업로드 디렉토리 — .env의 LOCAL_UPLOADS_DIR 또는 프로젝트 루트의 uploads/
_PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent
UPLOADS_DIR: Path = Path(settings.LOCAL_UPLOADS_DIR) if settings.LOCAL_UPLOADS_DIR else _PROJECT_ROOT / "uploads"


class StorageService:
    """파일 업로드 서비스 — S3 또는 로컬 모드 자동 선택."""

    def __init__(self) -> None:
        self._client = None

    @property
    def is_local(self) -> bool:
        return not settings.AWS_ACCESS_KEY_ID or not settings.AWS_S3_BUCKET

    @property
    def client(self):
        if self.is_local:
            return None
        if self._client is None:
            import boto3
            from botocore.config import Config as BotoConfig

            self._client = boto3.client(
                "s3",
                region_name=settings.AWS_S3_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    def public_url(self, key: str) -> str:
        """저장 키의 조회 URL을 반환합니다."""
        if self.is_local:
            return f"{settings.PUBLIC_BASE_URL}/uploads/{key}"
        return f"https://{settings.AWS_S3_BUCKET}.s3.{settings.AWS_S3_REGION}.amazonaws.com/{key}"

    def save_local(self, key: str, data: bytes) -> str:
        """로컬 파일 저장. 경로를 반환합니다."""
        path = UPLOADS_DIR / key
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return str(path)

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> str:
        """바이트 데이터를 업로드하고 영구 URL을 반환합니다.

        Upload bytes under ``key`` and return the durable retrieval URL.

        Raises:
            StorageError: 업로드 실패 시 (When the object store rejects the upload)
        """
        logger.info("Uploading %d bytes to %s (%s)", len(data), key, "local" if self.is_local else settings.AWS_S3_BUCKET)
        try:
            if self.is_local:
                self.save_local(key, data)
            else:
                self.client.put_object(
                    Bucket=settings.AWS_S3_BUCKET,
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                )
        except (BotoCoreError, ClientError, OSError) as exc:
            logger.error("Upload of %s failed: %s", key, exc)
            raise StorageError("Failed to upload file to storage", details=str(exc)) from exc

        url = self.public_url(key)
        logger.info("Upload successful: %s", url)
        return url

    def upload_file(self, key: str, path: Path, content_type: str) -> str:
        """로컬 파일을 업로드하고 영구 URL을 반환합니다."""
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise StorageError("Failed to read file for upload", details=str(exc)) from exc
        return self.upload_bytes(key, data, content_type)


storage_service: StorageService = StorageService()
