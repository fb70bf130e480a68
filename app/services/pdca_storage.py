import logging
import re
import uuid

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import HTTPException

from app.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_file_name(file_name: str) -> str:
    name = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "file"


class StorageService:
    @staticmethod
    def is_configured() -> bool:
        return bool(
            settings.s3_endpoint_url
            and settings.s3_access_key
            and settings.s3_secret_key
        )

    @staticmethod
    def _get_client():  # type: ignore[return]
        if not StorageService.is_configured():
            raise HTTPException(
                status_code=503,
                detail="Evidence file storage is not configured",
            )
        return boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.s3_access_key,
            aws_secret_access_key=settings.s3_secret_key,
            region_name=settings.s3_region,
            config=Config(signature_version="s3v4"),
        )

    @staticmethod
    def generate_file_ref(ttfu_id: str, file_name: str) -> str:
        unique = uuid.uuid4().hex[:12]
        return f"evidence/{ttfu_id}/{unique}/{_safe_file_name(file_name)}"

    @staticmethod
    def _presign(operation: str, params: dict) -> str:
        client = StorageService._get_client()
        try:
            url: str = client.generate_presigned_url(
                operation,
                Params={"Bucket": settings.s3_bucket_name, **params},
                ExpiresIn=settings.s3_presigned_url_expiry,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Presigning %s failed: %s", operation, exc)
            raise HTTPException(
                status_code=503,
                detail="Evidence file storage is unavailable",
            )
        return url

    @staticmethod
    def generate_upload_url(file_ref: str, mime_type: str) -> str:
        return StorageService._presign(
            "put_object", {"Key": file_ref, "ContentType": mime_type}
        )

    @staticmethod
    def generate_download_url(file_ref: str) -> str:
        return StorageService._presign("get_object", {"Key": file_ref})


storage = StorageService()
